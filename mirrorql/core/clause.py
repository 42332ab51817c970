"""Clause compilation.

Turns operator-qualified query values into a parameterized SQL fragment plus
its bound values. Fragment text is produced by a :class:`FragmentBuilder`;
the compiler checks each fragment's ``?`` placeholders against the values it
returns and joins the fragments with ``and``.
"""

from abc import ABC, abstractmethod
from collections.abc import Collection, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable, Final, NamedTuple, Optional, Union

from sqlglot import exp

from mirrorql.constants import FilterKey
from mirrorql.core.codecs import parse_balance_value, parse_timestamp_param
from mirrorql.core.entity_id import EntityId
from mirrorql.core.keys import parse_public_key
from mirrorql.core.operators import SQL_OPERATORS, Operator, OperatorValue, RawQueryValue, parse_operator_value
from mirrorql.exceptions import InvalidArgumentError, InvalidClauseError
from mirrorql.parameters import convert_qmark_to_numeric, count_qmark_placeholders
from mirrorql.utils.logging import FilterEvent, get_logger, log_event

if TYPE_CHECKING:
    from mirrorql.config import QueryConfig

__all__ = (
    "CallableFragmentBuilder",
    "Clause",
    "ColumnFragmentBuilder",
    "FragmentBuilder",
    "compile_clause",
    "parse_account_id_query_param",
    "parse_balance_query_param",
    "parse_public_key_query_param",
    "parse_timestamp_query_param",
)

logger = get_logger("core.clause")

Fragment = tuple[str, Any]
ValueEncoder = Callable[[str], Any]

_COMPARISONS: Final[dict[Operator, type[exp.Binary]]] = {
    Operator.EQ: exp.EQ,
    Operator.NE: exp.NEQ,
    Operator.LT: exp.LT,
    Operator.LTE: exp.LTE,
    Operator.GT: exp.GT,
    Operator.GTE: exp.GTE,
}


class Clause(NamedTuple):
    """A SQL condition with ``?`` placeholders and the values bound to them."""

    text: str
    values: list[Any]

    @classmethod
    def join(cls, *clauses: "Clause", separator: str = " and ") -> "Clause":
        """Combine clauses, skipping empty ones."""
        texts: list[str] = []
        values: list[Any] = []
        for clause in clauses:
            if not clause.text:
                continue
            texts.append(clause.text)
            values.extend(clause.values)
        return cls(separator.join(texts), values)

    def to_numeric(self) -> "Clause":
        """Render the placeholders as PostgreSQL ``$n`` parameters."""
        return Clause(convert_qmark_to_numeric(self.text), list(self.values))


class FragmentBuilder(ABC):
    """Produces the SQL fragment for one operator/value pair."""

    @abstractmethod
    def build(self, operator: Operator, value: Any) -> Fragment:
        """Return ``(text, value)`` where ``value`` may be a list for multiple placeholders."""

    def build_in(self, values: list[Any]) -> Fragment:
        """Return the fragment matching any of the equality values."""
        return self.build(Operator.EQ, list(values))


class ColumnFragmentBuilder(FragmentBuilder):
    """Compares one column against a placeholder.

    ``account.id`` is rendered as column ``id`` of table ``account``. A list
    value for ``eq`` renders ``IN (?, ...)`` and for ``ne`` ``NOT ... IN``.
    ``ne`` renders as ``<>``, not the ``!=`` of ``SQL_OPERATORS``; use
    :class:`CallableFragmentBuilder` where the exact text matters.
    """

    __slots__ = ("_column", "_operator_overrides")

    def __init__(self, column: str, operator_overrides: "Optional[Mapping[Operator, Operator]]" = None) -> None:
        self._column = column
        self._operator_overrides = dict(operator_overrides or {})

    def _column_expression(self) -> exp.Column:
        table, _, name = self._column.rpartition(".")
        return exp.column(name, table=table or None)

    def build(self, operator: Operator, value: Any) -> Fragment:
        operator = self._operator_overrides.get(operator, operator)
        column = self._column_expression()
        if isinstance(value, list):
            if operator not in {Operator.EQ, Operator.NE}:
                msg = f"Operator {operator} cannot compare {self._column} against a list"
                raise InvalidClauseError(msg)
            condition: exp.Expression = exp.In(this=column, expressions=[exp.Placeholder() for _ in value])
            if operator is Operator.NE:
                condition = exp.Not(this=condition)
            return condition.sql(), value
        return _COMPARISONS[operator](this=column, expression=exp.Placeholder()).sql(), value


class CallableFragmentBuilder(FragmentBuilder):
    """Adapts a plain function ``fn(sql_operator, value) -> (text, value)``.

    The function receives the padded SQL operator, e.g. ``" >= "``.
    """

    __slots__ = ("_fn", "_in_fn")

    def __init__(
        self,
        fn: "Callable[[str, Any], Any]",
        in_fn: "Optional[Callable[[list[Any]], Any]]" = None,
    ) -> None:
        self._fn = fn
        self._in_fn = in_fn

    def build(self, operator: Operator, value: Any) -> Fragment:
        return self._fn(SQL_OPERATORS[operator], value)

    def build_in(self, values: list[Any]) -> Fragment:
        if self._in_fn is None:
            return super().build_in(values)
        return self._in_fn(list(values))


def _check_fragment(result: Any, single_value: bool = False) -> "tuple[str, list[Any]]":
    if not isinstance(result, tuple) or len(result) != 2 or not isinstance(result[0], str):
        msg = f"Fragment builder must return a (text, value) pair, got {result!r}"
        raise InvalidClauseError(msg)

    text, value = result
    values = list(value) if isinstance(value, list) else [value]
    if single_value and isinstance(value, list) and len(values) != 1:
        msg = f"Fragment {text!r} must bind exactly one value, got {len(values)}"
        raise InvalidClauseError(msg)

    placeholders = count_qmark_placeholders(text)
    if placeholders != len(values):
        msg = f"Fragment {text!r} has {placeholders} placeholder(s) but {len(values)} value(s)"
        raise InvalidClauseError(msg)
    return text, values


def _as_pairs(raw: "Union[RawQueryValue, Sequence[OperatorValue]]") -> list[OperatorValue]:
    if raw is None:
        return []
    if isinstance(raw, (str, int)):
        raw = [raw]
    return [item if isinstance(item, OperatorValue) else parse_operator_value(item) for item in raw]


def compile_clause(
    raw: "Union[RawQueryValue, Sequence[OperatorValue]]",
    fragment_builder: "Union[FragmentBuilder, Callable[[str, Any], Any]]",
    value_encoder: Optional[ValueEncoder] = None,
    aggregate_eq: bool = False,
    allowed_operators: "Optional[Collection[Operator]]" = None,
    param_name: Optional[str] = None,
) -> Clause:
    """Compile repeated query values into one parameterized clause.

    Args:
        raw: Query value(s) as tokens or already parsed pairs.
        fragment_builder: Builder for each fragment; a plain function is
            wrapped in :class:`CallableFragmentBuilder`.
        value_encoder: Converts each raw value to its bound form. A ``None``
            result drops the pair.
        aggregate_eq: Combine all ``eq`` values into a single trailing
            ``IN`` fragment instead of one fragment each.
        allowed_operators: Operators accepted for this parameter.
        param_name: Query key reported when an operator is not allowed.

    Raises:
        InvalidArgumentError: If an operator is not in ``allowed_operators``.
        InvalidClauseError: If a fragment's placeholders and values disagree.

    Returns:
        The clause; ``Clause("", [])`` when nothing is retained.
    """
    if not isinstance(fragment_builder, FragmentBuilder):
        fragment_builder = CallableFragmentBuilder(fragment_builder)

    retained: dict[tuple[Operator, Any], Any] = {}
    for pair in _as_pairs(raw):
        if allowed_operators is not None and pair.operator not in allowed_operators:
            log_event(
                logger,
                FilterEvent.OPERATOR_REJECTED,
                "Operator %s not allowed for %s",
                pair.operator,
                param_name,
                key=param_name,
                operator=pair.operator,
                value=pair.value,
            )
            raise InvalidArgumentError.for_params(param_name or str(pair))
        encoded = value_encoder(pair.value) if value_encoder is not None else pair.value
        if encoded is None:
            log_event(
                logger,
                FilterEvent.VALUE_DROPPED,
                "Dropped unparsable value %r",
                pair.value,
                key=param_name,
                operator=pair.operator,
                value=pair.value,
            )
            continue
        retained.setdefault((pair.operator, encoded), encoded)

    texts: list[str] = []
    values: list[Any] = []
    eq_values: list[Any] = []
    for operator, encoded in retained:
        if aggregate_eq and operator is Operator.EQ:
            eq_values.append(encoded)
            continue
        text, fragment_values = _check_fragment(fragment_builder.build(operator, encoded), single_value=aggregate_eq)
        texts.append(text)
        values.extend(fragment_values)

    if eq_values:
        text, fragment_values = _check_fragment(fragment_builder.build_in(eq_values))
        texts.append(text)
        values.extend(fragment_values)

    return Clause(" and ".join(texts), values)


def parse_account_id_query_param(
    query: "Mapping[str, Any]", column: str = "account.id", config: "Optional[QueryConfig]" = None
) -> Clause:
    """Compile the ``account.id`` parameter; equality values become one ``IN``."""
    key = FilterKey.ACCOUNT_ID.value
    return compile_clause(
        query.get(key),
        ColumnFragmentBuilder(column),
        value_encoder=lambda value: EntityId.parse(value, param_name=key, config=config).encoded_id,
        aggregate_eq=True,
    )


def parse_timestamp_query_param(
    query: "Mapping[str, Any]",
    column: str,
    operator_overrides: "Optional[Mapping[Operator, Operator]]" = None,
) -> Clause:
    """Compile the ``timestamp`` parameter as nanoseconds, one fragment per value.

    ``operator_overrides`` rewrites operators before rendering, e.g.
    ``{Operator.EQ: Operator.LTE}`` for "as of" queries.
    """
    return compile_clause(
        query.get(FilterKey.TIMESTAMP.value),
        ColumnFragmentBuilder(column, operator_overrides),
        value_encoder=parse_timestamp_param,
    )


def parse_balance_query_param(query: "Mapping[str, Any]", column: str) -> Clause:
    return compile_clause(
        query.get(FilterKey.ACCOUNT_BALANCE.value),
        ColumnFragmentBuilder(column),
        value_encoder=parse_balance_value,
    )


def parse_public_key_query_param(query: "Mapping[str, Any]", column: str = "account.publickey") -> Clause:
    return compile_clause(
        query.get(FilterKey.ACCOUNT_PUBLICKEY.value),
        ColumnFragmentBuilder(column),
        value_encoder=parse_public_key,
    )
