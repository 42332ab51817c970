"""Operator-qualified query parameter parsing.

A query value is either ``"<op>:<value>"`` with ``op`` one of ``eq``, ``ne``,
``lt``, ``lte``, ``gt`` and ``gte``, or a bare value meaning ``eq``. Repeated
keys arrive as a list of such tokens.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Callable, Final, NamedTuple, Optional, Union

__all__ = (
    "LOWER_BOUND_OPERATORS",
    "SQL_OPERATORS",
    "UPPER_BOUND_OPERATORS",
    "Operator",
    "OperatorValue",
    "as_value_list",
    "parse_operator_value",
    "parse_operator_values",
)


class Operator(str, Enum):
    """Relational operators accepted as query value prefixes."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"

    def __str__(self) -> str:
        return self.value

    @property
    def is_lower_bound(self) -> bool:
        return self in LOWER_BOUND_OPERATORS

    @property
    def is_upper_bound(self) -> bool:
        return self in UPPER_BOUND_OPERATORS

    @property
    def inclusive(self) -> bool:
        return self in {Operator.EQ, Operator.LTE, Operator.GTE}


LOWER_BOUND_OPERATORS: Final = frozenset({Operator.GT, Operator.GTE})
UPPER_BOUND_OPERATORS: Final = frozenset({Operator.LT, Operator.LTE})
SQL_OPERATORS: Final = {
    Operator.EQ: " = ",
    Operator.NE: " != ",
    Operator.LT: " < ",
    Operator.LTE: " <= ",
    Operator.GT: " > ",
    Operator.GTE: " >= ",
}

_OPERATORS_BY_PREFIX: Final = {op.value: op for op in Operator}


class OperatorValue(NamedTuple):
    """One parsed query token."""

    operator: Operator
    value: str

    def __str__(self) -> str:
        return f"{self.operator.value}:{self.value}"


RawQueryValue = Union[str, int, Iterable[Union[str, int]], None]


def as_value_list(raw: RawQueryValue) -> list[str]:
    """Normalize a scalar or repeated query value to a list of strings."""
    if raw is None:
        return []
    if isinstance(raw, (str, int)):
        return [str(raw)]
    return [str(item) for item in raw]


def parse_operator_value(token: Any) -> OperatorValue:
    """Split a single token into its operator and value.

    Args:
        token: Raw query value such as ``"gte:1000"`` or ``"1000"``.

    Returns:
        The operator and the remaining value. Tokens without a recognized
        prefix are returned whole with :attr:`Operator.EQ`.
    """
    text = str(token)
    prefix, sep, _ = text.partition(":")
    if sep:
        operator = _OPERATORS_BY_PREFIX.get(prefix)
        if operator is not None:
            return OperatorValue(operator, text[len(prefix) + 1 :])
    return OperatorValue(Operator.EQ, text)


def parse_operator_values(
    raw: RawQueryValue, value_encoder: "Optional[Callable[[str], Any]]" = None
) -> list[OperatorValue]:
    """Tokenize a scalar or repeated query value and drop exact duplicates.

    Two tokens are duplicates when they share the operator and the value after
    ``value_encoder`` is applied (the raw value when no encoder is given). The
    first occurrence is kept in place; nothing else is reordered.

    Args:
        raw: A single value, a sequence of values, or ``None``.
        value_encoder: Optional field encoder used only for the duplicate check.

    Returns:
        Deduplicated operator/value pairs in order of first occurrence.
    """
    seen: dict[tuple[Operator, Any], OperatorValue] = {}
    for token in as_value_list(raw):
        pair = parse_operator_value(token)
        encoded = value_encoder(pair.value) if value_encoder is not None else pair.value
        seen.setdefault((pair.operator, encoded), pair)
    return list(seen.values())
