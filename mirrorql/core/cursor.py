"""Next-page link generation for keyset pagination.

The next page is requested with the same query, except that every sort key
gets a new bound just past the last row returned. Bounds already present in
the query are kept when they limit the opposite end of the scan.
"""

from collections.abc import Mapping
from typing import Any, Callable, Final, NamedTuple, Optional, Union
from urllib.parse import urlencode

from mirrorql.constants import FilterKey, Order
from mirrorql.core.codecs import parse_slot_value, parse_timestamp_param
from mirrorql.core.entity_id import EntityId
from mirrorql.core.operators import (
    LOWER_BOUND_OPERATORS,
    UPPER_BOUND_OPERATORS,
    Operator,
    as_value_list,
    parse_operator_value,
)
from mirrorql.exceptions import InvalidArgumentError
from mirrorql.utils.logging import FilterEvent, get_logger, log_event

__all__ = ("DEFAULT_CURSOR_CODECS", "CursorValue", "get_next_param_queries")

logger = get_logger("core.cursor")

Codec = Callable[[Any], int]


def _entity_id(value: Any) -> int:
    return EntityId.parse(value).encoded_id


def _timestamp(value: Any) -> int:
    if isinstance(value, int):
        return value
    nanos = parse_timestamp_param(str(value))
    if nanos is None:
        msg = f"Invalid timestamp {value!r}"
        raise ValueError(msg)
    return nanos


def _slot(value: Any) -> int:
    return parse_slot_value(str(value))


DEFAULT_CURSOR_CODECS: Final[Mapping[str, Codec]] = {
    FilterKey.ACCOUNT_ID.value: _entity_id,
    FilterKey.CONTRACT_ID.value: _entity_id,
    FilterKey.SCHEDULE_ID.value: _entity_id,
    FilterKey.SPENDER_ID.value: _entity_id,
    FilterKey.TOKEN_ID.value: _entity_id,
    FilterKey.BLOCK_NUMBER.value: int,
    FilterKey.NODE_ID.value: int,
    FilterKey.SERIAL_NUMBER.value: int,
    FilterKey.SLOT.value: _slot,
    FilterKey.TIMESTAMP.value: _timestamp,
}


class CursorValue(NamedTuple):
    """Sort key value of the last row on a page."""

    value: Any
    inclusive: bool = False
    primary: bool = False


def _as_cursor_value(last: "Union[CursorValue, Mapping[str, Any], Any]") -> CursorValue:
    if isinstance(last, CursorValue):
        return last
    if isinstance(last, Mapping):
        return CursorValue(last["value"], bool(last.get("inclusive", False)), bool(last.get("primary", False)))
    return CursorValue(last)


def _is_exhausted(
    key: str, codec: Codec, operator: Operator, tokens: "list[str]", cursor: CursorValue, ascending: bool
) -> bool:
    """Whether the new bound and the kept opposite bounds admit no value."""
    try:
        boundary = codec(cursor.value)
        if operator is Operator.GT:
            boundary += 1
        elif operator is Operator.LT:
            boundary -= 1

        for token in tokens:
            pair = parse_operator_value(token)
            limit = codec(pair.value)
            if ascending and pair.operator.is_upper_bound:
                if pair.operator is Operator.LT:
                    limit -= 1
                if boundary > limit:
                    return True
            elif not ascending and pair.operator.is_lower_bound:
                if pair.operator is Operator.GT:
                    limit += 1
                if boundary < limit:
                    return True
    except (InvalidArgumentError, ValueError) as e:
        log_event(
            logger,
            FilterEvent.CURSOR_UNCOMPARABLE,
            "Cannot compare cursor bounds of %s: %s",
            key,
            e,
            key=key,
            bound=cursor.value,
            error=str(e),
        )
    return False


def get_next_param_queries(
    order: "Union[Order, str]",
    query: "Mapping[str, Any]",
    last_values: "Mapping[str, Union[CursorValue, Mapping[str, Any], Any]]",
    codecs: "Optional[Mapping[str, Codec]]" = None,
) -> Optional[str]:
    """Build the query string of the next page.

    For each sort key in ``last_values``:

    * an existing ``eq`` filter on the key is kept and nothing is added;
    * otherwise existing bounds in the scan direction are replaced by one new
      bound past the last value (``gt``/``gte`` ascending, ``lt``/``lte``
      descending, inclusive when the cursor value is), and bounds on the
      other end are kept.

    A key that lost all of its values moves to the end of the query string.

    Args:
        order: Sort direction of the current page.
        query: The current query, key to one or more raw values.
        last_values: Sort key to the last row's value, given as a scalar, a
            :class:`CursorValue` or a mapping with ``value``, ``inclusive`` and
            ``primary``.
        codecs: Extra or replacement converters used to compare a key's values.

    Raises:
        InvalidArgumentError: If ``order`` is not a sort direction.

    Returns:
        ``"?k=v&..."`` for the next page, or ``None`` when there is nothing to
        link to or the new bounds of a comparable key leave nothing to fetch.
    """
    try:
        ascending = Order(order) is Order.ASC
    except ValueError as e:
        raise InvalidArgumentError.for_params(FilterKey.ORDER.value) from e
    comparators = {**DEFAULT_CURSOR_CODECS, **(codecs or {})}
    next_query: dict[str, list[str]] = {key: as_value_list(value) for key, value in query.items()}

    for key, last in last_values.items():
        cursor = _as_cursor_value(last)
        tokens = next_query.get(key, [])
        if any(parse_operator_value(token).operator is Operator.EQ for token in tokens):
            continue

        if ascending:
            operator = Operator.GTE if cursor.inclusive else Operator.GT
        else:
            operator = Operator.LTE if cursor.inclusive else Operator.LT
        same_direction = LOWER_BOUND_OPERATORS if ascending else UPPER_BOUND_OPERATORS
        kept = [token for token in tokens if parse_operator_value(token).operator not in same_direction]

        codec = comparators.get(key)
        if codec is not None and _is_exhausted(key, codec, operator, kept, cursor, ascending):
            log_event(
                logger,
                FilterEvent.CURSOR_EXHAUSTED,
                "No next page: %s exhausted at %s",
                key,
                cursor.value,
                key=key,
                operator=operator,
                bound=cursor.value,
            )
            return None

        if not kept:
            next_query.pop(key, None)
        next_query[key] = [*kept, f"{operator.value}:{cursor.value}"]

    pairs = [(key, value) for key, values in next_query.items() for value in values]
    if not pairs:
        return None
    return f"?{urlencode(pairs, safe=':')}"
