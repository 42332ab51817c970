"""Timestamp range consolidation.

Repeated timestamp filters are merged into one canonical closed interval plus
sorted ``eq`` and ``ne`` value sets. Bounds are nanosecond integers, so an
exclusive bound becomes an inclusive one by adding or subtracting one.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from mirrorql.config import DEFAULT_CONFIG, ONE_DAY_IN_NS
from mirrorql.constants import FilterKey
from mirrorql.core.operators import Operator
from mirrorql.exceptions import InvalidRangeError
from mirrorql.utils.logging import FilterEvent, get_logger, log_event

if TYPE_CHECKING:
    from mirrorql.config import QueryConfig

__all__ = (
    "Filter",
    "Interval",
    "RangeConditions",
    "TimestampFilterResult",
    "extract_timestamp_range_condition_filters",
    "parse_timestamp_filters",
)

logger = get_logger("core.ranges")


class Filter(NamedTuple):
    """A normalized query filter."""

    key: str
    operator: Operator
    value: Any


@dataclass(frozen=True)
class Interval:
    """A range over integers with optional, open or closed bounds.

    ``None`` means unbounded on that side; an unbounded side is always
    exclusive.
    """

    lower: Any = None
    upper: Any = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True
    empty: bool = False

    def __post_init__(self) -> None:
        if self.lower is None and self.lower_inclusive:
            object.__setattr__(self, "lower_inclusive", False)
        if self.upper is None and self.upper_inclusive:
            object.__setattr__(self, "upper_inclusive", False)

    @classmethod
    def closed(cls, lower: Any, upper: Any) -> "Interval":
        return cls(lower, upper, True, True)

    @classmethod
    def empty_range(cls) -> "Interval":
        return cls(None, None, False, False, empty=True)

    @property
    def bounds(self) -> str:
        return f"{'[' if self.lower_inclusive else '('}{']' if self.upper_inclusive else ')'}"

    @property
    def is_empty(self) -> bool:
        if self.empty:
            return True
        if self.lower is None or self.upper is None:
            return False
        low = self.lower if self.lower_inclusive else self.lower + 1
        high = self.upper if self.upper_inclusive else self.upper - 1
        return low > high

    def __contains__(self, value: Any) -> bool:
        if self.empty:
            return False
        if self.lower is not None and (value < self.lower or (value == self.lower and not self.lower_inclusive)):
            return False
        return not (
            self.upper is not None and (value > self.upper or (value == self.upper and not self.upper_inclusive))
        )

    def __str__(self) -> str:
        """Render as a PostgreSQL range literal."""
        if self.empty:
            return "empty"
        lower = "" if self.lower is None else str(self.lower)
        upper = "" if self.upper is None else str(self.upper)
        return f"{self.bounds[0]}{lower},{upper}{self.bounds[1]}"


class TimestampFilterResult(NamedTuple):
    range: Optional[Interval]
    eq_values: tuple[int, ...]
    ne_values: tuple[int, ...]


class RangeConditions(NamedTuple):
    conditions: list[str]
    params: list[Interval]


def _build_range(
    lower: Optional[int], upper: Optional[int], validate_range: bool, config: "QueryConfig"
) -> Interval:
    if lower is None:
        return Interval(None, upper, False, True)
    if upper is None:
        return Interval(lower, None, True, False)

    if lower > upper:
        if validate_range:
            msg = "Timestamp lower bound must be less than or equal to upper bound"
            raise InvalidRangeError(msg)
        return Interval.empty_range()

    if validate_range and upper - lower + 1 > config.max_timestamp_range_ns:
        max_days = config.max_timestamp_range_ns / ONE_DAY_IN_NS
        msg = f"Timestamp range by the lower and upper bounds must be positive and within {max_days:g}d"
        raise InvalidRangeError(msg)
    return Interval.closed(lower, upper)


def parse_timestamp_filters(
    filters: Iterable[Filter],
    required: bool = True,
    allow_ne: bool = False,
    allow_open_range: bool = False,
    strict: Optional[bool] = None,
    validate_range: bool = True,
    config: "Optional[QueryConfig]" = None,
) -> TimestampFilterResult:
    """Consolidate timestamp filters into a range and eq/ne value sets.

    ``gt x`` becomes an inclusive lower bound ``x + 1`` and ``lt x`` an
    inclusive upper bound ``x - 1``; the tightest bound on each side wins.

    In strict mode a query must be exactly one of: a two-sided range (with
    ``ne`` values when ``allow_ne``), one or more ``eq`` values, or one or more
    ``ne`` values when ``allow_ne``. Relaxed mode returns every populated
    field together.

    Args:
        filters: Timestamp filters with nanosecond values.
        required: Fail when no filter is given.
        allow_ne: Accept ``ne`` filters in strict mode.
        allow_open_range: Accept a range bounded on one side only.
        strict: Strict operator checks; ``None`` uses the configured default.
        validate_range: Reject empty ranges and ranges wider than the configured maximum.
        config: Engine configuration.

    Raises:
        InvalidRangeError: If the filters do not form a valid timestamp query.

    Returns:
        The consolidated range with sorted, distinct eq and ne values.
    """
    config = config or DEFAULT_CONFIG
    if strict is None:
        strict = config.strict_timestamp_param

    filters = list(filters)
    if not filters:
        if required:
            msg = "No timestamp range or eq operator provided"
            raise InvalidRangeError(msg)
        return TimestampFilterResult(None, (), ())

    eq_values: set[int] = set()
    ne_values: set[int] = set()
    lower: Optional[int] = None
    upper: Optional[int] = None
    lower_count = 0
    upper_count = 0

    for timestamp_filter in filters:
        operator = _filter_operator(timestamp_filter)
        try:
            value = int(timestamp_filter.value)
        except (TypeError, ValueError) as e:
            msg = f"Invalid timestamp filter value: {timestamp_filter.value!r}"
            _log_malformed(timestamp_filter, msg)
            raise InvalidRangeError(msg) from e
        if operator is Operator.EQ:
            eq_values.add(value)
        elif operator is Operator.NE:
            ne_values.add(value)
        elif operator.is_lower_bound:
            candidate = value + 1 if operator is Operator.GT else value
            lower = candidate if lower is None else max(lower, candidate)
            lower_count += 1
        else:
            candidate = value - 1 if operator is Operator.LT else value
            upper = candidate if upper is None else min(upper, candidate)
            upper_count += 1

    if strict:
        _check_strict(eq_values, ne_values, lower_count, upper_count, allow_ne)

    timestamp_range = None
    if lower_count or upper_count:
        if not (lower_count and upper_count) and not allow_open_range:
            msg = "Timestamp range must have gt (or gte) and lt (or lte)"
            raise InvalidRangeError(msg)
        timestamp_range = _build_range(lower, upper, validate_range, config)

    return TimestampFilterResult(timestamp_range, tuple(sorted(eq_values)), tuple(sorted(ne_values)))


def _log_malformed(timestamp_filter: Filter, reason: str) -> None:
    log_event(
        logger,
        FilterEvent.TIMESTAMP_REJECTED,
        "Rejected timestamp filter: %s",
        reason,
        key=timestamp_filter.key,
        operator=str(timestamp_filter.operator),
        value=timestamp_filter.value,
        reason=reason,
    )


def _filter_operator(timestamp_filter: Filter) -> Operator:
    try:
        return Operator(timestamp_filter.operator)
    except ValueError as e:
        msg = f"Invalid timestamp filter operator: {timestamp_filter.operator!r}"
        _log_malformed(timestamp_filter, msg)
        raise InvalidRangeError(msg) from e


def _check_strict(
    eq_values: "set[int]", ne_values: "set[int]", lower_count: int, upper_count: int, allow_ne: bool
) -> None:
    msg = None
    if ne_values and not allow_ne:
        msg = "Not equal (ne) operator is not supported for timestamp parameter"
    elif lower_count > 1:
        msg = "Multiple gt or gte operators not permitted for timestamp parameter"
    elif upper_count > 1:
        msg = "Multiple lt or lte operators not permitted for timestamp parameter"
    elif eq_values and (lower_count or upper_count or ne_values):
        msg = "Cannot combine eq with ne, gt, gte, lt, or lte for timestamp parameter"
    if msg is not None:
        log_event(
            logger,
            FilterEvent.TIMESTAMP_REJECTED,
            "Rejected timestamp filters: %s",
            msg,
            key=FilterKey.TIMESTAMP.value,
            reason=msg,
        )
        raise InvalidRangeError(msg)


def extract_timestamp_range_condition_filters(
    filters: Iterable[Filter], column: str = "timestamp_range"
) -> RangeConditions:
    """Turn timestamp filters into conditions on a range-typed column.

    Each filter becomes an overlap test against a one-sided range; ``eq``
    is treated as ``lte`` (the row's range started at or before the value) and
    ``ne`` excludes rows whose range contains the value. Filters on other keys
    are ignored.

    Returns:
        Conditions with ``?`` placeholders and their range parameters, in order.
    """
    conditions: list[str] = []
    params: list[Interval] = []
    for timestamp_filter in filters:
        if timestamp_filter.key != FilterKey.TIMESTAMP.value:
            continue
        operator = _filter_operator(timestamp_filter)
        value = timestamp_filter.value
        if operator is Operator.NE:
            conditions.append(f"not {column} @> ?")
            params.append(Interval.closed(value, value))
            continue

        conditions.append(f"{column} && ?")
        if operator in {Operator.EQ, Operator.LTE}:
            params.append(Interval(None, value, False, True))
        elif operator is Operator.LT:
            params.append(Interval(None, value, False, False))
        elif operator is Operator.GT:
            params.append(Interval(value, None, False, False))
        else:
            params.append(Interval(value, None, True, False))
    return RangeConditions(conditions, params)
