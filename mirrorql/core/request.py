"""Request-level validation and paging parameters."""

from collections.abc import Collection, Mapping
from typing import TYPE_CHECKING, Any, Callable, Final, NamedTuple, Optional, Union

from mirrorql.config import DEFAULT_CONFIG
from mirrorql.constants import FilterKey, Order
from mirrorql.core.clause import Clause
from mirrorql.core.codecs import (
    is_numeric,
    is_positive_long,
    is_valid_slot,
    is_valid_timestamp_param,
    parse_integer,
)
from mirrorql.core.entity_id import is_valid_entity_id
from mirrorql.core.keys import is_valid_public_key_query
from mirrorql.core.operators import Operator, RawQueryValue, as_value_list, parse_operator_value
from mirrorql.exceptions import INVALID_PARAMETER, UNKNOWN_PARAMETER, InvalidArgumentError
from mirrorql.utils.logging import FilterEvent, get_logger, log_event

if TYPE_CHECKING:
    from mirrorql.config import QueryConfig

__all__ = (
    "DEFAULT_VALIDATORS",
    "LimitAndOrder",
    "ParameterValidator",
    "get_limit_param_value",
    "is_repeated_query_parameter_valid_length",
    "parse_limit_and_order_params",
    "validate_request",
)

logger = get_logger("core.request")

ParameterValidator = Callable[[Operator, str], bool]


def _any_operator(predicate: "Callable[[str], bool]") -> ParameterValidator:
    return lambda operator, value: predicate(value)


def _eq_only(predicate: "Callable[[str], bool]") -> ParameterValidator:
    return lambda operator, value: operator is Operator.EQ and predicate(value)


def _is_order(value: str) -> bool:
    return value in {Order.ASC.value, Order.DESC.value}


DEFAULT_VALIDATORS: Final[Mapping[str, ParameterValidator]] = {
    FilterKey.ACCOUNT_BALANCE.value: _any_operator(is_numeric),
    FilterKey.ACCOUNT_ID.value: _any_operator(is_valid_entity_id),
    FilterKey.ACCOUNT_PUBLICKEY.value: _eq_only(is_valid_public_key_query),
    FilterKey.BLOCK_NUMBER.value: _any_operator(lambda value: is_positive_long(value, allow_zero=True)),
    FilterKey.CONTRACT_ID.value: _any_operator(is_valid_entity_id),
    FilterKey.LIMIT.value: _eq_only(is_positive_long),
    FilterKey.NODE_ID.value: _any_operator(lambda value: is_positive_long(value, allow_zero=True)),
    FilterKey.ORDER.value: _eq_only(_is_order),
    FilterKey.SCHEDULE_ID.value: _any_operator(is_valid_entity_id),
    FilterKey.SERIAL_NUMBER.value: _any_operator(is_positive_long),
    FilterKey.SLOT.value: _any_operator(is_valid_slot),
    FilterKey.SPENDER_ID.value: _any_operator(is_valid_entity_id),
    FilterKey.TIMESTAMP.value: _any_operator(is_valid_timestamp_param),
    FilterKey.TOKEN_ID.value: _any_operator(is_valid_entity_id),
}


class LimitAndOrder(NamedTuple):
    clause: Clause
    order: Order
    limit: int


def is_repeated_query_parameter_valid_length(values: "Collection[Any]", config: "Optional[QueryConfig]" = None) -> bool:
    config = config or DEFAULT_CONFIG
    return len(values) <= config.max_repeated_query_parameters


def validate_request(
    query: "Mapping[str, RawQueryValue]",
    accepted_parameters: "Collection[str]",
    validators: "Optional[Mapping[str, ParameterValidator]]" = None,
    config: "Optional[QueryConfig]" = None,
) -> None:
    """Check every query parameter before any clause is built.

    All problems are collected and reported together.

    Args:
        query: Query key to one or more raw values.
        accepted_parameters: Keys the endpoint understands.
        validators: Per-key ``(operator, value)`` checks; merged over
            :data:`DEFAULT_VALIDATORS`.
        config: Engine configuration.

    Raises:
        InvalidArgumentError: If a key is unknown, repeated too often, or has
            a value its validator rejects.
    """
    config = config or DEFAULT_CONFIG
    checks = {**DEFAULT_VALIDATORS, **(validators or {})}
    params: list[str] = []
    messages: list[str] = []

    for key, raw in query.items():
        if key not in accepted_parameters:
            params.append(key)
            messages.append(f"{UNKNOWN_PARAMETER}: {key}")
            continue

        values = as_value_list(raw)
        if not is_repeated_query_parameter_valid_length(values, config):
            params.append(key)
            messages.append(
                f"Too many {key} parameters: {len(values)} exceeds {config.max_repeated_query_parameters}"
            )
            continue

        check = checks.get(key)
        if check is None:
            continue
        for value in values:
            pair = parse_operator_value(value)
            if not check(pair.operator, pair.value):
                params.append(key)
                messages.append(f"{INVALID_PARAMETER}: {key}")
                break

    if messages:
        log_event(logger, FilterEvent.REQUEST_REJECTED, "Rejected request parameters: %s", params, params=params)
        raise InvalidArgumentError(params=params, messages=messages)


def get_limit_param_value(values: "RawQueryValue", config: "Optional[QueryConfig]" = None) -> int:
    """Return the page size: the last given ``limit`` capped at the maximum.

    Raises:
        InvalidArgumentError: If the limit is not a positive integer.
    """
    config = config or DEFAULT_CONFIG
    limits = as_value_list(values)
    if not limits:
        return config.default_limit
    try:
        limit = parse_integer(limits[-1])
    except ValueError as e:
        raise InvalidArgumentError.for_params(FilterKey.LIMIT.value) from e
    if limit < 1:
        raise InvalidArgumentError.for_params(FilterKey.LIMIT.value)
    return min(limit, config.max_limit)


def parse_limit_and_order_params(
    query: "Mapping[str, RawQueryValue]",
    default_order: "Union[Order, str]" = Order.DESC,
    config: "Optional[QueryConfig]" = None,
) -> LimitAndOrder:
    """Parse ``limit`` and ``order`` into a ``limit ?`` clause, the order and the limit."""
    limit = get_limit_param_value(query.get(FilterKey.LIMIT.value), config)
    orders = as_value_list(query.get(FilterKey.ORDER.value))
    try:
        order = Order(orders[-1]) if orders else Order(default_order)
    except ValueError as e:
        raise InvalidArgumentError.for_params(FilterKey.ORDER.value) from e
    return LimitAndOrder(Clause("limit ?", [limit]), order, limit)
