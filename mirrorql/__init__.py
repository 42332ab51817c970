"""mirrorql: query filter and pagination engine for a ledger mirror REST API."""

from mirrorql import config, constants, core, exceptions, parameters, utils
from mirrorql.config import DEFAULT_CONFIG, QueryConfig
from mirrorql.constants import FilterKey, KeyType, Order
from mirrorql.core import (
    Clause,
    CursorValue,
    EntityId,
    Filter,
    Interval,
    Key,
    Operator,
    OperatorValue,
    compile_clause,
    decode_key,
    get_next_param_queries,
    parse_operator_values,
    parse_public_key,
    parse_timestamp_filters,
    validate_request,
)
from mirrorql.exceptions import InvalidArgumentError, InvalidClauseError, InvalidRangeError, MirrorQLError

__version__ = "0.1.0"

__all__ = (
    "DEFAULT_CONFIG",
    "Clause",
    "CursorValue",
    "EntityId",
    "Filter",
    "FilterKey",
    "Interval",
    "InvalidArgumentError",
    "InvalidClauseError",
    "InvalidRangeError",
    "Key",
    "KeyType",
    "MirrorQLError",
    "Operator",
    "OperatorValue",
    "Order",
    "QueryConfig",
    "__version__",
    "compile_clause",
    "config",
    "constants",
    "core",
    "decode_key",
    "exceptions",
    "get_next_param_queries",
    "parameters",
    "parse_operator_values",
    "parse_public_key",
    "parse_timestamp_filters",
    "utils",
    "validate_request",
)
