"""Query filter engine.

- operators.py: ``op:value`` token parsing
- clause.py: clause compilation and column helpers
- ranges.py: timestamp range consolidation
- cursor.py: next-page link generation
- keys.py: public key decoding and normalization
- codecs.py, entity_id.py: per-field value conversion
- request.py: request validation, limit and order
"""

from mirrorql.core.clause import (
    CallableFragmentBuilder,
    Clause,
    ColumnFragmentBuilder,
    FragmentBuilder,
    compile_clause,
    parse_account_id_query_param,
    parse_balance_query_param,
    parse_public_key_query_param,
    parse_timestamp_query_param,
)
from mirrorql.core.cursor import CursorValue, get_next_param_queries
from mirrorql.core.entity_id import EntityId, is_valid_entity_id
from mirrorql.core.keys import Key, decode_key, is_valid_public_key_query, parse_public_key
from mirrorql.core.operators import Operator, OperatorValue, parse_operator_value, parse_operator_values
from mirrorql.core.ranges import (
    Filter,
    Interval,
    RangeConditions,
    TimestampFilterResult,
    extract_timestamp_range_condition_filters,
    parse_timestamp_filters,
)
from mirrorql.core.request import (
    LimitAndOrder,
    get_limit_param_value,
    is_repeated_query_parameter_valid_length,
    parse_limit_and_order_params,
    validate_request,
)

__all__ = (
    "CallableFragmentBuilder",
    "Clause",
    "ColumnFragmentBuilder",
    "CursorValue",
    "EntityId",
    "Filter",
    "FragmentBuilder",
    "Interval",
    "Key",
    "LimitAndOrder",
    "Operator",
    "OperatorValue",
    "RangeConditions",
    "TimestampFilterResult",
    "compile_clause",
    "decode_key",
    "extract_timestamp_range_condition_filters",
    "get_limit_param_value",
    "get_next_param_queries",
    "is_repeated_query_parameter_valid_length",
    "is_valid_entity_id",
    "is_valid_public_key_query",
    "parse_account_id_query_param",
    "parse_balance_query_param",
    "parse_limit_and_order_params",
    "parse_operator_value",
    "parse_operator_values",
    "parse_public_key",
    "parse_public_key_query_param",
    "parse_timestamp_filters",
    "parse_timestamp_query_param",
    "validate_request",
)
