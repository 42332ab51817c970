"""Unit tests for mirrorql.core.cursor."""

from typing import Any

import pytest

from mirrorql.constants import Order
from mirrorql.core.cursor import CursorValue, get_next_param_queries
from mirrorql.exceptions import InvalidArgumentError


@pytest.mark.parametrize(
    ("order", "query", "last_values", "expected"),
    [
        (Order.ASC, {"limit": 10}, {"account.id": 3}, "?limit=10&account.id=gt:3"),
        (Order.DESC, {"limit": 10, "order": "desc"}, {"account.id": 3}, "?limit=10&order=desc&account.id=lt:3"),
        (Order.DESC, {"order": "desc"}, {"token.id": 3}, "?order=desc&token.id=lt:3"),
        (Order.ASC, {}, {"token.id": 3}, "?token.id=gt:3"),
        (
            Order.ASC,
            {"token.id": 2, "serialnumber": "gt:1"},
            {"token.id": {"value": 2, "inclusive": True}, "serialnumber": 4},
            "?token.id=2&serialnumber=gt:4",
        ),
        (
            Order.ASC,
            {"token.id": "lte:5", "serialnumber": "gte:1"},
            {"token.id": 2, "serialnumber": 4},
            "?token.id=lte:5&token.id=gt:2&serialnumber=gt:4",
        ),
        (
            Order.DESC,
            {"token.id": "lte:5", "serialnumber": "gte:1"},
            {"token.id": 2, "serialnumber": 4},
            "?serialnumber=gte:1&serialnumber=lt:4&token.id=lt:2",
        ),
        (
            Order.DESC,
            {"serialnumber": "gt:1", "account.id": 1001, "order": "desc", "limit": 2},
            {"serialnumber": 3},
            "?serialnumber=gt:1&serialnumber=lt:3&account.id=1001&order=desc&limit=2",
        ),
        (
            Order.ASC,
            {"account.id": ["gte:0.0.18", "lt:0.0.21"], "limit": 2},
            {"account.id": "0.0.19"},
            "?account.id=lt:0.0.21&account.id=gt:0.0.19&limit=2",
        ),
        (
            Order.ASC,
            {"serialnumber": "gte:2", "token.id": "gte:100", "order": "asc", "limit": 2},
            {"serialnumber": 3, "token.id": CursorValue(100, inclusive=True)},
            "?order=asc&limit=2&serialnumber=gt:3&token.id=gte:100",
        ),
        (
            "desc",
            {"timestamp": ["ne:5", "gte:1"]},
            {"timestamp": "10.000000001"},
            "?timestamp=ne:5&timestamp=gte:1&timestamp=lt:10.000000001",
        ),
    ],
    ids=[
        "limit_asc",
        "limit_desc",
        "order_desc",
        "token_only",
        "eq_kept",
        "lte_kept_asc",
        "gte_kept_desc",
        "lower_kept_desc",
        "entity_range_asc",
        "inclusive",
        "ne_kept",
    ],
)
def test_get_next_param_queries(
    order: Any, query: "dict[str, Any]", last_values: "dict[str, Any]", expected: str
) -> None:
    assert get_next_param_queries(order, query, last_values) == expected


@pytest.mark.parametrize(
    ("order", "query", "last_values"),
    [
        (Order.ASC, {"account.id": ["gte:0.0.100", "lt:0.0.200"]}, {"account.id": "0.0.199"}),
        (Order.DESC, {"block.number": "gt:50"}, {"block.number": "51"}),
        (Order.ASC, {"contract.id": "lt:0.0.900"}, {"contract.id": "0.0.899"}),
        (Order.ASC, {"node.id": ["gt:10", "lte:35"]}, {"node.id": "35"}),
        (Order.ASC, {"schedule.id": ["gt:0.0.1001", "lt:0.0.1560"]}, {"schedule.id": "0.0.1559"}),
        (
            Order.ASC,
            {"spender.id": "lte:0.0.5006", "token.id": "lte:0.0.9005"},
            {
                "spender.id": {"value": "0.0.5006", "inclusive": False, "primary": True},
                "token.id": {"value": "0.0.9000", "inclusive": True},
            },
        ),
        (
            Order.ASC,
            {"slot": ["gte:0a", "lt:0xc587da450c63fd97262e8f59f7e90c70b3c0a712e2f75f5a0d8fd91be2846a25"]},
            {"slot": "0xc587da450c63fd97262e8f59f7e90c70b3c0a712e2f75f5a0d8fd91be2846a24"},
        ),
        (
            Order.DESC,
            {"timestamp": ["gte:123456789.000000111", "lte:123456789.000000222"]},
            {"timestamp": "123456789.000000111"},
        ),
        (Order.ASC, {"token.id": ["gt:0.0.1001", "lt:0.0.1560"]}, {"token.id": "0.0.1559"}),
    ],
    ids=["account", "block", "contract", "node", "schedule", "spender", "slot", "timestamp", "token"],
)
def test_get_next_param_queries_exhausted(
    order: Order, query: "dict[str, Any]", last_values: "dict[str, Any]"
) -> None:
    """Test no link is produced once the new bound empties the range."""
    assert get_next_param_queries(order, query, last_values) is None


def test_get_next_param_queries_inclusive_bound_at_limit() -> None:
    """Test an inclusive cursor on the last allowed value still has a next page."""
    query = {"node.id": "lte:35"}

    assert get_next_param_queries(Order.ASC, query, {"node.id": CursorValue("35", inclusive=True)}) == (
        "?node.id=lte:35&node.id=gte:35"
    )


def test_get_next_param_queries_unknown_key_not_checked() -> None:
    query = {"name": "lt:a"}

    assert get_next_param_queries(Order.ASC, query, {"name": "z"}) == "?name=lt:a&name=gt:z"


def test_get_next_param_queries_custom_codec() -> None:
    query = {"name": "lt:b"}
    codecs = {"name": lambda value: ord(value)}

    assert get_next_param_queries(Order.ASC, query, {"name": "b"}, codecs=codecs) is None
    assert get_next_param_queries(Order.ASC, query, {"name": "a"}, codecs=codecs) is None
    assert get_next_param_queries(Order.ASC, {"name": "lte:b"}, {"name": "a"}, codecs=codecs) == (
        "?name=lte:b&name=gt:a"
    )


def test_get_next_param_queries_does_not_mutate_query() -> None:
    query = {"account.id": ["gte:0.0.18", "lt:0.0.21"]}
    get_next_param_queries(Order.ASC, query, {"account.id": "0.0.19"})

    assert query == {"account.id": ["gte:0.0.18", "lt:0.0.21"]}


@pytest.mark.parametrize("order", ["ASC", "up", None], ids=["upper_case", "unknown", "none"])
def test_get_next_param_queries_invalid_order(order: Any) -> None:
    with pytest.raises(InvalidArgumentError) as exc_info:
        get_next_param_queries(order, {}, {"token.id": 3})

    assert exc_info.value.params == ("order",)


def test_get_next_param_queries_nothing_to_link() -> None:
    assert get_next_param_queries(Order.ASC, {}, {}) is None
