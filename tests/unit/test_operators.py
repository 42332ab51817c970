"""Unit tests for mirrorql.core.operators."""

from typing import Any

import pytest

from mirrorql.core.entity_id import EntityId
from mirrorql.core.operators import (
    Operator,
    OperatorValue,
    as_value_list,
    parse_operator_value,
    parse_operator_values,
)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("gte:1000", OperatorValue(Operator.GTE, "1000")),
        ("lt:0.0.21", OperatorValue(Operator.LT, "0.0.21")),
        ("ne:5", OperatorValue(Operator.NE, "5")),
        ("eq:7", OperatorValue(Operator.EQ, "7")),
        ("1000", OperatorValue(Operator.EQ, "1000")),
        ("GTE:1000", OperatorValue(Operator.EQ, "GTE:1000")),
        ("foo:bar", OperatorValue(Operator.EQ, "foo:bar")),
        ("gt:", OperatorValue(Operator.GT, "")),
        ("gt:1:2", OperatorValue(Operator.GT, "1:2")),
        (42, OperatorValue(Operator.EQ, "42")),
    ],
    ids=["gte", "lt_entity", "ne", "explicit_eq", "bare", "upper_case", "unknown_prefix", "empty", "colon", "int"],
)
def test_parse_operator_value(token: Any, expected: OperatorValue) -> None:
    """Test splitting a token into operator and value."""
    assert parse_operator_value(token) == expected


def test_operator_value_str() -> None:
    assert str(OperatorValue(Operator.LTE, "5")) == "lte:5"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, []), ("1", ["1"]), (10, ["10"]), (["1", 2], ["1", "2"]), ((), [])],
    ids=["none", "scalar", "int", "list", "empty"],
)
def test_as_value_list(raw: Any, expected: "list[str]") -> None:
    assert as_value_list(raw) == expected


def test_parse_operator_values_keeps_first_occurrence() -> None:
    """Test exact duplicates collapse to the earliest occurrence, order kept."""
    pairs = parse_operator_values(["key1", "key1", "lte:key2", "lte:key2", "gte:key2", "gte:key3"])

    assert pairs == [
        OperatorValue(Operator.EQ, "key1"),
        OperatorValue(Operator.LTE, "key2"),
        OperatorValue(Operator.GTE, "key2"),
        OperatorValue(Operator.GTE, "key3"),
    ]


def test_parse_operator_values_dedupes_on_encoded_value() -> None:
    """Test values equal after encoding count as duplicates."""
    pairs = parse_operator_values(
        ["0.0.3", "3", "gt:0.0.1", "gt:1"], value_encoder=lambda value: EntityId.parse(value).encoded_id
    )

    assert pairs == [OperatorValue(Operator.EQ, "0.0.3"), OperatorValue(Operator.GT, "0.0.1")]


def test_parse_operator_values_is_idempotent() -> None:
    raw = ["gte:1", "lt:5", "2", "gte:1"]
    first = parse_operator_values(raw)
    second = parse_operator_values([str(pair) for pair in first])

    assert first == second


@pytest.mark.parametrize(
    ("operator", "lower", "upper", "inclusive"),
    [
        (Operator.EQ, False, False, True),
        (Operator.NE, False, False, False),
        (Operator.GT, True, False, False),
        (Operator.GTE, True, False, True),
        (Operator.LT, False, True, False),
        (Operator.LTE, False, True, True),
    ],
    ids=["eq", "ne", "gt", "gte", "lt", "lte"],
)
def test_operator_properties(operator: Operator, lower: bool, upper: bool, inclusive: bool) -> None:
    assert operator.is_lower_bound is lower
    assert operator.is_upper_bound is upper
    assert operator.inclusive is inclusive
    assert str(operator) == operator.value
