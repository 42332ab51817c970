"""Unit tests for mirrorql.core.codecs."""

from typing import Any, Optional

import pytest

from mirrorql.core.codecs import (
    add_hex_prefix,
    create_transaction_id,
    format_slot,
    is_non_negative_int32,
    is_numeric,
    is_positive_long,
    is_valid_eth_hash,
    is_valid_slot,
    is_valid_timestamp_param,
    ns_to_sec_ns,
    ns_to_sec_ns_with_hyphen,
    parse_balance_value,
    parse_hex_str,
    parse_integer,
    parse_slot_value,
    parse_timestamp_param,
    strip_hex_prefix,
)


@pytest.mark.parametrize(
    ("value", "allow_zero", "expected"),
    [
        ("1", False, True),
        ("0", False, False),
        ("0", True, True),
        ("9223372036854775807", False, True),
        ("9223372036854775808", False, False),
        ("-1", True, False),
        ("1.5", False, False),
        (5, False, True),
        (True, False, False),
        (None, False, False),
    ],
    ids=["one", "zero", "zero_allowed", "max_long", "over_max", "negative", "decimal", "int", "bool", "none"],
)
def test_is_positive_long(value: Any, allow_zero: bool, expected: bool) -> None:
    assert is_positive_long(value, allow_zero=allow_zero) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [("0", True), ("2147483647", True), ("2147483648", False), ("-1", False), ("x", False)],
    ids=["zero", "max", "over_max", "negative", "text"],
)
def test_is_non_negative_int32(value: str, expected: bool) -> None:
    assert is_non_negative_int32(value) is expected


def test_parse_integer_keeps_precision() -> None:
    assert parse_integer("9223372036854775807") == 9223372036854775807
    assert parse_integer(42) == 42
    with pytest.raises(ValueError):
        parse_integer("1.0")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("", None),
        ("0.0.1", None),
        ("1234567890", 1234567890000000000),
        ("1234567890.000000001", 1234567890000000001),
        ("2000.222", 2000222000000),
        ("1.1234567891", None),
        (1234, None),
    ],
    ids=["none", "empty", "entity_id", "seconds", "nanos", "padded_nanos", "too_many_nanos", "int"],
)
def test_parse_timestamp_param(value: Any, expected: Optional[int]) -> None:
    assert parse_timestamp_param(value) == expected
    assert is_valid_timestamp_param(value) is (expected is not None)


@pytest.mark.parametrize(
    ("ns", "expected"),
    [(None, None), (0, "0.000000000"), (1234567890000000001, "1234567890.000000001"), ("1000000123", "1.000000123")],
    ids=["none", "zero", "nanos", "string"],
)
def test_ns_to_sec_ns(ns: Any, expected: Optional[str]) -> None:
    assert ns_to_sec_ns(ns) == expected


def test_transaction_id_formatting() -> None:
    assert ns_to_sec_ns_with_hyphen(1234567890000000001) == "1234567890-000000001"
    assert create_transaction_id("0.0.2", 1234567890000000001) == "0.0.2-1234567890-000000001"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1000", "1000"), ("-5", "-5"), ("1.5", "1.5"), ("QQQ", None), ("", None), ("1e5", None)],
    ids=["int", "negative", "decimal", "text", "empty", "exponent"],
)
def test_parse_balance_value(value: str, expected: Optional[str]) -> None:
    assert parse_balance_value(value) == expected
    assert is_numeric(value) is (expected is not None)


def test_hex_prefix_helpers() -> None:
    assert strip_hex_prefix("0xabc") == "abc"
    assert strip_hex_prefix("abc") == "abc"
    assert strip_hex_prefix(None) is None
    assert add_hex_prefix("abc") == "0xabc"
    assert add_hex_prefix("0xabc") == "0xabc"
    assert add_hex_prefix(b"abc") == "0xabc"
    assert add_hex_prefix([97, 98]) == "0xab"
    assert add_hex_prefix(None) == "0x"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("0x0a", b"\x0a"), ("abc", b"\x0a\xbc"), ("", b""), ("0xFF", b"\xff")],
    ids=["prefixed", "odd_length", "empty", "upper"],
)
def test_parse_hex_str(value: str, expected: bytes) -> None:
    assert parse_hex_str(value) == expected


def test_parse_hex_str_invalid() -> None:
    with pytest.raises(ValueError):
        parse_hex_str("0xzz")


def test_slots() -> None:
    assert is_valid_slot("0x0a")
    assert is_valid_slot("a" * 64)
    assert not is_valid_slot("a" * 65)
    assert not is_valid_slot("0xg")
    assert format_slot("0x000a") == b"\x0a"
    assert format_slot("0x0a", left_pad=True) == bytes(31) + b"\x0a"
    assert parse_slot_value("0a") == 10


def test_is_valid_eth_hash() -> None:
    assert is_valid_eth_hash("0x" + "ab" * 32)
    assert is_valid_eth_hash("ab" * 32)
    assert not is_valid_eth_hash("ab" * 31)
