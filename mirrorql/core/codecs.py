"""Per-field value normalizers.

Raw query values are strings. These helpers validate and convert them to the
representation bound into SQL: Python ints for nanosecond timestamps and
64-bit numbers (never floats), bytes for hex slots.
"""

import re
from typing import Any, Final, Optional, Union

from mirrorql.constants import MAX_INT32, MAX_LONG

__all__ = (
    "NANOS_PER_SECOND",
    "add_hex_prefix",
    "create_transaction_id",
    "format_slot",
    "is_non_negative_int32",
    "is_numeric",
    "is_positive_long",
    "is_valid_eth_hash",
    "is_valid_slot",
    "is_valid_timestamp_param",
    "ns_to_sec_ns",
    "ns_to_sec_ns_with_hyphen",
    "parse_balance_value",
    "parse_hex_str",
    "parse_integer",
    "parse_slot_value",
    "parse_timestamp_param",
    "strip_hex_prefix",
)

NANOS_PER_SECOND: Final = 1_000_000_000
HEX_PREFIX: Final = "0x"

_TIMESTAMP_REGEX: Final = re.compile(r"^(?P<seconds>\d{1,10})(?:\.(?P<nanos>\d{1,9}))?$")
_LONG_REGEX: Final = re.compile(r"^\d{1,19}$")
_INT32_REGEX: Final = re.compile(r"^\d{1,10}$")
_NUMERIC_REGEX: Final = re.compile(r"^-?\d+(?:\.\d+)?$")
_SLOT_REGEX: Final = re.compile(r"^(0x)?[0-9A-Fa-f]{1,64}$")
_ETH_HASH_REGEX: Final = re.compile(r"^(0x)?[0-9A-Fa-f]{64}$")


def parse_integer(value: "Union[str, int]") -> int:
    """Parse a base-10 integer without precision loss.

    Raises:
        ValueError: If the value is not an integer.
    """
    if isinstance(value, int):
        return value
    return int(value, 10)


def is_positive_long(value: Any, allow_zero: bool = False) -> bool:
    """Check whether the value is a positive signed 64-bit integer.

    Args:
        value: An int or a decimal string.
        allow_zero: Accept ``0`` as well.
    """
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _LONG_REGEX.match(value):
        number = int(value)
    else:
        return False
    minimum = 0 if allow_zero else 1
    return minimum <= number <= MAX_LONG


def is_non_negative_int32(value: Any) -> bool:
    text = str(value)
    return bool(_INT32_REGEX.match(text)) and int(text) <= MAX_INT32


def is_valid_timestamp_param(value: Any) -> bool:
    """Check for ``seconds`` or ``seconds.nanoseconds`` notation."""
    return isinstance(value, str) and _TIMESTAMP_REGEX.match(value) is not None


def parse_timestamp_param(value: Any) -> Optional[int]:
    """Convert ``seconds[.nanoseconds]`` to integer nanoseconds.

    The fractional part is right-padded, so ``2000.222`` is
    ``2000222000000``.

    Returns:
        Nanoseconds since the epoch, or ``None`` if the value is not a timestamp.
    """
    if not isinstance(value, str):
        return None
    match = _TIMESTAMP_REGEX.match(value)
    if match is None:
        return None
    nanos = (match.group("nanos") or "").ljust(9, "0")
    return int(match.group("seconds")) * NANOS_PER_SECOND + int(nanos)


def ns_to_sec_ns(ns: "Optional[Union[int, str]]", separator: str = ".") -> Optional[str]:
    """Format nanoseconds as ``seconds.nanoseconds`` with nine fractional digits."""
    if ns is None:
        return None
    seconds, nanos = divmod(int(ns), NANOS_PER_SECOND)
    return f"{seconds}{separator}{nanos:09d}"


def ns_to_sec_ns_with_hyphen(ns: "Optional[Union[int, str]]") -> Optional[str]:
    return ns_to_sec_ns(ns, separator="-")


def create_transaction_id(entity_id: str, valid_start_ns: "Union[int, str]") -> str:
    return f"{entity_id}-{ns_to_sec_ns_with_hyphen(valid_start_ns)}"


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and _NUMERIC_REGEX.match(value) is not None


def parse_balance_value(value: str) -> Optional[str]:
    """Keep numeric balance values as given, drop anything else."""
    return value if is_numeric(value) else None


def strip_hex_prefix(value: Any) -> Any:
    """Remove a leading ``0x`` from strings; other values are returned as is."""
    if isinstance(value, str) and value.startswith(HEX_PREFIX):
        return value[len(HEX_PREFIX) :]
    return value


def add_hex_prefix(value: "Union[str, bytes, bytearray, list[int], None]") -> str:
    """Return the hex text with exactly one ``0x`` prefix.

    Bytes and lists of ints are treated as ASCII text holding hex digits.
    """
    if value is None:
        return HEX_PREFIX
    text = value if isinstance(value, str) else bytes(value).decode("ascii")
    return f"{HEX_PREFIX}{strip_hex_prefix(text)}"


def parse_hex_str(value: str) -> bytes:
    """Decode a hex string with an optional ``0x`` prefix.

    Raises:
        ValueError: If the value is not hex.
    """
    text = strip_hex_prefix(value)
    if len(text) % 2:
        text = f"0{text}"
    return bytes.fromhex(text)


def is_valid_slot(value: Any) -> bool:
    return isinstance(value, str) and _SLOT_REGEX.match(value) is not None


def format_slot(slot: str, left_pad: bool = False) -> bytes:
    """Normalize a contract storage slot to the stored byte form.

    Leading zeros are dropped unless ``left_pad`` is set, in which case the
    slot is padded to the full 32 bytes.
    """
    text = strip_hex_prefix(slot)
    text = text.rjust(64, "0") if left_pad else text.lstrip("0")
    return parse_hex_str(text)


def parse_slot_value(slot: str) -> int:
    return int.from_bytes(format_slot(slot), "big")


def is_valid_eth_hash(value: Any) -> bool:
    return isinstance(value, str) and _ETH_HASH_REGEX.match(value) is not None
