"""Public key decoding and normalization.

Stored keys are serialized protobuf ``Key`` messages. They are decoded into a
``(type, hex)`` pair for responses and comparisons; externally supplied keys
in query strings are normalized to bare lowercase hex before filtering.
"""

import re
from collections.abc import Iterator
from typing import Any, Final, NamedTuple, Optional, Union

from mirrorql.constants import KeyType

__all__ = (
    "IMMUTABLE_KEY_SENTINEL",
    "Key",
    "decode_key",
    "is_valid_public_key_query",
    "parse_public_key",
)

# Key with an empty keyList: the entity has no key and is immutable.
IMMUTABLE_KEY_SENTINEL: Final = bytes.fromhex("3200")

ED25519_DER_PREFIX: Final = "302a300506032b6570032100"
ECDSA_SECP256K1_DER_PREFIX: Final = "302d300706052b8104000a032200"

_PUBLIC_KEY_REGEX: Final = re.compile(
    rf"^(?:0x)?(?:(?:{ED25519_DER_PREFIX})?(?P<ed25519>[0-9a-f]{{64}})"
    rf"|(?:{ECDSA_SECP256K1_DER_PREFIX})?(?P<ecdsa>[0-9a-f]{{66}}))$",
    re.IGNORECASE,
)

_WIRE_VARINT: Final = 0
_WIRE_FIXED64: Final = 1
_WIRE_LENGTH_DELIMITED: Final = 2
_WIRE_FIXED32: Final = 5

# Field numbers of the Key, KeyList and ThresholdKey messages.
_KEY_ED25519: Final = 2
_KEY_THRESHOLD_KEY: Final = 5
_KEY_KEY_LIST: Final = 6
_KEY_ECDSA_SECP256K1: Final = 7
_KEY_FIELDS: Final = frozenset(range(1, 9))
_KEY_LIST_KEYS: Final = 1
_THRESHOLD_KEY_KEYS: Final = 2


class Key(NamedTuple):
    """Canonical form of a decoded key."""

    type: KeyType
    hex: str

    def to_dict(self) -> dict[str, str]:
        return {"_type": self.type.value, "key": self.hex}


def _read_varint(data: bytes, position: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if position >= len(data) or shift > 63:
            msg = "Truncated varint"
            raise ValueError(msg)
        byte = data[position]
        position += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, position
        shift += 7


def _iter_fields(data: bytes) -> Iterator[tuple[int, int, Union[int, bytes]]]:
    """Walk the protobuf wire format, yielding ``(field, wire_type, value)``.

    Raises:
        ValueError: On malformed input or unsupported (group) wire types.
    """
    position = 0
    while position < len(data):
        tag, position = _read_varint(data, position)
        field_number, wire_type = tag >> 3, tag & 0x07
        if field_number == 0:
            msg = "Invalid field number 0"
            raise ValueError(msg)

        value: Union[int, bytes]
        if wire_type == _WIRE_VARINT:
            value, position = _read_varint(data, position)
        elif wire_type in {_WIRE_FIXED64, _WIRE_FIXED32, _WIRE_LENGTH_DELIMITED}:
            if wire_type == _WIRE_LENGTH_DELIMITED:
                length, position = _read_varint(data, position)
            else:
                length = 8 if wire_type == _WIRE_FIXED64 else 4
            end = position + length
            if end > len(data):
                msg = "Truncated field"
                raise ValueError(msg)
            value = data[position:end]
            position = end
        else:
            msg = f"Unsupported wire type {wire_type}"
            raise ValueError(msg)
        yield field_number, wire_type, value


def _parse_key(data: bytes) -> Optional[tuple[int, bytes]]:
    """Return the populated ``Key`` oneof field and its payload.

    The last occurrence wins, as protobuf merges a oneof that way.
    """
    selected: Optional[tuple[int, bytes]] = None
    for field_number, wire_type, value in _iter_fields(data):
        if field_number not in _KEY_FIELDS:
            continue
        if wire_type != _WIRE_LENGTH_DELIMITED:
            msg = f"Unexpected wire type {wire_type} for Key field {field_number}"
            raise ValueError(msg)
        selected = (field_number, value)  # type: ignore[assignment]
    return selected


def _first_key_of_list(key_list: bytes) -> Optional[bytes]:
    for field_number, wire_type, value in _iter_fields(key_list):
        if field_number == _KEY_LIST_KEYS and wire_type == _WIRE_LENGTH_DELIMITED:
            return value  # type: ignore[return-value]
    return None


def _first_key_of_threshold(threshold_key: bytes) -> Optional[bytes]:
    for field_number, wire_type, value in _iter_fields(threshold_key):
        if field_number == _THRESHOLD_KEY_KEYS and wire_type == _WIRE_LENGTH_DELIMITED:
            return _first_key_of_list(value)  # type: ignore[arg-type]
    return None


def decode_key(data: "Optional[Union[bytes, bytearray, memoryview]]") -> Optional[Key]:
    """Decode a serialized protobuf key into its canonical form.

    A ``keyList`` or ``thresholdKey`` wrapper is unwrapped one level and only
    its first key is used. Anything that is not an ED25519 or ECDSA(secp256k1)
    primitive after that, including bytes that fail to parse, comes back as
    ``ProtobufEncoded`` with the hex of the original bytes.

    Args:
        data: Serialized ``Key`` message.

    Returns:
        The decoded key, or ``None`` for no key and for the immutable sentinel.
    """
    if data is None:
        return None
    raw = bytes(data)
    if not raw:
        return Key(KeyType.PROTOBUF_ENCODED, "")
    if raw == IMMUTABLE_KEY_SENTINEL:
        return None

    fallback = Key(KeyType.PROTOBUF_ENCODED, raw.hex())
    try:
        key = _parse_key(raw)
        if key is not None and key[0] in {_KEY_KEY_LIST, _KEY_THRESHOLD_KEY}:
            unwrap = _first_key_of_list if key[0] == _KEY_KEY_LIST else _first_key_of_threshold
            inner = unwrap(key[1])
            key = _parse_key(inner) if inner is not None else None
    except ValueError:
        return fallback

    if key is None:
        return fallback
    field_number, payload = key
    if field_number == _KEY_ED25519:
        return Key(KeyType.ED25519, payload.hex())
    if field_number == _KEY_ECDSA_SECP256K1:
        return Key(KeyType.ECDSA_SECP256K1, payload.hex())
    return fallback


def parse_public_key(value: Any) -> Any:
    """Normalize a public key given in a query.

    Raw ED25519 (64 hex chars) and compressed ECDSA(secp256k1) (66 hex chars)
    keys, with or without ``0x`` and in either case, and each wrapped in its own
    DER prefix are returned as bare lowercase hex. Other values pass through
    unchanged; use :func:`is_valid_public_key_query` to reject them.
    """
    if value is None:
        return None
    match = _PUBLIC_KEY_REGEX.match(str(value))
    if match is None:
        return value
    return (match.group("ed25519") or match.group("ecdsa")).lower()


def is_valid_public_key_query(value: Any) -> bool:
    return isinstance(value, str) and _PUBLIC_KEY_REGEX.match(value) is not None
