"""JSON encoding for structured log output."""

from typing import Any

import msgspec

__all__ = ("encode_json",)


def _type_to_string(value: Any) -> str:
    """Encode values msgspec does not support natively, such as entity ids, by their string form."""
    return str(value)


_encoder = msgspec.json.Encoder(enc_hook=_type_to_string)


def encode_json(data: Any) -> str:
    return _encoder.encode(data).decode("utf-8")
