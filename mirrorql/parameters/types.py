"""Placeholder types used by clause rendering."""

from enum import Enum
from typing import Optional

__all__ = ("PlaceholderInfo", "PlaceholderStyle")


class PlaceholderStyle(str, Enum):
    """Placeholder style enumeration with string values."""

    QMARK = "qmark"
    NAMED_QMARK = "named_qmark"
    NUMERIC = "numeric"

    def __str__(self) -> str:
        return self.value


class PlaceholderInfo:
    """Immutable placeholder information."""

    __slots__ = ("name", "ordinal", "placeholder_text", "position", "style")

    def __init__(
        self, name: Optional[str], style: PlaceholderStyle, position: int, ordinal: int, placeholder_text: str
    ) -> None:
        self.name = name
        self.style = style
        self.position = position
        self.ordinal = ordinal
        self.placeholder_text = placeholder_text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.name == other.name and self.style == other.style and self.position == other.position

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join([f'name={self.name!r}', f'ordinal={self.ordinal!r}', f'placeholder_text={self.placeholder_text!r}', f'position={self.position!r}', f'style={self.style!r}'])})"

    def __hash__(self) -> int:
        return hash((self.name, self.style, self.position))
