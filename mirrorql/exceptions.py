from collections.abc import Iterable
from typing import Any, Optional, Union

__all__ = (
    "InvalidArgumentError",
    "InvalidClauseError",
    "InvalidRangeError",
    "MirrorQLError",
)

INVALID_PARAMETER = "Invalid parameter"
UNKNOWN_PARAMETER = "Unknown query parameter"


class MirrorQLError(Exception):
    """Base exception class from which all mirrorql exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``MirrorQLError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class InvalidArgumentError(MirrorQLError):
    """Malformed or disallowed query input.

    Raised for bad operators, non-numeric values where a number is required,
    too many repeated values and unknown parameter keys. The HTTP layer maps it
    to a 400 response.
    """

    params: "tuple[str, ...]"
    messages: "tuple[str, ...]"

    def __init__(
        self,
        message: Optional[str] = None,
        params: "Optional[Iterable[str]]" = None,
        messages: "Optional[Iterable[str]]" = None,
    ) -> None:
        self.params = tuple(params or ())
        self.messages = tuple(messages or ((message,) if message else ()))
        if message is None:
            message = "; ".join(self.messages) if self.messages else "Invalid argument."
        super().__init__(message)

    @classmethod
    def for_params(cls, params: "Union[str, Iterable[str]]") -> "InvalidArgumentError":
        """Build an error naming every offending parameter.

        Args:
            params: A parameter name or an iterable of parameter names.

        Returns:
            The error with one ``Invalid parameter: <name>`` message per parameter.
        """
        names = [params] if isinstance(params, str) else list(params)
        return cls(params=names, messages=[f"{INVALID_PARAMETER}: {name}" for name in names])

    @classmethod
    def for_unknown_params(cls, params: "Union[str, Iterable[str]]") -> "InvalidArgumentError":
        names = [params] if isinstance(params, str) else list(params)
        return cls(params=names, messages=[f"{UNKNOWN_PARAMETER}: {name}" for name in names])


class InvalidClauseError(MirrorQLError):
    """A fragment builder broke the placeholder/value contract.

    This is always a programming error in the resource layer, never something a
    client can trigger.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Invalid clause produced by fragment builder."
        super().__init__(message)


class InvalidRangeError(InvalidArgumentError):
    """Timestamp range consolidation failed.

    Covers illegal operator combinations, empty or inverted intervals and
    ranges wider than the configured maximum.
    """
