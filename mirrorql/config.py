"""Read-only engine configuration."""

from typing import Final

__all__ = ("DEFAULT_CONFIG", "ONE_DAY_IN_NS", "QueryConfig")

ONE_DAY_IN_NS: Final = 86_400_000_000_000


class QueryConfig:
    """Limits and toggles consumed by the filter and cursor engine.

    Built once at process startup by the surrounding service and never mutated
    afterwards, so a single instance is safe to share between request threads.
    """

    __slots__ = (
        "default_limit",
        "max_limit",
        "max_repeated_query_parameters",
        "max_timestamp_range_ns",
        "realm",
        "shard",
        "strict_timestamp_param",
    )

    def __init__(
        self,
        default_limit: int = 25,
        max_limit: int = 100,
        max_repeated_query_parameters: int = 100,
        max_timestamp_range_ns: int = 7 * ONE_DAY_IN_NS,
        strict_timestamp_param: bool = True,
        shard: int = 0,
        realm: int = 0,
    ) -> None:
        """Initialize the configuration.

        Args:
            default_limit: Page size used when the request has no ``limit``.
            max_limit: Upper cap applied to a requested ``limit``.
            max_repeated_query_parameters: Maximum values accepted for one repeated key.
            max_timestamp_range_ns: Widest timestamp range, in nanoseconds, a query may span.
            strict_timestamp_param: Reject mixed timestamp operator combinations.
            shard: Default shard for entity ids given without one.
            realm: Default realm for entity ids given without one.
        """
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.max_repeated_query_parameters = max_repeated_query_parameters
        self.max_timestamp_range_ns = max_timestamp_range_ns
        self.strict_timestamp_param = strict_timestamp_param
        self.shard = shard
        self.realm = realm

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={getattr(self, name)!r}" for name in sorted(self.__slots__))
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, name) for name in self.__slots__))


DEFAULT_CONFIG: Final = QueryConfig()
