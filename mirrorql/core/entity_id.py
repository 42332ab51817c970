"""Entity id parsing and encoding.

Entity ids are written ``shard.realm.num`` or just ``num``. The database
stores them as one 64-bit integer with 10 bits of shard, 16 bits of realm and
38 bits of number.
"""

import re
from typing import TYPE_CHECKING, Any, Final, Optional

from mirrorql.config import DEFAULT_CONFIG
from mirrorql.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from mirrorql.config import QueryConfig

__all__ = ("EntityId", "is_valid_entity_id")

SHARD_BITS: Final = 10
REALM_BITS: Final = 16
NUM_BITS: Final = 38

MAX_SHARD: Final = (1 << SHARD_BITS) - 1
MAX_REALM: Final = (1 << REALM_BITS) - 1
MAX_NUM: Final = (1 << NUM_BITS) - 1

_ENTITY_ID_REGEX: Final = re.compile(r"^(?:(?P<shard>\d{1,4})\.(?P<realm>\d{1,5})\.)?(?P<num>\d{1,12})$")


class EntityId:
    """A ``shard.realm.num`` entity id."""

    __slots__ = ("num", "realm", "shard")

    def __init__(self, shard: int, realm: int, num: int) -> None:
        if not (0 <= shard <= MAX_SHARD and 0 <= realm <= MAX_REALM and 0 <= num <= MAX_NUM):
            msg = f"Entity id {shard}.{realm}.{num} out of range"
            raise InvalidArgumentError(msg)
        self.shard = shard
        self.realm = realm
        self.num = num

    @classmethod
    def parse(
        cls, value: Any, param_name: Optional[str] = None, config: "Optional[QueryConfig]" = None
    ) -> "EntityId":
        """Parse ``shard.realm.num`` or ``num`` notation.

        Args:
            value: The raw entity id.
            param_name: Query key reported in the error, if any.
            config: Supplies the default shard and realm.

        Raises:
            InvalidArgumentError: If the value is not a valid entity id.

        Returns:
            The parsed entity id.
        """
        config = config or DEFAULT_CONFIG
        match = _ENTITY_ID_REGEX.match(str(value))
        if match is None:
            raise InvalidArgumentError.for_params(param_name or "entity id")
        shard = match.group("shard")
        realm = match.group("realm")
        try:
            return cls(
                int(shard) if shard is not None else config.shard,
                int(realm) if realm is not None else config.realm,
                int(match.group("num")),
            )
        except InvalidArgumentError as e:
            raise InvalidArgumentError.for_params(param_name or "entity id") from e

    @classmethod
    def parse_encoded(cls, encoded_id: int) -> "EntityId":
        num = encoded_id & MAX_NUM
        realm = (encoded_id >> NUM_BITS) & MAX_REALM
        shard = encoded_id >> (NUM_BITS + REALM_BITS)
        return cls(shard, realm, num)

    @property
    def encoded_id(self) -> int:
        return (self.shard << (NUM_BITS + REALM_BITS)) | (self.realm << NUM_BITS) | self.num

    def __str__(self) -> str:
        return f"{self.shard}.{self.realm}.{self.num}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.encoded_id == other.encoded_id

    def __hash__(self) -> int:
        return hash(self.encoded_id)


def is_valid_entity_id(value: Any) -> bool:
    try:
        EntityId.parse(value)
    except InvalidArgumentError:
        return False
    return True
