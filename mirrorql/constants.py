"""Query keys and fixed values shared across the engine."""

from enum import Enum
from typing import Final

__all__ = (
    "MAX_INT32",
    "MAX_LONG",
    "FilterKey",
    "KeyType",
    "Order",
)

MAX_INT32: Final = 2**31 - 1
MAX_LONG: Final = 2**63 - 1


class FilterKey(str, Enum):
    """Query parameter keys understood by the engine."""

    ACCOUNT_BALANCE = "account.balance"
    ACCOUNT_ID = "account.id"
    ACCOUNT_PUBLICKEY = "account.publickey"
    BLOCK_NUMBER = "block.number"
    CONTRACT_ID = "contract.id"
    LIMIT = "limit"
    NODE_ID = "node.id"
    ORDER = "order"
    SCHEDULE_ID = "schedule.id"
    SERIAL_NUMBER = "serialnumber"
    SLOT = "slot"
    SPENDER_ID = "spender.id"
    TIMESTAMP = "timestamp"
    TOKEN_ID = "token.id"

    def __str__(self) -> str:
        return self.value


class Order(str, Enum):
    """Sort direction values of the ``order`` parameter."""

    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value


class KeyType(str, Enum):
    """Types of a decoded public key."""

    ECDSA_SECP256K1 = "ECDSA_SECP256K1"
    ED25519 = "ED25519"
    PROTOBUF_ENCODED = "ProtobufEncoded"

    def __str__(self) -> str:
        return self.value
