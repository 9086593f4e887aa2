"""Global enums.

Integer enums must match the DarkPool contract's uint8 enums exactly: their
values are hashed into commitments and passed as reveal arguments.
"""

from enum import Enum, IntEnum


class OrderKind(IntEnum):
    MARKET = 0
    LIMIT = 1
    ICEBERG = 2
    VOLUME_WEIGHTED = 3  # VWAP
    TIME_WEIGHTED = 4  # TWAP


class OrderSide(IntEnum):
    BUY = 0
    SELL = 1


class LedgerOrderStatus(IntEnum):
    """Order status as tracked by the ledger (read-only here)."""
    PENDING = 0
    PARTIALLY_FILLED = 1
    FILLED = 2
    CANCELLED = 3
    EXPIRED = 4

    @property
    def is_terminal(self) -> bool:
        return self not in (LedgerOrderStatus.PENDING, LedgerOrderStatus.PARTIALLY_FILLED)


class LocalPhase(str, Enum):
    """Client-side view of one commitment's lifecycle."""
    UNCOMMITTED = "UNCOMMITTED"
    COMMITTING = "COMMITTING"
    COMMITTED = "COMMITTED"
    REVEALING = "REVEALING"
    REVEALED = "REVEALED"
    CANCELLING = "CANCELLING"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class SecretStoreBackend(str, Enum):
    FILE = "file"
    SQL = "sql"
    MEMORY = "memory"


class ConfirmAction(str, Enum):
    COMMIT = "commit"
    REVEAL = "reveal"
    CANCEL = "cancel"
