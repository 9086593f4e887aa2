"""Ledger read models: what the DarkPool contract reports, decoded."""
from dataclasses import dataclass

from src.pm_common.enums import LedgerOrderStatus, OrderKind, OrderSide


@dataclass(frozen=True)
class TxReceipt:
    tx_ref: str
    succeeded: bool
    block_number: int | None = None


@dataclass(frozen=True)
class CommitmentDetails:
    commitment_hash: str
    exists: bool
    timestamp: int  # block timestamp of the commit, 0 if unknown
    trader: str
    escrow_amount: int
    revealed: bool


@dataclass(frozen=True)
class LedgerOrder:
    order_hash: str
    trader: str
    instrument_address: str
    instrument_id: int
    order_kind: OrderKind
    side: OrderSide
    quantity: int
    limit_price: int
    filled_quantity: int
    minimum_fill: int
    expiry: int
    status: LedgerOrderStatus
    is_public: bool
    created_at: int

    @property
    def remaining_quantity(self) -> int:
        return self.quantity - self.filled_quantity


@dataclass(frozen=True)
class InstrumentStatistics:
    instrument_address: str
    instrument_id: int
    total_volume: int
    total_trades: int
    last_price: int
