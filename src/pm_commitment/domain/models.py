"""Commitment domain models: pure dataclasses, no I/O."""
from dataclasses import dataclass

from src.pm_common.enums import OrderKind, OrderSide


@dataclass(frozen=True)
class InstrumentRef:
    address: str  # 0x-prefixed 20-byte contract address
    instance_id: int  # token id within the contract


@dataclass(frozen=True)
class OrderParameters:
    """The private payload disclosed at reveal time.

    Amounts are integers in the asset's fixed-point unit (wei-style).
    """

    instrument: InstrumentRef
    order_kind: OrderKind
    side: OrderSide
    quantity: int
    limit_price: int
    minimum_fill: int
    expiry: int  # unix seconds


@dataclass(frozen=True)
class Commitment:
    salt: int
    commitment_hash: int
    nullifier: int

    @property
    def commitment_hex(self) -> str:
        return to_bytes32_hex(self.commitment_hash)

    @property
    def nullifier_hex(self) -> str:
        return to_bytes32_hex(self.nullifier)


def to_bytes32_hex(value: int) -> str:
    """Fixed-width 0x + 64 hex digits, the bytes32 form used on the ledger."""
    return "0x" + value.to_bytes(32, "big").hex()


def from_bytes32_hex(value: str) -> int:
    h = value[2:] if value.startswith(("0x", "0X")) else value
    if len(h) != 64:
        raise ValueError(f"Expected 32-byte hex, got {len(h) // 2} bytes")
    return int(h, 16)


def normalize_bytes32_hex(value: str) -> str:
    """Canonical lowercase form of a bytes32 hex key."""
    return to_bytes32_hex(from_bytes32_hex(value))
