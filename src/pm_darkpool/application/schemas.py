# src/pm_darkpool/application/schemas.py
"""Request/response models for the dark-pool API.

Field-element and amount values can exceed 2**53, so responses carry them as
decimal strings; requests accept plain integers.
"""
from typing import Literal

from eth_utils import is_hex_address
from pydantic import BaseModel, Field, field_validator

from src.pm_commitment.domain.models import InstrumentRef, OrderParameters
from src.pm_common.enums import ConfirmAction, OrderKind, OrderSide
from src.pm_darkpool.domain.models import CommitReceipt, PendingCommitmentView
from src.pm_ledger.domain.models import CommitmentDetails, InstrumentStatistics, LedgerOrder
from src.pm_risk.rules.reveal_delay import RevealWindow

OrderKindName = Literal["MARKET", "LIMIT", "ICEBERG", "VOLUME_WEIGHTED", "TIME_WEIGHTED"]
OrderSideName = Literal["BUY", "SELL"]


class SubmitCommitRequest(BaseModel):
    instrument_address: str
    instrument_id: int = Field(ge=0)
    order_kind: OrderKindName
    side: OrderSideName
    quantity: int
    limit_price: int
    minimum_fill: int = 0
    expiry: int
    escrow_amount: int = Field(0, ge=0)

    @field_validator("instrument_address")
    @classmethod
    def hex_address(cls, v: str) -> str:
        if not is_hex_address(v):
            raise ValueError("instrument_address must be a 0x-prefixed 20-byte hex address")
        return v

    def to_params(self) -> OrderParameters:
        return OrderParameters(
            instrument=InstrumentRef(address=self.instrument_address, instance_id=self.instrument_id),
            order_kind=OrderKind[self.order_kind],
            side=OrderSide[self.side],
            quantity=self.quantity,
            limit_price=self.limit_price,
            minimum_fill=self.minimum_fill,
            expiry=self.expiry,
        )


class ConfirmRequest(BaseModel):
    tx_ref: str
    action: ConfirmAction

    @field_validator("tx_ref")
    @classmethod
    def hex_tx_ref(cls, v: str) -> str:
        if not v.startswith("0x") or len(v) != 66:
            raise ValueError("tx_ref must be a 0x-prefixed 32-byte transaction hash")
        return v


class OrderParamsResponse(BaseModel):
    instrument_address: str
    instrument_id: str
    order_kind: str
    side: str
    quantity: str
    limit_price: str
    minimum_fill: str
    expiry: int

    @classmethod
    def from_domain(cls, params: OrderParameters) -> "OrderParamsResponse":
        return cls(
            instrument_address=params.instrument.address,
            instrument_id=str(params.instrument.instance_id),
            order_kind=params.order_kind.name,
            side=params.side.name,
            quantity=str(params.quantity),
            limit_price=str(params.limit_price),
            minimum_fill=str(params.minimum_fill),
            expiry=params.expiry,
        )


class CommitReceiptResponse(BaseModel):
    commitment_hash: str
    nullifier: str
    tx_ref: str
    phase: str

    @classmethod
    def from_domain(cls, receipt: CommitReceipt) -> "CommitReceiptResponse":
        return cls(
            commitment_hash=receipt.commitment_hash,
            nullifier=receipt.nullifier,
            tx_ref=receipt.tx_ref,
            phase=receipt.phase.value,
        )


class PendingCommitmentResponse(BaseModel):
    commitment_hash: str
    phase: str
    params: OrderParamsResponse
    created_at: int
    escrow_amount: str
    reveal_at: int

    @classmethod
    def from_domain(cls, view: PendingCommitmentView) -> "PendingCommitmentResponse":
        return cls(
            commitment_hash=view.commitment_hash,
            phase=view.phase.value,
            params=OrderParamsResponse.from_domain(view.params),
            created_at=view.created_at,
            escrow_amount=str(view.escrow_amount),
            reveal_at=view.reveal_at,
        )


class PendingListResponse(BaseModel):
    items: list[PendingCommitmentResponse]
    total: int
    corrupted: list[str] = []


class RevealStatusResponse(BaseModel):
    commitment_hash: str
    can_reveal: bool
    remaining_seconds: int
    reveal_at: int

    @classmethod
    def from_domain(cls, commitment_hash: str, window: RevealWindow) -> "RevealStatusResponse":
        return cls(
            commitment_hash=commitment_hash,
            can_reveal=window.allowed,
            remaining_seconds=window.remaining_seconds,
            reveal_at=window.reveal_at,
        )


class TxSubmittedResponse(BaseModel):
    commitment_hash: str
    tx_ref: str
    phase: str


class PhaseResponse(BaseModel):
    commitment_hash: str
    phase: str


class AbandonResponse(BaseModel):
    commitment_hash: str
    abandoned: bool


class CommitmentDetailsResponse(BaseModel):
    commitment_hash: str
    exists: bool
    timestamp: int
    trader: str
    escrow_amount: str
    revealed: bool

    @classmethod
    def from_domain(cls, details: CommitmentDetails) -> "CommitmentDetailsResponse":
        return cls(
            commitment_hash=details.commitment_hash,
            exists=details.exists,
            timestamp=details.timestamp,
            trader=details.trader,
            escrow_amount=str(details.escrow_amount),
            revealed=details.revealed,
        )


class LedgerOrderResponse(BaseModel):
    order_hash: str
    trader: str
    instrument_address: str
    instrument_id: str
    order_kind: str
    side: str
    quantity: str
    limit_price: str
    filled_quantity: str
    remaining_quantity: str
    minimum_fill: str
    expiry: int
    status: str
    is_public: bool
    created_at: int

    @classmethod
    def from_domain(cls, order: LedgerOrder) -> "LedgerOrderResponse":
        return cls(
            order_hash=order.order_hash,
            trader=order.trader,
            instrument_address=order.instrument_address,
            instrument_id=str(order.instrument_id),
            order_kind=order.order_kind.name,
            side=order.side.name,
            quantity=str(order.quantity),
            limit_price=str(order.limit_price),
            filled_quantity=str(order.filled_quantity),
            remaining_quantity=str(order.remaining_quantity),
            minimum_fill=str(order.minimum_fill),
            expiry=order.expiry,
            status=order.status.name,
            is_public=order.is_public,
            created_at=order.created_at,
        )


class TraderOrdersResponse(BaseModel):
    trader: str
    order_hashes: list[str]


class StatisticsResponse(BaseModel):
    instrument_address: str
    instrument_id: str
    total_volume: str
    total_trades: int
    last_price: str

    @classmethod
    def from_domain(cls, stats: InstrumentStatistics) -> "StatisticsResponse":
        return cls(
            instrument_address=stats.instrument_address,
            instrument_id=str(stats.instrument_id),
            total_volume=str(stats.total_volume),
            total_trades=stats.total_trades,
            last_price=str(stats.last_price),
        )


class ActiveOrdersCountResponse(BaseModel):
    active_orders: int
