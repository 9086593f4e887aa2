"""Persisted record layout for PendingSecret, shared by the file and SQL backends.

Big integers are decimal strings so the JSON stays exact in any reader.
"""
from pydantic import BaseModel, ConfigDict, ValidationError

from src.pm_commitment.domain.models import (
    InstrumentRef,
    OrderParameters,
    normalize_bytes32_hex,
)
from src.pm_common.enums import OrderKind, OrderSide
from src.pm_common.errors import SecretCorruptedError
from src.pm_secret.domain.models import PendingSecret

RECORD_VERSION = 1


class OrderParamsRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    instrument_address: str
    instrument_id: str
    order_kind: int
    side: int
    quantity: str
    limit_price: str
    minimum_fill: str
    expiry: int


class PendingSecretRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: int = RECORD_VERSION
    commitment_hash: str
    params: OrderParamsRecord
    salt: str
    created_at: int
    escrow_amount: str

    @classmethod
    def from_domain(cls, secret: PendingSecret) -> "PendingSecretRecord":
        p = secret.params
        return cls(
            commitment_hash=secret.commitment_hash,
            params=OrderParamsRecord(
                instrument_address=p.instrument.address,
                instrument_id=str(p.instrument.instance_id),
                order_kind=int(p.order_kind),
                side=int(p.side),
                quantity=str(p.quantity),
                limit_price=str(p.limit_price),
                minimum_fill=str(p.minimum_fill),
                expiry=p.expiry,
            ),
            salt=str(secret.salt),
            created_at=secret.created_at,
            escrow_amount=str(secret.escrow_amount),
        )

    def to_domain(self) -> PendingSecret:
        p = self.params
        return PendingSecret(
            commitment_hash=self.commitment_hash,
            params=OrderParameters(
                instrument=InstrumentRef(
                    address=p.instrument_address, instance_id=int(p.instrument_id)
                ),
                order_kind=OrderKind(p.order_kind),
                side=OrderSide(p.side),
                quantity=int(p.quantity),
                limit_price=int(p.limit_price),
                minimum_fill=int(p.minimum_fill),
                expiry=p.expiry,
            ),
            salt=int(self.salt),
            created_at=self.created_at,
            escrow_amount=int(self.escrow_amount),
        )


def dump_secret(secret: PendingSecret) -> str:
    return PendingSecretRecord.from_domain(secret).model_dump_json(indent=2)


def load_secret(commitment_hash: str, raw: str | bytes) -> PendingSecret:
    """Parse a stored document; unreadable content is a corrupted secret."""
    try:
        record = PendingSecretRecord.model_validate_json(raw)
        secret = record.to_domain()
        normalize_bytes32_hex(secret.commitment_hash)
    except (ValidationError, ValueError) as exc:
        raise SecretCorruptedError(commitment_hash, f"unreadable record ({exc})") from exc
    if normalize_bytes32_hex(secret.commitment_hash) != normalize_bytes32_hex(commitment_hash):
        raise SecretCorruptedError(commitment_hash, "record is stored under the wrong key")
    return secret
