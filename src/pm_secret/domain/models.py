"""PendingSecret: the durable local record behind one commitment."""
from dataclasses import dataclass

from src.pm_commitment.domain.models import OrderParameters, normalize_bytes32_hex


@dataclass(frozen=True)
class PendingSecret:
    commitment_hash: str  # 0x + 64 hex, the store key
    params: OrderParameters
    salt: int
    created_at: int  # unix seconds, set at commit time
    escrow_amount: int = 0  # value locked alongside the commitment


def store_key(commitment_hash: str, secret: PendingSecret) -> str:
    """Normalized key for ``put``; the secret must belong to that key."""
    key = normalize_bytes32_hex(commitment_hash)
    if normalize_bytes32_hex(secret.commitment_hash) != key:
        raise ValueError(
            f"Secret for {secret.commitment_hash} cannot be stored under {key}"
        )
    return key
