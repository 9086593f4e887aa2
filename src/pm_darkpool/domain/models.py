"""Orchestrator domain models: pure dataclasses, no I/O."""
from dataclasses import dataclass

from src.pm_commitment.domain.models import OrderParameters
from src.pm_common.enums import LocalPhase


@dataclass(frozen=True)
class CommitReceipt:
    commitment_hash: str
    nullifier: str
    tx_ref: str
    phase: LocalPhase


@dataclass(frozen=True)
class PendingCommitmentView:
    """A stored commitment as shown to callers: the salt is never included."""

    commitment_hash: str
    phase: LocalPhase
    params: OrderParameters
    created_at: int
    escrow_amount: int
    reveal_at: int  # later of local and ledger commit time, plus the reveal delay


@dataclass(frozen=True)
class PendingListing:
    """Readable pending commitments, plus the keys whose records failed to load."""

    items: list[PendingCommitmentView]
    corrupted: list[str]
