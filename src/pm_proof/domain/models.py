"""Proof domain models: pure dataclasses, no proving logic."""
from dataclasses import dataclass
from enum import Enum

from src.pm_common.errors import AppError

G1Point = tuple[int, int]
G2Point = tuple[tuple[int, int], tuple[int, int]]


@dataclass(frozen=True)
class Groth16Proof:
    """Groth16 proof in the Solidity verifier layout (b coordinates swapped)."""

    a: G1Point
    b: G2Point
    c: G1Point


@dataclass(frozen=True)
class PublicInputs:
    commitment_hash: int
    nullifier: int

    def as_list(self) -> list[int]:
        return [self.commitment_hash, self.nullifier]


@dataclass(frozen=True)
class OrderProof:
    """What a reveal submits: the proof plus the public inputs it proves."""

    proof: Groth16Proof
    public_inputs: PublicInputs


@dataclass(frozen=True)
class BackendOutput:
    proof: Groth16Proof
    public_signals: list[int]


class ProofStatus(str, Enum):
    PROVED = "PROVED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class ProofOutcome:
    status: ProofStatus
    proof: OrderProof | None = None
    error: AppError | None = None
