# src/pm_proof/simulation/prover.py
"""Simulation-only prover for demos and UI development.

Produces a SimulatedProof with correct public inputs and fixed, non-cryptographic
group elements. SimulatedProof is deliberately NOT a Groth16Proof and
SimulatedProver is not a ProverBackend: it cannot be plugged into
ProofGenerator, and the ledger gateway refuses anything but a Groth16Proof,
so nothing produced here can reach a reveal submission.
"""
import logging
from dataclasses import dataclass

from src.pm_proof.application.service import verify_secret
from src.pm_proof.domain.models import PublicInputs
from src.pm_secret.domain.models import PendingSecret

logger = logging.getLogger(__name__)

_PLACEHOLDER_A = (1, 2)
_PLACEHOLDER_B = ((1, 2), (3, 4))
_PLACEHOLDER_C = (1, 2)


@dataclass(frozen=True)
class SimulatedProof:
    public_inputs: PublicInputs
    a: tuple[int, int] = _PLACEHOLDER_A
    b: tuple[tuple[int, int], tuple[int, int]] = _PLACEHOLDER_B
    c: tuple[int, int] = _PLACEHOLDER_C
    simulated: bool = True


class SimulatedProver:
    def simulate(self, secret: PendingSecret, trader: str) -> SimulatedProof:
        # Same integrity check as the real path: a corrupted secret fails here too.
        recomputed = verify_secret(secret, trader)
        logger.warning(
            "SIMULATED proof for commitment=%s: not valid on any ledger",
            secret.commitment_hash,
        )
        return SimulatedProof(
            public_inputs=PublicInputs(
                commitment_hash=recomputed.commitment_hash,
                nullifier=recomputed.nullifier,
            )
        )
