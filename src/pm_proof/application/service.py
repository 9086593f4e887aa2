"""ProofGenerator: integrity check, then Groth16 proving off the caller's path.

Order of work for one reveal:
  1. Recompute commitment and nullifier from the stored secret.
  2. Compare with the commitment the secret is filed under → SecretCorruptedError.
  3. Hand the witness to the backend (snarkjs) in a separate task.
  4. Check the backend's public signals equal [commitment, nullifier].
"""
import asyncio
import logging

from src.pm_commitment.domain.codec import commit, commitment_inputs
from src.pm_commitment.domain.models import Commitment, from_bytes32_hex
from src.pm_common.errors import AppError, ProvingUnavailableError, SecretCorruptedError
from src.pm_proof.domain.backend import ProverBackendProtocol
from src.pm_proof.domain.models import (
    OrderProof,
    ProofOutcome,
    ProofStatus,
    PublicInputs,
)
from src.pm_secret.domain.models import PendingSecret

logger = logging.getLogger(__name__)


def verify_secret(secret: PendingSecret, trader: str) -> Commitment:
    """Recompute the commitment from the secret; it must match its store key."""
    try:
        expected = from_bytes32_hex(secret.commitment_hash)
    except ValueError as exc:
        raise SecretCorruptedError(secret.commitment_hash, "malformed commitment key") from exc
    recomputed = commit(secret.salt, secret.params, trader)
    if recomputed.commitment_hash != expected:
        raise SecretCorruptedError(
            secret.commitment_hash,
            "recomputed commitment does not match the submitted commitment",
        )
    return recomputed


class ProvingTask:
    """A cancellable proof computation for one commitment."""

    def __init__(self, commitment_hash: str, task: "asyncio.Task[OrderProof]") -> None:
        self.commitment_hash = commitment_hash
        self._task = task

    def cancel(self) -> bool:
        return self._task.cancel()

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    async def outcome(self) -> ProofOutcome:
        """Wait for the task and classify its end state; never raises AppError."""
        try:
            proof = await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return ProofOutcome(status=ProofStatus.CANCELLED)
            raise
        except AppError as exc:
            return ProofOutcome(status=ProofStatus.FAILED, error=exc)
        return ProofOutcome(status=ProofStatus.PROVED, proof=proof)


class ProofGenerator:
    def __init__(self, backend: ProverBackendProtocol) -> None:
        self._backend = backend

    async def prove(self, secret: PendingSecret, trader: str) -> OrderProof:
        recomputed = verify_secret(secret, trader)
        public_inputs = PublicInputs(
            commitment_hash=recomputed.commitment_hash, nullifier=recomputed.nullifier
        )
        witness = {
            name: str(value)
            for name, value in commitment_inputs(secret.salt, secret.params, trader)
        }

        logger.info("Proving reveal: commitment=%s", secret.commitment_hash)
        output = await self._backend.prove(witness)

        if output.public_signals != public_inputs.as_list():
            raise ProvingUnavailableError(
                "circuit public signals do not match the recomputed commitment/nullifier"
            )
        return OrderProof(proof=output.proof, public_inputs=public_inputs)

    def start(self, secret: PendingSecret, trader: str) -> ProvingTask:
        """Schedule ``prove`` as its own task and return a handle to it."""
        task = asyncio.create_task(
            self.prove(secret, trader), name=f"prove:{secret.commitment_hash}"
        )
        return ProvingTask(secret.commitment_hash, task)
