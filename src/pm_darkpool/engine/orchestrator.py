"""DarkPoolOrchestrator: commit → (wait) → reveal, or commit → cancel.

Ordering rules for one commitment:
  - the secret is durable in the store BEFORE the commit is broadcast;
  - the secret is deleted only AFTER a reveal or cancel is confirmed on the
    ledger (successful receipt and ledger state agree).
So while the on-chain commitment may still be live, the secret exists.

Operations on one commitment are serialized by a per-commitment lock;
different commitments never wait on each other.
"""
import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import TypeVar

from config.settings import settings
from src.pm_commitment.domain.codec import commit, generate_salt
from src.pm_commitment.domain.models import OrderParameters, normalize_bytes32_hex
from src.pm_common.datetime_utils import unix_now
from src.pm_common.enums import ConfirmAction, LocalPhase
from src.pm_common.errors import (
    CommitmentNotFoundError,
    InvalidPhaseError,
    LedgerUnavailableError,
    RevealAbandonedError,
    RevealTooEarlyError,
    SecretCorruptedError,
    SubmissionFailedError,
)
from src.pm_common.keyed_lock import KeyedLocks
from src.pm_darkpool.domain.models import (
    CommitReceipt,
    PendingCommitmentView,
    PendingListing,
)
from src.pm_ledger.domain.gateway import LedgerGatewayProtocol
from src.pm_ledger.domain.models import (
    CommitmentDetails,
    InstrumentStatistics,
    LedgerOrder,
)
from src.pm_proof.application.service import ProofGenerator, ProvingTask
from src.pm_proof.domain.models import OrderProof, ProofStatus
from src.pm_risk.rules.order_expiry import check_not_expired, is_expired
from src.pm_risk.rules.order_params import check_escrow_amount, check_order_params
from src.pm_risk.rules.reveal_delay import RevealWindow, can_reveal
from src.pm_secret.domain.models import PendingSecret
from src.pm_secret.domain.repository import SecretStoreProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Finished commitments remembered for phase_of once their secret is gone.
_FINISHED_HISTORY = 1024


class DarkPoolOrchestrator:
    def __init__(
        self,
        store: SecretStoreProtocol,
        gateway: LedgerGatewayProtocol,
        prover: ProofGenerator,
        trader: str,
        *,
        reveal_delay: int | None = None,
        ledger_timeout: float | None = None,
        receipt_timeout: float | None = None,
        clock: Callable[[], int] = unix_now,
        salt_source: Callable[[], int] = generate_salt,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._prover = prover
        self._trader = trader
        self._reveal_delay = (
            settings.REVEAL_DELAY_SECONDS if reveal_delay is None else reveal_delay
        )
        self._ledger_timeout = (
            settings.LEDGER_TIMEOUT_SECONDS if ledger_timeout is None else ledger_timeout
        )
        self._receipt_timeout = (
            settings.RECEIPT_TIMEOUT_SECONDS if receipt_timeout is None else receipt_timeout
        )
        self._clock = clock
        self._salt_source = salt_source
        self._phases: dict[str, LocalPhase] = {}
        self._ledger_timestamps: dict[str, int] = {}
        self._finished: OrderedDict[str, LocalPhase] = OrderedDict()
        self._proving: dict[str, ProvingTask] = {}
        self._locks = KeyedLocks()

    @property
    def trader(self) -> str:
        return self._trader

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def submit_commit(self, params: OrderParameters, escrow_amount: int = 0) -> CommitReceipt:
        check_order_params(params)
        check_escrow_amount(escrow_amount)
        now = self._clock()
        check_not_expired(params.expiry, now)

        commitment = commit(self._salt_source(), params, self._trader)
        key = commitment.commitment_hex
        secret = PendingSecret(
            commitment_hash=key,
            params=params,
            salt=commitment.salt,
            created_at=now,
            escrow_amount=escrow_amount,
        )

        async with self._locks.hold(key):
            await self._store.put(key, secret)
            self._phases[key] = LocalPhase.COMMITTING
            logger.info("Commitment persisted: commitment=%s escrow=%d", key, escrow_amount)
            tx_ref = await self._submit(
                ConfirmAction.COMMIT, key, self._gateway.commit_order(key, escrow_amount)
            )
        return CommitReceipt(
            commitment_hash=key,
            nullifier=commitment.nullifier_hex,
            tx_ref=tx_ref,
            phase=LocalPhase.COMMITTING,
        )

    async def retry_commit(self, commitment_hash: str) -> str:
        """Re-broadcast the commit of a stored secret whose broadcast failed."""
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            secret = await self._require_secret(key)
            check_not_expired(secret.params.expiry, self._clock())
            details = await self._read(self._gateway.get_commitment_details(key))
            if details.exists:
                self._phases[key] = LocalPhase.COMMITTED
                raise InvalidPhaseError(key, LocalPhase.COMMITTED.value, "re-broadcast its commit")
            self._phases[key] = LocalPhase.COMMITTING
            return await self._submit(
                ConfirmAction.COMMIT, key,
                self._gateway.commit_order(key, secret.escrow_amount),
            )

    async def confirm_commit(self, commitment_hash: str, tx_ref: str) -> LocalPhase:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            await self._require_secret(key)
            receipt = await self._gateway.wait_for_receipt(tx_ref, self._receipt_timeout)
            if not receipt.succeeded:
                raise SubmissionFailedError(
                    ConfirmAction.COMMIT.value, f"transaction {tx_ref} reverted", key
                )
            if self._phases.get(key, LocalPhase.COMMITTING) == LocalPhase.COMMITTING:
                self._phases[key] = LocalPhase.COMMITTED
            logger.info("Commit confirmed: commitment=%s block=%s", key, receipt.block_number)
            details = await self._read(self._gateway.get_commitment_details(key))
            if details.exists:
                self._ledger_timestamps[key] = details.timestamp
            return self._phases[key]

    # ------------------------------------------------------------------
    # Reveal
    # ------------------------------------------------------------------

    async def reveal_status(self, commitment_hash: str) -> RevealWindow:
        key = normalize_bytes32_hex(commitment_hash)
        secret = await self._require_secret(key)
        details = await self._read(self._gateway.get_commitment_details(key))
        return can_reveal(self._commit_timestamp(secret, details), self._clock(), self._reveal_delay)

    async def submit_reveal(self, commitment_hash: str) -> str:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            secret = await self._require_secret(key)
            phase = self._effective_phase(key, secret)
            if phase not in (LocalPhase.COMMITTING, LocalPhase.COMMITTED, LocalPhase.EXPIRED):
                raise InvalidPhaseError(key, phase.value, "reveal")
            self._check_live(key, secret)

            details = await self._read(self._gateway.get_commitment_details(key))
            if details.revealed:
                raise InvalidPhaseError(key, LocalPhase.REVEALED.value, "reveal")
            if not details.exists:
                raise InvalidPhaseError(
                    key, LocalPhase.COMMITTING.value, "reveal before its commit is on the ledger"
                )
            window = can_reveal(
                self._commit_timestamp(secret, details), self._clock(), self._reveal_delay
            )
            if not window.allowed:
                raise RevealTooEarlyError(key, window.remaining_seconds)

            self._phases[key] = LocalPhase.REVEALING
            order_proof = await self._prove(key, secret)

            # Proving can take a while; a proof for an expired order is discarded.
            self._check_live(key, secret)
            try:
                tx_ref = await self._submit(
                    ConfirmAction.REVEAL, key,
                    self._gateway.reveal_order(order_proof, secret.params),
                )
            except SubmissionFailedError:
                self._phases[key] = LocalPhase.COMMITTED
                raise
            return tx_ref

    async def abandon_reveal(self, commitment_hash: str) -> bool:
        """Cancel an in-flight proof; True if one was running."""
        key = normalize_bytes32_hex(commitment_hash)
        task = self._proving.get(key)
        if task is None or task.done():
            return False
        logger.info("Abandoning reveal: commitment=%s", key)
        return task.cancel()

    async def confirm_reveal(self, commitment_hash: str, tx_ref: str) -> LocalPhase:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            secret = await self._require_secret(key)
            details = await self._confirmed_details(key, secret, tx_ref)
            if details is None or not details.revealed:
                self._phases[key] = LocalPhase.COMMITTED
                raise SubmissionFailedError(
                    ConfirmAction.REVEAL.value,
                    f"transaction {tx_ref} did not reveal the commitment",
                    key,
                )
            await self._store.remove(key)
            self._finish(key, LocalPhase.REVEALED)
            logger.info("Reveal confirmed, secret removed: commitment=%s", key)
            return LocalPhase.REVEALED

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    async def cancel(self, commitment_hash: str) -> str:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            secret = await self._require_secret(key)
            phase = self._effective_phase(key, secret)
            if phase not in (LocalPhase.COMMITTING, LocalPhase.COMMITTED, LocalPhase.EXPIRED):
                raise InvalidPhaseError(key, phase.value, "cancel")
            details = await self._read(self._gateway.get_commitment_details(key))
            if details.revealed:
                raise InvalidPhaseError(key, LocalPhase.REVEALED.value, "cancel")
            if not details.exists:
                raise InvalidPhaseError(
                    key, LocalPhase.COMMITTING.value, "cancel before its commit is on the ledger"
                )

            self._phases[key] = LocalPhase.CANCELLING
            try:
                return await self._submit(
                    ConfirmAction.CANCEL, key, self._gateway.cancel_commitment(key)
                )
            except SubmissionFailedError:
                self._phases[key] = phase
                raise

    async def confirm_cancel(self, commitment_hash: str, tx_ref: str) -> LocalPhase:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            secret = await self._require_secret(key)
            details = await self._confirmed_details(key, secret, tx_ref)
            if details is None or details.exists:
                self._phases[key] = self._derived_phase(secret)
                raise SubmissionFailedError(
                    ConfirmAction.CANCEL.value,
                    f"transaction {tx_ref} did not cancel the commitment",
                    key,
                )
            await self._store.remove(key)
            self._finish(key, LocalPhase.CANCELLED)
            logger.info("Cancel confirmed, secret removed: commitment=%s", key)
            return LocalPhase.CANCELLED

    async def confirm(self, commitment_hash: str, tx_ref: str, action: ConfirmAction) -> LocalPhase:
        if action is ConfirmAction.COMMIT:
            return await self.confirm_commit(commitment_hash, tx_ref)
        if action is ConfirmAction.REVEAL:
            return await self.confirm_reveal(commitment_hash, tx_ref)
        return await self.confirm_cancel(commitment_hash, tx_ref)

    # ------------------------------------------------------------------
    # Local queries
    # ------------------------------------------------------------------

    async def phase_of(self, commitment_hash: str) -> LocalPhase:
        key = normalize_bytes32_hex(commitment_hash)
        secret = await self._store.get(key)
        if secret is None:
            return self._phases.get(key) or self._finished.get(key, LocalPhase.UNCOMMITTED)
        return self._effective_phase(key, secret)

    async def get_pending(self, commitment_hash: str) -> PendingCommitmentView:
        key = normalize_bytes32_hex(commitment_hash)
        return self._view(await self._require_secret(key))

    async def list_pending(self) -> PendingListing:
        """Every stored commitment; an unreadable record is reported, not fatal."""
        views = []
        corrupted = []
        for key in await self._store.list_pending():
            try:
                secret = await self._store.get(key)
            except SecretCorruptedError as exc:
                logger.critical(
                    "Unreadable secret record, workflow halted: commitment=%s error=%s",
                    key, exc.message,
                )
                corrupted.append(key)
                continue
            if secret is not None:
                views.append(self._view(secret))
        return PendingListing(items=views, corrupted=corrupted)

    # ------------------------------------------------------------------
    # Ledger queries (read-only pass-through)
    # ------------------------------------------------------------------

    async def commitment_details(self, commitment_hash: str) -> CommitmentDetails:
        key = normalize_bytes32_hex(commitment_hash)
        return await self._read(self._gateway.get_commitment_details(key))

    async def get_order(self, order_hash: str) -> LedgerOrder | None:
        return await self._read(self._gateway.get_order(normalize_bytes32_hex(order_hash)))

    async def get_user_orders(self, trader: str | None = None) -> list[str]:
        return await self._read(self._gateway.get_user_orders(trader or self._trader))

    async def get_statistics(self, instrument_address: str, instrument_id: int) -> InstrumentStatistics:
        return await self._read(self._gateway.get_statistics(instrument_address, instrument_id))

    async def active_orders_count(self) -> int:
        return await self._read(self._gateway.get_active_orders_count())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_secret(self, key: str) -> PendingSecret:
        secret = await self._store.get(key)
        if secret is None:
            raise CommitmentNotFoundError(key)
        return secret

    def _derived_phase(self, secret: PendingSecret) -> LocalPhase:
        """Phase of a stored secret with no in-memory tracking (e.g. after restart)."""
        if is_expired(secret.params.expiry, self._clock()):
            return LocalPhase.EXPIRED
        return LocalPhase.COMMITTED

    def _effective_phase(self, key: str, secret: PendingSecret) -> LocalPhase:
        phase = self._phases.get(key)
        if phase is None or phase == LocalPhase.COMMITTED:
            return self._derived_phase(secret)
        return phase

    def _check_live(self, key: str, secret: PendingSecret) -> None:
        now = self._clock()
        if is_expired(secret.params.expiry, now):
            self._phases[key] = LocalPhase.EXPIRED
            logger.warning("Order expired, reveal dropped: commitment=%s", key)
        check_not_expired(secret.params.expiry, now)

    def _commit_timestamp(self, secret: PendingSecret, details: CommitmentDetails) -> int:
        if details.exists:
            self._ledger_timestamps[secret.commitment_hash] = details.timestamp
            return max(secret.created_at, details.timestamp)
        return secret.created_at

    def _view(self, secret: PendingSecret) -> PendingCommitmentView:
        # Uses the last ledger timestamp seen; before any ledger read it is created_at.
        key = secret.commitment_hash
        committed_at = max(secret.created_at, self._ledger_timestamps.get(key, 0))
        return PendingCommitmentView(
            commitment_hash=key,
            phase=self._effective_phase(key, secret),
            params=secret.params,
            created_at=secret.created_at,
            escrow_amount=secret.escrow_amount,
            reveal_at=committed_at + self._reveal_delay,
        )

    async def _confirmed_details(
        self, key: str, secret: PendingSecret, tx_ref: str
    ) -> CommitmentDetails | None:
        """Ledger state after ``tx_ref``, or None when the transaction reverted.

        If the receipt or the read fails, the order goes back to the phase its
        stored secret implies, so it can still be revealed or cancelled.
        """
        try:
            receipt = await self._gateway.wait_for_receipt(tx_ref, self._receipt_timeout)
            if not receipt.succeeded:
                return None
            return await self._read(self._gateway.get_commitment_details(key))
        except (SubmissionFailedError, LedgerUnavailableError):
            self._phases[key] = self._derived_phase(secret)
            logger.warning("Confirmation unresolved, secret kept: commitment=%s tx=%s", key, tx_ref)
            raise

    def _finish(self, key: str, phase: LocalPhase) -> None:
        self._phases.pop(key, None)
        self._ledger_timestamps.pop(key, None)
        self._finished[key] = phase
        self._finished.move_to_end(key)
        while len(self._finished) > _FINISHED_HISTORY:
            self._finished.popitem(last=False)

    async def _prove(self, key: str, secret: PendingSecret) -> OrderProof:
        task = self._prover.start(secret, self._trader)
        self._proving[key] = task
        try:
            outcome = await task.outcome()
        except asyncio.CancelledError:
            task.cancel()
            self._phases[key] = LocalPhase.COMMITTED
            raise
        finally:
            self._proving.pop(key, None)

        if outcome.status is ProofStatus.CANCELLED:
            self._phases[key] = LocalPhase.COMMITTED
            raise RevealAbandonedError(key)
        if outcome.status is ProofStatus.FAILED:
            assert outcome.error is not None
            self._phases[key] = LocalPhase.COMMITTED
            if outcome.error.integrity:
                logger.critical(
                    "Integrity failure, reveal halted: commitment=%s error=%s",
                    key, outcome.error.message,
                )
            raise outcome.error
        assert outcome.proof is not None
        return outcome.proof

    async def _submit(self, action: ConfirmAction, key: str, call: Awaitable[str]) -> str:
        try:
            return await asyncio.wait_for(call, timeout=self._ledger_timeout)
        except asyncio.TimeoutError as exc:
            raise SubmissionFailedError(
                action.value, f"no ledger response within {self._ledger_timeout:.0f}s", key
            ) from exc
        except SubmissionFailedError as exc:
            logger.warning("Ledger %s failed, secret kept: commitment=%s", action.value, key)
            raise SubmissionFailedError(action.value, exc.detail, key) from exc

    async def _read(self, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._ledger_timeout)
        except asyncio.TimeoutError as exc:
            raise LedgerUnavailableError(
                f"no ledger response within {self._ledger_timeout:.0f}s"
            ) from exc
