# src/pm_darkpool/application/service.py
"""DarkPoolApplicationService: thin composition layer over the orchestrator.

Turns API requests into orchestrator calls and domain results into response
models. Process-wide singletons are built from settings on first use.
"""
import logging

from config.settings import settings
from src.pm_commitment.domain.models import normalize_bytes32_hex
from src.pm_common.enums import LocalPhase
from src.pm_darkpool.application.schemas import (
    AbandonResponse,
    ActiveOrdersCountResponse,
    CommitmentDetailsResponse,
    CommitReceiptResponse,
    ConfirmRequest,
    LedgerOrderResponse,
    PendingCommitmentResponse,
    PendingListResponse,
    PhaseResponse,
    RevealStatusResponse,
    StatisticsResponse,
    SubmitCommitRequest,
    TraderOrdersResponse,
    TxSubmittedResponse,
)
from src.pm_darkpool.engine.orchestrator import DarkPoolOrchestrator
from src.pm_ledger.infrastructure.web3_gateway import Web3LedgerGateway
from src.pm_proof.application.service import ProofGenerator
from src.pm_proof.infrastructure.snarkjs_backend import SnarkjsProverBackend
from src.pm_secret.application.service import get_secret_store

logger = logging.getLogger(__name__)


class DarkPoolApplicationService:
    def __init__(self, orchestrator: DarkPoolOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def submit_commit(self, req: SubmitCommitRequest) -> CommitReceiptResponse:
        receipt = await self._orchestrator.submit_commit(req.to_params(), req.escrow_amount)
        return CommitReceiptResponse.from_domain(receipt)

    async def retry_commit(self, commitment_hash: str) -> TxSubmittedResponse:
        tx_ref = await self._orchestrator.retry_commit(commitment_hash)
        return TxSubmittedResponse(
            commitment_hash=normalize_bytes32_hex(commitment_hash),
            tx_ref=tx_ref,
            phase=LocalPhase.COMMITTING.value,
        )

    async def confirm(self, commitment_hash: str, req: ConfirmRequest) -> PhaseResponse:
        phase = await self._orchestrator.confirm(commitment_hash, req.tx_ref, req.action)
        return PhaseResponse(commitment_hash=normalize_bytes32_hex(commitment_hash), phase=phase.value)

    async def list_pending(self) -> PendingListResponse:
        listing = await self._orchestrator.list_pending()
        items = [PendingCommitmentResponse.from_domain(v) for v in listing.items]
        return PendingListResponse(items=items, total=len(items), corrupted=listing.corrupted)

    async def get_pending(self, commitment_hash: str) -> PendingCommitmentResponse:
        return PendingCommitmentResponse.from_domain(
            await self._orchestrator.get_pending(commitment_hash)
        )

    async def reveal_status(self, commitment_hash: str) -> RevealStatusResponse:
        window = await self._orchestrator.reveal_status(commitment_hash)
        return RevealStatusResponse.from_domain(normalize_bytes32_hex(commitment_hash), window)

    async def submit_reveal(self, commitment_hash: str) -> TxSubmittedResponse:
        tx_ref = await self._orchestrator.submit_reveal(commitment_hash)
        return TxSubmittedResponse(
            commitment_hash=normalize_bytes32_hex(commitment_hash),
            tx_ref=tx_ref,
            phase=LocalPhase.REVEALING.value,
        )

    async def abandon_reveal(self, commitment_hash: str) -> AbandonResponse:
        abandoned = await self._orchestrator.abandon_reveal(commitment_hash)
        return AbandonResponse(
            commitment_hash=normalize_bytes32_hex(commitment_hash), abandoned=abandoned
        )

    async def cancel(self, commitment_hash: str) -> TxSubmittedResponse:
        tx_ref = await self._orchestrator.cancel(commitment_hash)
        return TxSubmittedResponse(
            commitment_hash=normalize_bytes32_hex(commitment_hash),
            tx_ref=tx_ref,
            phase=LocalPhase.CANCELLING.value,
        )

    # --- ledger reads ---

    async def commitment_details(self, commitment_hash: str) -> CommitmentDetailsResponse:
        return CommitmentDetailsResponse.from_domain(
            await self._orchestrator.commitment_details(commitment_hash)
        )

    async def get_order(self, order_hash: str) -> LedgerOrderResponse | None:
        order = await self._orchestrator.get_order(order_hash)
        return LedgerOrderResponse.from_domain(order) if order is not None else None

    async def get_trader_orders(self, trader: str) -> TraderOrdersResponse:
        hashes = await self._orchestrator.get_user_orders(trader)
        return TraderOrdersResponse(trader=trader, order_hashes=hashes)

    async def get_statistics(self, instrument_address: str, instrument_id: int) -> StatisticsResponse:
        return StatisticsResponse.from_domain(
            await self._orchestrator.get_statistics(instrument_address, instrument_id)
        )

    async def active_orders_count(self) -> ActiveOrdersCountResponse:
        return ActiveOrdersCountResponse(
            active_orders=await self._orchestrator.active_orders_count()
        )


_orchestrator: DarkPoolOrchestrator | None = None
_service: DarkPoolApplicationService | None = None


def get_orchestrator() -> DarkPoolOrchestrator:
    global _orchestrator  # noqa: PLW0603
    if _orchestrator is None:
        gateway = Web3LedgerGateway(
            settings.LEDGER_RPC_URL,
            settings.DARK_POOL_ADDRESS,
            settings.TRADER_ADDRESS,
            request_timeout=settings.LEDGER_TIMEOUT_SECONDS,
        )
        backend = SnarkjsProverBackend(
            settings.SNARKJS_BIN,
            settings.CIRCUIT_WASM_PATH,
            settings.CIRCUIT_ZKEY_PATH,
            timeout=settings.PROVER_TIMEOUT_SECONDS,
        )
        _orchestrator = DarkPoolOrchestrator(
            get_secret_store(), gateway, ProofGenerator(backend), gateway.trader
        )
        logger.info(
            "Dark pool orchestrator ready: trader=%s store=%s",
            gateway.trader, settings.SECRET_STORE_BACKEND,
        )
    return _orchestrator


def get_darkpool_service() -> DarkPoolApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = DarkPoolApplicationService(get_orchestrator())
    return _service
