# src/pm_ledger/domain/gateway.py
"""LedgerGateway Protocol: the external DarkPool ledger as seen by this client.

Writes return a transaction reference (0x tx hash) as soon as the transaction
is handed to the node; confirmation is a separate ``wait_for_receipt`` call.
Write failures raise SubmissionFailedError, read failures LedgerUnavailableError.
"""
from typing import Protocol

from src.pm_commitment.domain.models import OrderParameters
from src.pm_ledger.domain.models import (
    CommitmentDetails,
    InstrumentStatistics,
    LedgerOrder,
    TxReceipt,
)
from src.pm_proof.domain.models import OrderProof


class LedgerGatewayProtocol(Protocol):
    # --- writes ---
    async def commit_order(self, commitment_hash: str, escrow_amount: int) -> str: ...

    async def reveal_order(self, order_proof: OrderProof, params: OrderParameters) -> str: ...

    async def cancel_commitment(self, commitment_hash: str) -> str: ...

    async def wait_for_receipt(self, tx_ref: str, timeout: float) -> TxReceipt: ...

    # --- reads ---
    async def get_commitment_details(self, commitment_hash: str) -> CommitmentDetails: ...

    async def get_order(self, order_hash: str) -> LedgerOrder | None: ...

    async def get_user_orders(self, trader: str) -> list[str]: ...

    async def get_statistics(
        self, instrument_address: str, instrument_id: int
    ) -> InstrumentStatistics: ...

    async def get_active_orders_count(self) -> int: ...
