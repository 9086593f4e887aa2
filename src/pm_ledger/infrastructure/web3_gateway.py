# src/pm_ledger/infrastructure/web3_gateway.py
"""Web3LedgerGateway: LedgerGatewayProtocol over web3.py's AsyncWeb3.

Transactions are sent ``from`` the trader address and signed by the node or
wallet behind LEDGER_RPC_URL; this client never holds a private key.
"""
import asyncio
import logging
from typing import Any

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3Exception

from src.pm_commitment.domain.models import OrderParameters, from_bytes32_hex, to_bytes32_hex
from src.pm_common.enums import LedgerOrderStatus, OrderKind, OrderSide
from src.pm_common.errors import LedgerUnavailableError, SubmissionFailedError
from src.pm_ledger.domain.models import (
    CommitmentDetails,
    InstrumentStatistics,
    LedgerOrder,
    TxReceipt,
)
from src.pm_ledger.infrastructure.abi import DARK_POOL_ABI
from src.pm_proof.domain.models import Groth16Proof, OrderProof

logger = logging.getLogger(__name__)

_LEDGER_ERRORS = (Web3Exception, ValueError, OSError, aiohttp.ClientError, asyncio.TimeoutError)
_ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _bytes32(value: str) -> bytes:
    return from_bytes32_hex(value).to_bytes(32, "big")


def build_reveal_args(order_proof: OrderProof, params: OrderParameters) -> list[Any]:
    """Positional arguments for DarkPool.revealOrder."""
    proof = order_proof.proof
    if not isinstance(proof, Groth16Proof):
        raise TypeError(f"only Groth16 proofs can be submitted, got {type(proof).__name__}")
    return [
        list(proof.a),
        [list(proof.b[0]), list(proof.b[1])],
        list(proof.c),
        order_proof.public_inputs.as_list(),
        Web3.to_checksum_address(params.instrument.address),
        params.instrument.instance_id,
        int(params.order_kind),
        int(params.side),
        params.quantity,
        params.limit_price,
        params.minimum_fill,
        params.expiry,
    ]


class Web3LedgerGateway:
    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        trader_address: str,
        request_timeout: float = 30.0,
    ) -> None:
        self._w3 = AsyncWeb3(
            AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            )
        )
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=DARK_POOL_ABI,
        )
        self._trader = Web3.to_checksum_address(trader_address)

    @property
    def trader(self) -> str:
        return self._trader

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def commit_order(self, commitment_hash: str, escrow_amount: int) -> str:
        fn = self._contract.functions.commitOrder(_bytes32(commitment_hash))
        return await self._transact("commit", fn, {"value": escrow_amount})

    async def reveal_order(self, order_proof: OrderProof, params: OrderParameters) -> str:
        fn = self._contract.functions.revealOrder(*build_reveal_args(order_proof, params))
        return await self._transact("reveal", fn, {})

    async def cancel_commitment(self, commitment_hash: str) -> str:
        fn = self._contract.functions.cancelCommitment(_bytes32(commitment_hash))
        return await self._transact("cancel", fn, {})

    async def wait_for_receipt(self, tx_ref: str, timeout: float) -> TxReceipt:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(tx_ref, timeout=timeout)
        except TimeExhausted as exc:
            raise SubmissionFailedError("confirmation", f"no receipt for {tx_ref} within {timeout:.0f}s") from exc
        except _LEDGER_ERRORS as exc:
            raise SubmissionFailedError("confirmation", str(exc)) from exc
        return TxReceipt(
            tx_ref=tx_ref,
            succeeded=receipt["status"] == 1,
            block_number=receipt.get("blockNumber"),
        )

    async def _transact(self, action: str, fn: Any, extra: dict[str, Any]) -> str:
        tx: dict[str, Any] = {"from": self._trader, **extra}
        try:
            tx_hash = await fn.transact(tx)
        except _LEDGER_ERRORS as exc:
            raise SubmissionFailedError(action, str(exc)) from exc
        tx_ref = Web3.to_hex(tx_hash)
        logger.info("Ledger %s sent: tx=%s", action, tx_ref)
        return tx_ref

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_commitment_details(self, commitment_hash: str) -> CommitmentDetails:
        exists, timestamp, trader, escrow, revealed = await self._call(
            self._contract.functions.getCommitmentDetails(_bytes32(commitment_hash))
        )
        return CommitmentDetails(
            commitment_hash=to_bytes32_hex(from_bytes32_hex(commitment_hash)),
            exists=bool(exists),
            timestamp=int(timestamp),
            trader=trader,
            escrow_amount=int(escrow),
            revealed=bool(revealed),
        )

    async def get_order(self, order_hash: str) -> LedgerOrder | None:
        row = await self._call(self._contract.functions.getOrder(_bytes32(order_hash)))
        (trader, token, token_id, kind, side, amount, price,
         filled, min_fill, expiry, status, is_public, created_at) = row
        if trader == _ZERO_ADDRESS:
            return None
        return LedgerOrder(
            order_hash=to_bytes32_hex(from_bytes32_hex(order_hash)),
            trader=trader,
            instrument_address=token,
            instrument_id=int(token_id),
            order_kind=OrderKind(kind),
            side=OrderSide(side),
            quantity=int(amount),
            limit_price=int(price),
            filled_quantity=int(filled),
            minimum_fill=int(min_fill),
            expiry=int(expiry),
            status=LedgerOrderStatus(status),
            is_public=bool(is_public),
            created_at=int(created_at),
        )

    async def get_user_orders(self, trader: str) -> list[str]:
        hashes = await self._call(
            self._contract.functions.getUserOrders(Web3.to_checksum_address(trader))
        )
        return [Web3.to_hex(h) for h in hashes]

    async def get_statistics(self, instrument_address: str, instrument_id: int) -> InstrumentStatistics:
        volume, trades, last_price = await self._call(
            self._contract.functions.getStatistics(
                Web3.to_checksum_address(instrument_address), instrument_id
            )
        )
        return InstrumentStatistics(
            instrument_address=Web3.to_checksum_address(instrument_address),
            instrument_id=instrument_id,
            total_volume=int(volume),
            total_trades=int(trades),
            last_price=int(last_price),
        )

    async def get_active_orders_count(self) -> int:
        return int(await self._call(self._contract.functions.getActiveOrdersCount()))

    async def _call(self, fn: Any) -> Any:
        try:
            return await fn.call()
        except _LEDGER_ERRORS as exc:
            raise LedgerUnavailableError(str(exc)) from exc
