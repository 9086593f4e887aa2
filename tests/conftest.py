"""Shared test fixtures: a deterministic clock, an in-memory ledger and a
prover backend that computes real public signals without a circuit."""

import asyncio
from collections.abc import Callable

import pytest

from src.pm_commitment.domain.codec import COMMITMENT_DOMAIN, NULLIFIER_DOMAIN
from src.pm_commitment.domain.mimc import mimc_sponge
from src.pm_commitment.domain.models import OrderParameters, normalize_bytes32_hex
from src.pm_common.enums import LedgerOrderStatus
from src.pm_common.errors import SubmissionFailedError
from src.pm_ledger.domain.models import (
    CommitmentDetails,
    InstrumentStatistics,
    LedgerOrder,
    TxReceipt,
)
from src.pm_proof.domain.models import BackendOutput, Groth16Proof, OrderProof

TRADER = "0x" + "ab" * 20
INSTRUMENT = "0x" + "cd" * 20
T0 = 1_700_000_000
REVEAL_DELAY = 1800

_WITNESS_ORDER = ["salt", "quantity", "limitPrice", "side", "instrumentAddress", "instrumentId", "trader"]


class FakeClock:
    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeLedger:
    """Mines every transaction instantly and enforces the reveal delay."""

    def __init__(self, clock: FakeClock, reveal_delay: int = REVEAL_DELAY) -> None:
        self._clock = clock
        self._delay = reveal_delay
        self._tx_counter = 0
        self.commitments: dict[str, CommitmentDetails] = {}
        self.receipts: dict[str, TxReceipt] = {}
        self.orders: dict[str, LedgerOrder] = {}
        self.revealed_inputs: dict[str, list[int]] = {}
        self.fail_next: str | None = None  # "commit" | "reveal" | "cancel"
        self.revert_next = False
        self.read_delay = 0.0
        self.calls: list[str] = []

    def _next_tx(self, succeeded: bool) -> str:
        self._tx_counter += 1
        tx_ref = "0x" + f"{self._tx_counter:064x}"
        self.receipts[tx_ref] = TxReceipt(tx_ref=tx_ref, succeeded=succeeded, block_number=self._tx_counter)
        return tx_ref

    def _maybe_fail(self, action: str) -> bool:
        self.calls.append(action)
        if self.fail_next == action:
            self.fail_next = None
            raise SubmissionFailedError(action, "connection refused")
        if self.revert_next:
            self.revert_next = False
            return True
        return False

    async def commit_order(self, commitment_hash: str, escrow_amount: int) -> str:
        if self._maybe_fail("commit"):
            return self._next_tx(False)
        key = normalize_bytes32_hex(commitment_hash)
        if key in self.commitments:
            return self._next_tx(False)
        self.commitments[key] = CommitmentDetails(
            commitment_hash=key, exists=True, timestamp=self._clock(),
            trader=TRADER, escrow_amount=escrow_amount, revealed=False,
        )
        return self._next_tx(True)

    async def reveal_order(self, order_proof: OrderProof, params: OrderParameters) -> str:
        if not isinstance(order_proof.proof, Groth16Proof):
            raise TypeError("only Groth16 proofs can be submitted")
        if self._maybe_fail("reveal"):
            return self._next_tx(False)
        key = "0x" + f"{order_proof.public_inputs.commitment_hash:064x}"
        details = self.commitments.get(key)
        if (
            details is None
            or details.revealed
            or self._clock() < details.timestamp + self._delay
            or self._clock() >= params.expiry
        ):
            return self._next_tx(False)
        self.commitments[key] = CommitmentDetails(
            commitment_hash=key, exists=True, timestamp=details.timestamp,
            trader=details.trader, escrow_amount=details.escrow_amount, revealed=True,
        )
        self.revealed_inputs[key] = order_proof.public_inputs.as_list()
        order_hash = "0x" + f"{order_proof.public_inputs.nullifier:064x}"
        self.orders[order_hash] = LedgerOrder(
            order_hash=order_hash, trader=TRADER,
            instrument_address=params.instrument.address,
            instrument_id=params.instrument.instance_id,
            order_kind=params.order_kind, side=params.side,
            quantity=params.quantity, limit_price=params.limit_price,
            filled_quantity=0, minimum_fill=params.minimum_fill, expiry=params.expiry,
            status=LedgerOrderStatus.PENDING, is_public=False, created_at=self._clock(),
        )
        return self._next_tx(True)

    async def cancel_commitment(self, commitment_hash: str) -> str:
        if self._maybe_fail("cancel"):
            return self._next_tx(False)
        key = normalize_bytes32_hex(commitment_hash)
        details = self.commitments.get(key)
        if details is None or details.revealed:
            return self._next_tx(False)
        del self.commitments[key]
        return self._next_tx(True)

    async def wait_for_receipt(self, tx_ref: str, timeout: float) -> TxReceipt:
        receipt = self.receipts.get(tx_ref)
        if receipt is None:
            raise SubmissionFailedError("confirmation", f"no receipt for {tx_ref}")
        return receipt

    async def get_commitment_details(self, commitment_hash: str) -> CommitmentDetails:
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        key = normalize_bytes32_hex(commitment_hash)
        return self.commitments.get(key) or CommitmentDetails(
            commitment_hash=key, exists=False, timestamp=0,
            trader="0x" + "00" * 20, escrow_amount=0, revealed=False,
        )

    async def get_order(self, order_hash: str) -> LedgerOrder | None:
        return self.orders.get(normalize_bytes32_hex(order_hash))

    async def get_user_orders(self, trader: str) -> list[str]:
        return [h for h, o in self.orders.items() if o.trader.lower() == trader.lower()]

    async def get_statistics(self, instrument_address: str, instrument_id: int) -> InstrumentStatistics:
        return InstrumentStatistics(
            instrument_address=instrument_address, instrument_id=instrument_id,
            total_volume=0, total_trades=0, last_price=0,
        )

    async def get_active_orders_count(self) -> int:
        return sum(1 for o in self.orders.values() if not o.status.is_terminal)


class FakeProverBackend:
    """Computes the circuit's public signals from the witness with the real hash."""

    def __init__(self) -> None:
        self.witnesses: list[dict[str, str]] = []
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()
        self.on_prove: Callable[[], None] | None = None
        self.signal_override: list[int] | None = None

    async def prove(self, witness: dict[str, str]) -> BackendOutput:
        self.witnesses.append(witness)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.on_prove is not None:
            self.on_prove()
        values = [int(witness[name]) for name in _WITNESS_ORDER]
        commitment = mimc_sponge(values, key=COMMITMENT_DOMAIN)[0]
        nullifier = mimc_sponge([values[0], values[-1]], key=NULLIFIER_DOMAIN)[0]
        return BackendOutput(
            proof=Groth16Proof(a=(1, 2), b=((3, 4), (5, 6)), c=(7, 8)),
            public_signals=self.signal_override or [commitment, nullifier],
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger(clock: FakeClock) -> FakeLedger:
    return FakeLedger(clock)


@pytest.fixture
def backend() -> FakeProverBackend:
    return FakeProverBackend()

