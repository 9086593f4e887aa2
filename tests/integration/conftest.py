"""Integration-test fixtures.

The app runs in-process over ASGITransport with the dark-pool service
replaced by one wired to an in-memory store, the fake ledger and the fake
prover backend, so the full HTTP flow runs without a node or snarkjs.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_darkpool.application.service import DarkPoolApplicationService, get_darkpool_service
from src.pm_darkpool.engine.orchestrator import DarkPoolOrchestrator
from src.pm_proof.application.service import ProofGenerator
from src.pm_secret.infrastructure.memory_store import InMemorySecretStore

TRADER = "0x" + "ab" * 20


@pytest.fixture
def orchestrator(ledger, backend, clock) -> DarkPoolOrchestrator:
    return DarkPoolOrchestrator(
        InMemorySecretStore(),
        ledger,
        ProofGenerator(backend),
        TRADER,
        reveal_delay=1800,
        ledger_timeout=1.0,
        receipt_timeout=1.0,
        clock=clock,
    )


@pytest.fixture
async def client(orchestrator: DarkPoolOrchestrator) -> AsyncClient:
    service = DarkPoolApplicationService(orchestrator)
    app.dependency_overrides[get_darkpool_service] = lambda: service
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_darkpool_service, None)
