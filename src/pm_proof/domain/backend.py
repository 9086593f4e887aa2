# src/pm_proof/domain/backend.py
"""ProverBackend Protocol: the proving system behind ProofGenerator.

A backend either returns a real proof or raises ProvingUnavailableError.
It must never return a stand-in proof.
"""
from typing import Protocol

from src.pm_proof.domain.models import BackendOutput


class ProverBackendProtocol(Protocol):
    async def prove(self, witness: dict[str, str]) -> BackendOutput: ...
