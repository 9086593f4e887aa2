# src/pm_secret/domain/repository.py
"""SecretStore Protocol: interface contract for pending-secret persistence.

Implementations must:
  - make ``put`` durable before returning (the caller broadcasts the
    commitment only after ``put`` returns);
  - refuse to overwrite a key with different content (SecretCollisionError);
  - return None from ``get`` for unknown keys;
  - treat ``remove`` of an unknown key as a no-op;
  - isolate keys from each other (no store-wide lock).
"""
from typing import Protocol

from src.pm_secret.domain.models import PendingSecret


class SecretStoreProtocol(Protocol):
    async def put(self, commitment_hash: str, secret: PendingSecret) -> None: ...

    async def get(self, commitment_hash: str) -> PendingSecret | None: ...

    async def remove(self, commitment_hash: str) -> None: ...

    async def list_pending(self) -> list[str]: ...
