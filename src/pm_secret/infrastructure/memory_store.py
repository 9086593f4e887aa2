"""In-memory SecretStore: tests and throwaway sessions only (not durable)."""
from src.pm_commitment.domain.models import normalize_bytes32_hex
from src.pm_common.errors import SecretCollisionError
from src.pm_common.keyed_lock import KeyedLocks
from src.pm_secret.domain.models import PendingSecret, store_key


class InMemorySecretStore:
    def __init__(self) -> None:
        self._secrets: dict[str, PendingSecret] = {}
        self._locks = KeyedLocks()

    async def put(self, commitment_hash: str, secret: PendingSecret) -> None:
        key = store_key(commitment_hash, secret)
        async with self._locks.hold(key):
            existing = self._secrets.get(key)
            if existing is not None:
                if existing != secret:
                    raise SecretCollisionError(key)
                return
            self._secrets[key] = secret

    async def get(self, commitment_hash: str) -> PendingSecret | None:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            return self._secrets.get(key)

    async def remove(self, commitment_hash: str) -> None:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            self._secrets.pop(key, None)

    async def list_pending(self) -> list[str]:
        return sorted(self._secrets)

