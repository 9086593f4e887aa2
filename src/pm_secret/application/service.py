# src/pm_secret/application/service.py
"""Secret store backend selection (SECRET_STORE_BACKEND)."""
from config.settings import settings
from src.pm_common.enums import SecretStoreBackend
from src.pm_secret.domain.repository import SecretStoreProtocol
from src.pm_secret.infrastructure.file_store import FileSecretStore
from src.pm_secret.infrastructure.memory_store import InMemorySecretStore

_store: SecretStoreProtocol | None = None


def build_secret_store(backend: str, directory: str | None = None) -> SecretStoreProtocol:
    kind = SecretStoreBackend(backend.lower())
    if kind is SecretStoreBackend.FILE:
        return FileSecretStore(directory or settings.SECRET_STORE_DIR)
    if kind is SecretStoreBackend.SQL:
        # Imported lazily: creating the engine is only wanted for this backend.
        from src.pm_common.database import async_session_factory
        from src.pm_secret.infrastructure.sql_store import SqlSecretStore

        return SqlSecretStore(async_session_factory)
    return InMemorySecretStore()


def get_secret_store() -> SecretStoreProtocol:
    global _store  # noqa: PLW0603
    if _store is None:
        _store = build_secret_store(settings.SECRET_STORE_BACKEND)
    return _store
