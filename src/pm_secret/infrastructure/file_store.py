# src/pm_secret/infrastructure/file_store.py
"""FileSecretStore: one JSON document per commitment.

Layout:
    <root>/<commitment hex without 0x>.json

Durability: write temp file → fsync → os.replace → fsync directory. ``put``
returns only after all four steps, so a crash at any point leaves either no
record or the complete record, never a torn one.

Blocking file I/O runs in worker threads so the event loop is never stalled.
"""
import asyncio
import logging
import os
import re
import tempfile
from pathlib import Path

from src.pm_commitment.domain.models import normalize_bytes32_hex
from src.pm_common.errors import SecretCollisionError
from src.pm_common.keyed_lock import KeyedLocks
from src.pm_secret.domain.models import PendingSecret, store_key
from src.pm_secret.infrastructure.serialization import dump_secret, load_secret

logger = logging.getLogger(__name__)

_SUFFIX = ".json"
_KEY_STEM = re.compile(r"[0-9a-f]{64}")


class FileSecretStore:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._locks = KeyedLocks()

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, commitment_hash: str) -> Path:
        key = normalize_bytes32_hex(commitment_hash)
        return self._root / f"{key[2:]}{_SUFFIX}"

    async def put(self, commitment_hash: str, secret: PendingSecret) -> None:
        key = store_key(commitment_hash, secret)
        async with self._locks.hold(key):
            existing = await asyncio.to_thread(self._read, key)
            if existing is not None:
                if existing != secret:
                    raise SecretCollisionError(key)
                return
            await asyncio.to_thread(self._write_durable, key, dump_secret(secret))
        logger.debug("Secret persisted: commitment=%s", key)

    async def get(self, commitment_hash: str) -> PendingSecret | None:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            return await asyncio.to_thread(self._read, key)

    async def remove(self, commitment_hash: str) -> None:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            await asyncio.to_thread(self._unlink_durable, key)

    async def list_pending(self) -> list[str]:
        names = await asyncio.to_thread(lambda: sorted(self._root.glob(f"*{_SUFFIX}")))
        keys = []
        for path in names:
            if _KEY_STEM.fullmatch(path.stem) is None:
                logger.warning("Ignoring stray file in secret store: %s", path.name)
                continue
            keys.append(f"0x{path.stem}")
        return keys

    # ------------------------------------------------------------------
    # Blocking helpers (run via asyncio.to_thread)
    # ------------------------------------------------------------------

    def _read(self, key: str) -> PendingSecret | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return load_secret(key, raw)

    def _write_durable(self, key: str, payload: str) -> None:
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".tmp-", suffix=".part")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._fsync_dir()

    def _unlink_durable(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        self._fsync_dir()

    def _fsync_dir(self) -> None:
        if os.name != "posix":
            return
        dir_fd = os.open(self._root, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
