# src/pm_secret/infrastructure/sql_store.py
"""SqlSecretStore: raw SQL persistence in darkpool_pending_secrets.

Each call opens its own session and transaction; ``put`` has committed by the
time it returns. Integer fields are stored as decimal strings (uint256 does
not fit BIGINT).
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pm_commitment.domain.models import normalize_bytes32_hex
from src.pm_common.errors import SecretCollisionError, SecretCorruptedError
from src.pm_common.keyed_lock import KeyedLocks
from src.pm_secret.domain.models import PendingSecret, store_key
from src.pm_secret.infrastructure.serialization import (
    OrderParamsRecord,
    PendingSecretRecord,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_SECRET_SQL = text("""
    INSERT INTO darkpool_pending_secrets (commitment_hash,
        instrument_address, instrument_id, order_kind, side,
        quantity, limit_price, minimum_fill, expiry,
        salt, created_at, escrow_amount)
    VALUES (:commitment_hash,
        :instrument_address, :instrument_id, :order_kind, :side,
        :quantity, :limit_price, :minimum_fill, :expiry,
        :salt, :created_at, :escrow_amount)
    ON CONFLICT (commitment_hash) DO NOTHING
""")

_GET_SECRET_SQL = text("""
    SELECT commitment_hash,
        instrument_address, instrument_id, order_kind, side,
        quantity, limit_price, minimum_fill, expiry,
        salt, created_at, escrow_amount
    FROM darkpool_pending_secrets WHERE commitment_hash = :commitment_hash
""")

_DELETE_SECRET_SQL = text("""
    DELETE FROM darkpool_pending_secrets WHERE commitment_hash = :commitment_hash
""")

_LIST_SECRETS_SQL = text("""
    SELECT commitment_hash FROM darkpool_pending_secrets
    ORDER BY created_at ASC, commitment_hash ASC
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_secret(row: Any) -> PendingSecret:
    """Convert a DB result row to a PendingSecret domain object."""
    try:
        record = PendingSecretRecord(
            commitment_hash=row.commitment_hash,
            params=OrderParamsRecord(
                instrument_address=row.instrument_address,
                instrument_id=row.instrument_id,
                order_kind=row.order_kind,
                side=row.side,
                quantity=row.quantity,
                limit_price=row.limit_price,
                minimum_fill=row.minimum_fill,
                expiry=row.expiry,
            ),
            salt=row.salt,
            created_at=row.created_at,
            escrow_amount=row.escrow_amount,
        )
        return record.to_domain()
    except ValueError as exc:
        raise SecretCorruptedError(str(row.commitment_hash), f"unreadable row ({exc})") from exc


def _secret_to_params(secret: PendingSecret) -> dict[str, Any]:
    record = PendingSecretRecord.from_domain(secret)
    return {
        "commitment_hash": record.commitment_hash,
        **record.params.model_dump(),
        "salt": record.salt,
        "created_at": record.created_at,
        "escrow_amount": record.escrow_amount,
    }


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SqlSecretStore:
    """Concrete implementation of SecretStoreProtocol using raw SQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._locks = KeyedLocks()

    async def put(self, commitment_hash: str, secret: PendingSecret) -> None:
        key = store_key(commitment_hash, secret)
        async with self._locks.hold(key):
            async with self._session_factory() as db:
                async with db.begin():
                    result = await db.execute(_INSERT_SECRET_SQL, _secret_to_params(secret))
                    if result.rowcount == 1:
                        return
                    existing = await self._fetch(key, db)
            if existing != secret:
                raise SecretCollisionError(key)

    async def get(self, commitment_hash: str) -> PendingSecret | None:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._session_factory() as db:
            return await self._fetch(key, db)

    async def remove(self, commitment_hash: str) -> None:
        key = normalize_bytes32_hex(commitment_hash)
        async with self._locks.hold(key):
            async with self._session_factory() as db:
                async with db.begin():
                    await db.execute(_DELETE_SECRET_SQL, {"commitment_hash": key})

    async def list_pending(self) -> list[str]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_SECRETS_SQL)
            return [row.commitment_hash for row in result.fetchall()]

    async def _fetch(self, key: str, db: AsyncSession) -> PendingSecret | None:
        result = await db.execute(_GET_SECRET_SQL, {"commitment_hash": key})
        row = result.fetchone()
        return _row_to_secret(row) if row else None
