"""Unit tests for SqlSecretStore using MagicMock AsyncSession."""
import dataclasses
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_commitment.domain.codec import commit
from src.pm_commitment.domain.models import InstrumentRef, OrderParameters
from src.pm_common.enums import OrderKind, OrderSide
from src.pm_common.errors import SecretCollisionError, SecretCorruptedError
from src.pm_secret.domain.models import PendingSecret
from src.pm_secret.infrastructure.sql_store import (
    SqlSecretStore,
    _row_to_secret,
    _secret_to_params,
)

TRADER = "0x" + "ab" * 20


def _make_secret(salt: int = 777) -> PendingSecret:
    params = OrderParameters(
        instrument=InstrumentRef(address="0x" + "cd" * 20, instance_id=3),
        order_kind=OrderKind.LIMIT,
        side=OrderSide.BUY,
        quantity=1000,
        limit_price=500,
        minimum_fill=0,
        expiry=1_700_003_600,
    )
    return PendingSecret(
        commitment_hash=commit(salt, params, TRADER).commitment_hex,
        params=params,
        salt=salt,
        created_at=1_700_000_000,
        escrow_amount=5,
    )


def _make_row(secret: PendingSecret, **overrides: object) -> SimpleNamespace:
    values = _secret_to_params(secret)
    values.update(overrides)
    return SimpleNamespace(**values)


def _result(rowcount: int = 1, row: object = None, rows: list | None = None) -> MagicMock:
    result = MagicMock()
    result.rowcount = rowcount
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    return result


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    session.begin.return_value.__aexit__.return_value = False
    return session


@pytest.fixture
def store(db: MagicMock) -> SqlSecretStore:
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = db
    factory.return_value.__aexit__.return_value = False
    return SqlSecretStore(factory)


class TestRowMapping:
    def test_params_are_strings(self) -> None:
        params = _secret_to_params(_make_secret())
        assert params["salt"] == "777"
        assert params["quantity"] == "1000"
        assert params["order_kind"] == 1
        assert params["escrow_amount"] == "5"

    def test_row_to_secret(self) -> None:
        secret = _make_secret()
        assert _row_to_secret(_make_row(secret)) == secret

    def test_bad_row_is_corruption(self) -> None:
        with pytest.raises(SecretCorruptedError):
            _row_to_secret(_make_row(_make_secret(), salt="not-a-number"))

    def test_bad_enum_is_corruption(self) -> None:
        with pytest.raises(SecretCorruptedError):
            _row_to_secret(_make_row(_make_secret(), side=9))


class TestPut:
    async def test_insert(self, store: SqlSecretStore, db: MagicMock) -> None:
        secret = _make_secret()
        db.execute.return_value = _result(rowcount=1)
        await store.put(secret.commitment_hash, secret)
        assert db.execute.await_count == 1
        _, params = db.execute.await_args.args
        assert params["commitment_hash"] == secret.commitment_hash

    async def test_identical_existing_row(self, store: SqlSecretStore, db: MagicMock) -> None:
        secret = _make_secret()
        db.execute.side_effect = [_result(rowcount=0), _result(row=_make_row(secret))]
        await store.put(secret.commitment_hash, secret)
        assert db.execute.await_count == 2

    async def test_collision(self, store: SqlSecretStore, db: MagicMock) -> None:
        secret = _make_secret()
        stored = dataclasses.replace(secret, escrow_amount=6)
        db.execute.side_effect = [_result(rowcount=0), _result(row=_make_row(stored))]
        with pytest.raises(SecretCollisionError):
            await store.put(secret.commitment_hash, secret)


class TestGet:
    async def test_found(self, store: SqlSecretStore, db: MagicMock) -> None:
        secret = _make_secret()
        db.execute.return_value = _result(row=_make_row(secret))
        assert await store.get(secret.commitment_hash) == secret

    async def test_missing(self, store: SqlSecretStore, db: MagicMock) -> None:
        db.execute.return_value = _result(row=None)
        assert await store.get("0x" + "55" * 32) is None

    async def test_normalizes_key(self, store: SqlSecretStore, db: MagicMock) -> None:
        db.execute.return_value = _result(row=None)
        await store.get("0x" + "AB" * 32)
        _, params = db.execute.await_args.args
        assert params == {"commitment_hash": "0x" + "ab" * 32}


class TestRemoveAndList:
    async def test_remove(self, store: SqlSecretStore, db: MagicMock) -> None:
        db.execute.return_value = _result(rowcount=0)
        await store.remove("0x" + "66" * 32)
        _, params = db.execute.await_args.args
        assert params == {"commitment_hash": "0x" + "66" * 32}

    async def test_list_pending(self, store: SqlSecretStore, db: MagicMock) -> None:
        rows = [SimpleNamespace(commitment_hash="0x" + "01" * 32),
                SimpleNamespace(commitment_hash="0x" + "02" * 32)]
        db.execute.return_value = _result(rows=rows)
        assert await store.list_pending() == ["0x" + "01" * 32, "0x" + "02" * 32]
