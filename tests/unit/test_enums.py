"""Tests for pm_common.enums: integer values must match the DarkPool contract."""

from src.pm_common.enums import (
    ConfirmAction,
    LedgerOrderStatus,
    LocalPhase,
    OrderKind,
    OrderSide,
    SecretStoreBackend,
)


class TestContractEnums:
    def test_order_kind_values(self) -> None:
        assert [k.value for k in OrderKind] == [0, 1, 2, 3, 4]
        assert OrderKind.MARKET == 0
        assert OrderKind.TIME_WEIGHTED == 4

    def test_order_side_values(self) -> None:
        assert OrderSide.BUY == 0
        assert OrderSide.SELL == 1

    def test_ledger_status_terminal(self) -> None:
        assert not LedgerOrderStatus.PENDING.is_terminal
        assert not LedgerOrderStatus.PARTIALLY_FILLED.is_terminal
        assert LedgerOrderStatus.FILLED.is_terminal
        assert LedgerOrderStatus.CANCELLED.is_terminal
        assert LedgerOrderStatus.EXPIRED.is_terminal


class TestStrEnums:
    def test_local_phase_is_str(self) -> None:
        assert isinstance(LocalPhase.COMMITTED, str)
        assert LocalPhase.COMMITTED == "COMMITTED"

    def test_local_phases(self) -> None:
        assert {p.value for p in LocalPhase} == {
            "UNCOMMITTED", "COMMITTING", "COMMITTED", "REVEALING",
            "REVEALED", "CANCELLING", "CANCELLED", "EXPIRED",
        }

    def test_store_backend_from_setting(self) -> None:
        assert SecretStoreBackend("file") is SecretStoreBackend.FILE
        assert SecretStoreBackend("sql") is SecretStoreBackend.SQL

    def test_confirm_action(self) -> None:
        assert ConfirmAction("reveal") is ConfirmAction.REVEAL
