"""Tests for the reveal gate and order-parameter rules."""
from typing import Any

import pytest

from src.pm_commitment.domain.models import InstrumentRef, OrderParameters
from src.pm_common.enums import OrderKind, OrderSide
from src.pm_common.errors import InvalidOrderParamsError, OrderExpiredError
from src.pm_risk.rules.order_expiry import check_not_expired, is_expired
from src.pm_risk.rules.order_params import check_escrow_amount, check_order_params
from src.pm_risk.rules.reveal_delay import can_reveal

T0 = 1_700_000_000
DELAY = 1800


def _make_params(**kwargs: Any) -> OrderParameters:
    defaults: dict[str, Any] = {
        "instrument": InstrumentRef(address="0x" + "cd" * 20, instance_id=1),
        "order_kind": OrderKind.LIMIT,
        "side": OrderSide.BUY,
        "quantity": 1000,
        "limit_price": 500,
        "minimum_fill": 0,
        "expiry": T0 + 3600,
    }
    defaults.update(kwargs)
    return OrderParameters(**defaults)


class TestRevealGate:
    def test_one_second_early(self) -> None:
        window = can_reveal(T0, T0 + DELAY - 1, DELAY)
        assert not window.allowed
        assert window.remaining_seconds == 1

    def test_exactly_at_delay(self) -> None:
        window = can_reveal(T0, T0 + DELAY, DELAY)
        assert window.allowed
        assert window.remaining_seconds == 0

    def test_example_ten_seconds_in(self) -> None:
        window = can_reveal(T0, T0 + 10, DELAY)
        assert not window.allowed
        assert window.remaining_seconds == 1790
        assert window.reveal_at == T0 + DELAY

    def test_long_after(self) -> None:
        window = can_reveal(T0, T0 + 10 * DELAY, DELAY)
        assert window.allowed
        assert window.remaining_seconds == 0

    def test_clock_before_commit(self) -> None:
        window = can_reveal(T0, T0 - 5, DELAY)
        assert not window.allowed
        assert window.remaining_seconds == DELAY + 5

    def test_zero_delay(self) -> None:
        assert can_reveal(T0, T0, 0).allowed

    def test_default_delay_from_settings(self) -> None:
        window = can_reveal(T0, T0)
        assert window.reveal_at == T0 + 1800

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            can_reveal(T0, T0, -1)


class TestOrderParams:
    def test_valid(self) -> None:
        check_order_params(_make_params(minimum_fill=1000))

    def test_zero_quantity(self) -> None:
        with pytest.raises(InvalidOrderParamsError):
            check_order_params(_make_params(quantity=0))

    def test_negative_price(self) -> None:
        with pytest.raises(InvalidOrderParamsError):
            check_order_params(_make_params(limit_price=-1))

    def test_minimum_fill_above_quantity(self) -> None:
        with pytest.raises(InvalidOrderParamsError) as exc_info:
            check_order_params(_make_params(minimum_fill=1001))
        assert exc_info.value.code == 7004

    def test_negative_escrow(self) -> None:
        check_escrow_amount(0)
        with pytest.raises(InvalidOrderParamsError):
            check_escrow_amount(-1)


class TestExpiry:
    def test_expiry_is_exclusive(self) -> None:
        assert not is_expired(T0 + 1, T0)
        assert is_expired(T0, T0)

    def test_check_raises(self) -> None:
        check_not_expired(T0 + 1, T0)
        with pytest.raises(OrderExpiredError) as exc_info:
            check_not_expired(T0, T0)
        assert exc_info.value.code == 7003
