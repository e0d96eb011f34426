from decimal import Decimal

import pytest

from app.core.exceptions import InputValidationError
from app.utils.money import compute_freelancer_net, compute_platform_fee, to_money


def test_to_money_rounds_half_up_to_cents():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money("10.004") == Decimal("10.00")
    assert to_money(7) == Decimal("7.00")


def test_to_money_goes_through_str_for_floats():
    # Decimal(0.1) would carry binary noise
    assert to_money(0.1) == Decimal("0.10")


@pytest.mark.parametrize("bad", ["abc", "NaN", "Infinity"])
def test_to_money_rejects_garbage(bad):
    with pytest.raises(InputValidationError):
        to_money(bad)


def test_platform_fee_ten_percent():
    assert compute_platform_fee(Decimal("450.00"), Decimal("0.10")) == Decimal("45.00")
    assert compute_platform_fee(Decimal("999.99"), Decimal("0.10")) == Decimal("100.00")


def test_platform_fee_zero_rate():
    assert compute_platform_fee(Decimal("120.00"), 0) == Decimal("0.00")


def test_platform_fee_rejects_bad_inputs():
    with pytest.raises(InputValidationError):
        compute_platform_fee(Decimal("-1"), Decimal("0.10"))
    with pytest.raises(InputValidationError):
        compute_platform_fee(Decimal("100"), Decimal("1"))


def test_fee_plus_net_equals_amount():
    for raw in ("0.01", "33.33", "450.00", "1234.57"):
        amount = to_money(raw)
        fee = compute_platform_fee(amount, Decimal("0.10"))
        assert fee + compute_freelancer_net(amount, fee) == amount


def test_net_cannot_go_negative():
    with pytest.raises(InputValidationError):
        compute_freelancer_net(Decimal("10"), Decimal("10.01"))
