# app/utils/money.py
# Currency arithmetic for contracts, settlements and the wallet ledger.
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

from app.core.exceptions import InputValidationError

CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Quantize to cents, rounding half up. Floats go through str() first."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InputValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise InputValidationError(f"Invalid amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_platform_fee(amount: Number, rate: Number) -> Decimal:
    """
    Platform commission on a contract amount.

    >>> compute_platform_fee(450, Decimal("0.10"))
    Decimal('45.00')
    """
    amount = to_money(amount)
    rate = Decimal(str(rate))
    if amount < 0:
        raise InputValidationError("Amount must not be negative")
    if rate < 0 or rate >= 1:
        raise InputValidationError("Commission rate must be in [0, 1)")
    return to_money(amount * rate)


def compute_freelancer_net(amount: Number, platform_fee: Number) -> Decimal:
    """What the freelancer is credited on settlement."""
    net = to_money(amount) - to_money(platform_fee)
    if net < 0:
        raise InputValidationError("Platform fee exceeds contract amount")
    return net
