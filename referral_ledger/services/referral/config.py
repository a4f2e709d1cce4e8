"""
Referral system configuration.

Contains the fixed commission rate table of the 7-level referral program.
"""

from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType

from referral_ledger.utils.exceptions import ValidationError
from referral_ledger.utils.validation import MONEY_QUANTUM

# 7-level referral program: 10%, 5%, 3%, 2%, 1%, 0.5%, 0.5%
REFERRAL_DEPTH = 7
REFERRAL_RATES = MappingProxyType({
    1: Decimal("0.10"),  # direct referrer
    2: Decimal("0.05"),
    3: Decimal("0.03"),
    4: Decimal("0.02"),
    5: Decimal("0.01"),
    6: Decimal("0.005"),
    7: Decimal("0.005"),
})

# Commissions are credited in paise
COMMISSION_QUANTUM = MONEY_QUANTUM


def get_commission_rate(level: int) -> Decimal:
    """
    Get commission rate for a referral level.

    Args:
        level: Referral level (1-7)

    Returns:
        Rate as a fraction

    Raises:
        ValidationError: If level is outside the rate table
    """
    try:
        return REFERRAL_RATES[level]
    except KeyError:
        raise ValidationError(
            f"Referral level must be 1..{REFERRAL_DEPTH}, got {level}"
        ) from None


def calculate_level_commission(base_amount: Decimal, level: int) -> Decimal:
    """
    Calculate commission for a level, rounded half-up to paise.

    Args:
        base_amount: Order or subscription amount
        level: Referral level (1-7)

    Returns:
        Commission amount
    """
    rate = get_commission_rate(level)
    return (base_amount * rate).quantize(
        COMMISSION_QUANTUM, rounding=ROUND_HALF_UP
    )
