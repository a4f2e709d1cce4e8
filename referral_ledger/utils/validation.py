"""Input validation utilities.

Each validator returns the normalized value or raises ValidationError,
so services can reject bad input before touching the database.
"""

import re
from decimal import Decimal, InvalidOperation

from referral_ledger.models.enums import TriggerType, WithdrawalStatus
from referral_ledger.utils.exceptions import ValidationError


# UPI virtual payment address, e.g. yourname@paytm
UPI_ID_PATTERN = re.compile(r"^[a-zA-Z0-9.\-_]{2,}@[a-zA-Z]{2,}$")

MAX_USER_REFERENCE_LENGTH = 64

# Balances and withdrawals are kept in whole paise
MONEY_QUANTUM = Decimal("0.01")


def to_decimal(value: Decimal | int | str | float) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        ValidationError: If value is not a finite number
    """
    if isinstance(value, bool):
        raise ValidationError("Amount must be a number")
    try:
        if isinstance(value, float):
            amount = Decimal(str(value))
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}") from None

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount


def validate_positive_amount(value: Decimal | int | str | float) -> Decimal:
    """
    Validate that an amount is strictly positive.

    Args:
        value: Amount to validate

    Returns:
        Amount as Decimal

    Raises:
        ValidationError: If amount is not a positive number
    """
    amount = to_decimal(value)
    if amount <= 0:
        raise ValidationError(f"Amount must be positive, got {amount}")
    return amount


def validate_money_amount(value: Decimal | int | str | float) -> Decimal:
    """
    Validate a positive amount in whole paise.

    Amounts that move balances must be stored exactly, so anything finer
    than 0.01 is rejected rather than rounded.

    Args:
        value: Amount to validate

    Returns:
        Amount quantized to 0.01

    Raises:
        ValidationError: If not positive or has more than 2 decimal places
    """
    amount = validate_positive_amount(value)
    try:
        quantized = amount.quantize(MONEY_QUANTUM)
    except InvalidOperation:
        raise ValidationError(f"Amount is too large: {amount}") from None
    if quantized != amount:
        raise ValidationError(
            f"Amount must have at most 2 decimal places, got {amount}"
        )
    return quantized


def validate_user_reference(user_id: str) -> str:
    """
    Validate an external user reference.

    Args:
        user_id: Reference from the identity store

    Returns:
        Stripped reference

    Raises:
        ValidationError: If empty, not a string or too long
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("User reference must be a non-empty string")
    user_id = user_id.strip()
    if len(user_id) > MAX_USER_REFERENCE_LENGTH:
        raise ValidationError("User reference is too long")
    return user_id


def validate_trigger_type(trigger_type: TriggerType | str) -> TriggerType:
    """
    Validate a commission trigger type.

    Raises:
        ValidationError: If not order_purchase or subscription_activation
    """
    try:
        return TriggerType(trigger_type)
    except ValueError:
        raise ValidationError(
            f"Unknown trigger type: {trigger_type!r}"
        ) from None


def validate_withdrawal_status(
    status: WithdrawalStatus | str,
) -> WithdrawalStatus:
    """
    Validate a withdrawal status filter.

    Raises:
        ValidationError: If not a known withdrawal status
    """
    try:
        return WithdrawalStatus(status)
    except ValueError:
        raise ValidationError(
            f"Unknown withdrawal status: {status!r}"
        ) from None


def validate_upi_id(upi_id: str) -> str:
    """
    Validate UPI id format (handle@provider).

    Args:
        upi_id: Destination UPI id

    Returns:
        Stripped UPI id

    Raises:
        ValidationError: If format is invalid
    """
    if not isinstance(upi_id, str) or not upi_id.strip():
        raise ValidationError("UPI id is required")
    upi_id = upi_id.strip()
    if not UPI_ID_PATTERN.match(upi_id):
        raise ValidationError(
            "Invalid UPI id (expected e.g. yourname@paytm)"
        )
    return upi_id
