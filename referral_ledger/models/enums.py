"""
Enum definitions for models.

Values are stored as plain strings in the database.
"""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """Profile subscription status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class CommissionStatus(str, Enum):
    """Referral commission payout status."""

    PENDING = "pending"
    PAID = "paid"


class TriggerType(str, Enum):
    """Event that triggers commission distribution."""

    ORDER_PURCHASE = "order_purchase"
    SUBSCRIPTION_ACTIVATION = "subscription_activation"


class WithdrawalStatus(str, Enum):
    """Withdrawal request lifecycle status."""

    PENDING = "pending"  # balance already held
    APPROVED = "approved"
    REJECTED = "rejected"  # balance refunded
