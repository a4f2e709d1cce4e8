"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from referral_ledger.models.base import Base
from referral_ledger.models.enums import (
    CommissionStatus,
    SubscriptionStatus,
    TriggerType,
    WithdrawalStatus,
)
from referral_ledger.models.id_sequence import IdSequence
from referral_ledger.models.referral_commission import ReferralCommission
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.models.withdrawal_request import WithdrawalRequest

__all__ = [
    # Base
    "Base",
    # Enums
    "CommissionStatus",
    "SubscriptionStatus",
    "TriggerType",
    "WithdrawalStatus",
    # Models
    "IdSequence",
    "ReferralCommission",
    "UserProfile",
    "WithdrawalRequest",
]
