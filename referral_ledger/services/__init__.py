"""
Services package.

Business logic layer. Facades (ReferralService, WithdrawalService)
delegate to the referral, profile and withdrawal sub-packages.
"""

from referral_ledger.services.base_service import BaseService, transaction
from referral_ledger.services.referral_service import ReferralService
from referral_ledger.services.withdrawal_service import WithdrawalService


__all__ = [
    "BaseService",
    "transaction",
    "ReferralService",
    "WithdrawalService",
]
