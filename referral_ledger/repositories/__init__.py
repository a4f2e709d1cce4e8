"""
Repositories package.

Data access layer over the ledger models.
"""

from referral_ledger.repositories.base import BaseRepository
from referral_ledger.repositories.id_sequence_repository import (
    IdSequenceRepository,
)
from referral_ledger.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.repositories.withdrawal_request_repository import (
    WithdrawalRequestRepository,
)

__all__ = [
    "BaseRepository",
    "IdSequenceRepository",
    "ReferralCommissionRepository",
    "UserProfileRepository",
    "WithdrawalRequestRepository",
]
