"""
Referral services package.

Contains modular services for referral processing:
- config: Rate table (REFERRAL_DEPTH, REFERRAL_RATES)
- chain_manager: Referrer chain walks and cycle checks
- commission_distributor: Multi-level commission crediting
- code_allocator: Referral codes and registration numbers
- statistics: Balance summaries and the downstream tree
"""

from referral_ledger.services.referral.chain_manager import (
    ReferralChainManager,
    ReferrerInfo,
)
from referral_ledger.services.referral.code_allocator import (
    ReferralCodeAllocator,
    generate_referral_code,
    generate_referral_link,
)
from referral_ledger.services.referral.commission_distributor import (
    CommissionDistributor,
    DistributionOutcome,
)
from referral_ledger.services.referral.config import (
    REFERRAL_DEPTH,
    REFERRAL_RATES,
    calculate_level_commission,
    get_commission_rate,
)
from referral_ledger.services.referral.statistics import (
    ReconciliationReport,
    ReferralStatisticsManager,
    ReferralStats,
    ReferredUser,
)


__all__ = [
    # Configuration
    "REFERRAL_DEPTH",
    "REFERRAL_RATES",
    "calculate_level_commission",
    "get_commission_rate",
    # Managers
    "ReferralChainManager",
    "ReferralCodeAllocator",
    "ReferralStatisticsManager",
    "CommissionDistributor",
    # Results
    "DistributionOutcome",
    "ReconciliationReport",
    "ReferralStats",
    "ReferredUser",
    "ReferrerInfo",
    # Helpers
    "generate_referral_code",
    "generate_referral_link",
]
