"""
Referral service - Main service facade.

Delegates to the specialized referral and profile modules:
- referral/commission_distributor: Multi-level commission crediting
- referral/chain_manager: Referrer lookups
- referral/code_allocator: Referral codes and registration numbers
- referral/statistics: Balances, downstream tree, commission history
- profile/registration: Profile creation
- profile/subscription: Subscription status and activation trigger
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.enums import SubscriptionStatus, TriggerType
from referral_ledger.models.referral_commission import ReferralCommission
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.services.base_service import BaseService
from referral_ledger.services.profile.registration import (
    ProfileRegistrationService,
)
from referral_ledger.services.profile.subscription import (
    SubscriptionService,
    SubscriptionUpdate,
)
from referral_ledger.services.referral.chain_manager import (
    ReferralChainManager,
    ReferrerInfo,
)
from referral_ledger.services.referral.code_allocator import (
    ReferralCodeAllocator,
    generate_referral_link,
)
from referral_ledger.services.referral.commission_distributor import (
    CommissionDistributor,
    DistributionOutcome,
)
from referral_ledger.services.referral.statistics import (
    ReconciliationReport,
    ReferralStatisticsManager,
    ReferralStats,
    ReferredUser,
)


class ReferralService(BaseService):
    """Referral service for managing referral chains and rewards."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral service and all sub-components."""
        super().__init__(session)

        self.distributor = CommissionDistributor(session)
        self.chain_manager = ReferralChainManager(session)
        self.allocator = ReferralCodeAllocator(session)
        self.statistics = ReferralStatisticsManager(session)
        self.registration = ProfileRegistrationService(session)
        self.subscription = SubscriptionService(session)

    # ========================================================================
    # PROFILES
    # ========================================================================

    async def register_profile(
        self,
        user_id: str,
        referral_code: str | None = None,
        full_name: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> UserProfile:
        """Register a profile under an optional referrer."""
        return await self.registration.register_profile(
            user_id, referral_code, full_name, phone, email
        )

    async def update_subscription_status(
        self,
        user_id: str,
        status: SubscriptionStatus | str,
        activation_amount: Decimal | int | str | None = None,
    ) -> SubscriptionUpdate:
        """Set subscription status, paying commissions on activation."""
        return await self.subscription.update_subscription_status(
            user_id, status, activation_amount
        )

    # ========================================================================
    # COMMISSIONS
    # ========================================================================

    async def distribute_commissions(
        self,
        trigger_user_id: str,
        trigger_type: TriggerType | str,
        base_amount: Decimal | int | str,
        order_id: str | None = None,
    ) -> DistributionOutcome:
        """
        Distribute commissions for an order purchase or activation.

        Args:
            trigger_user_id: Buyer/subscriber user reference
            trigger_type: order_purchase or subscription_activation
            base_amount: Commission base
            order_id: Source order reference

        Returns:
            DistributionOutcome
        """
        return await self.distributor.distribute(
            trigger_user_id, trigger_type, base_amount, order_id
        )

    # ========================================================================
    # IDENTIFIERS
    # ========================================================================

    async def validate_referral_code(self, referral_code: str) -> bool:
        """Check that a referral code exists (case-insensitive)."""
        return await self.allocator.validate_referral_code(referral_code)

    async def ensure_registration_number(self, profile_id: int) -> str:
        """Allocate a registration number if the profile has none."""
        return await self.allocator.allocate_registration_number(profile_id)

    def get_referral_link(self, referral_code: str) -> str:
        """Build the registration link for a referral code."""
        return generate_referral_link(referral_code)

    # ========================================================================
    # QUERIES
    # ========================================================================

    async def get_referrer_info(self, user_id: str) -> ReferrerInfo | None:
        """Get direct referrer details for a user."""
        return await self.chain_manager.get_referrer_info(user_id)

    async def get_stats(self, user_id: str) -> ReferralStats:
        """Get balance summary for a user."""
        return await self.statistics.get_stats(user_id)

    async def get_all_level_referred_users(
        self, user_id: str, max_levels: int = 7
    ) -> list[ReferredUser]:
        """Get the user's downstream tree, sorted by level."""
        return await self.statistics.get_all_level_referred_users(
            user_id, max_levels
        )

    async def get_referred_users(self, user_id: str) -> list[ReferredUser]:
        """Get direct referrals."""
        return await self.statistics.get_referred_users(user_id)

    async def count_referrals_by_level(self, user_id: str) -> dict[int, int]:
        """Count referred users per level."""
        return await self.statistics.count_referrals_by_level(user_id)

    async def get_commissions(
        self, user_id: str
    ) -> list[ReferralCommission]:
        """Get commissions earned by a user, newest first."""
        return await self.statistics.get_commissions(user_id)

    async def get_commissions_by_level(
        self, user_id: str
    ) -> dict[int, list[ReferralCommission]]:
        """Get commissions grouped by level."""
        return await self.statistics.get_commissions_by_level(user_id)

    async def reconcile_earnings(
        self, profile_id: int
    ) -> ReconciliationReport:
        """Check total_earnings against commission rows."""
        return await self.statistics.reconcile_earnings(profile_id)
