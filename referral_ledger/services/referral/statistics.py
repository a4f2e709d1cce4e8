"""
Referral statistics module.

Read path over the ledger: balance summaries, the downstream referral tree
and per-level commission breakdowns. Nothing here writes.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.referral_commission import ReferralCommission
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.referral.code_allocator import (
    generate_referral_link,
)
from referral_ledger.services.referral.config import (
    COMMISSION_QUANTUM,
    REFERRAL_DEPTH,
)
from referral_ledger.utils.exceptions import NotFoundError


@dataclass(frozen=True)
class ReferralStats:
    """Balance summary shown on a user's referral dashboard."""

    total_earnings: Decimal
    available_balance: Decimal
    withdrawn_amount: Decimal
    referral_count: int
    referral_code: str
    referral_link: str


@dataclass(frozen=True)
class ReferredUser:
    """A profile somewhere below the user in the referral tree."""

    id: int
    level: int
    full_name: str | None
    created_at: datetime


@dataclass(frozen=True)
class ReconciliationReport:
    """Recorded total_earnings versus the sum of commission rows."""

    profile_id: int
    recorded: Decimal
    computed: Decimal

    @property
    def is_consistent(self) -> bool:
        return self.recorded == self.computed


class ReferralStatisticsManager:
    """Manages referral statistics and analytics."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize statistics manager."""
        self.session = session
        self.profile_repo = UserProfileRepository(session)
        self.commission_repo = ReferralCommissionRepository(session)

    async def _require_profile(self, user_id: str) -> UserProfile:
        profile = await self.profile_repo.get_by_user_id(user_id)
        if not profile:
            raise NotFoundError(f"Profile not found for user {user_id}")
        return profile

    async def get_stats(self, user_id: str) -> ReferralStats:
        """
        Get balance summary for user.

        Args:
            user_id: External user reference

        Returns:
            ReferralStats with balances and direct referral count

        Raises:
            NotFoundError: Profile does not exist
        """
        profile = await self._require_profile(user_id)
        referral_count = await self.profile_repo.count_direct_referrals(
            profile.id
        )

        return ReferralStats(
            total_earnings=Decimal(str(profile.total_earnings)),
            available_balance=Decimal(str(profile.available_balance)),
            withdrawn_amount=Decimal(str(profile.withdrawn_amount)),
            referral_count=referral_count,
            referral_code=profile.referral_code,
            referral_link=generate_referral_link(profile.referral_code),
        )

    async def get_all_level_referred_users(
        self, user_id: str, max_levels: int = REFERRAL_DEPTH
    ) -> list[ReferredUser]:
        """
        Get everyone below the user down to max_levels.

        Breadth-first: one batched query per level, stopping early on an
        empty level.

        Args:
            user_id: External user reference
            max_levels: Depth limit

        Returns:
            Referred users sorted by level, newest first within a level
        """
        profile = await self._require_profile(user_id)

        result: list[ReferredUser] = []
        frontier = [profile.id]
        seen = {profile.id}

        for level in range(1, max_levels + 1):
            children = await self.profile_repo.get_referred_by_any(frontier)
            # Skip anything already visited if stored data ever loops
            children = [c for c in children if c.id not in seen]
            if not children:
                break

            result.extend(
                ReferredUser(
                    id=child.id,
                    level=level,
                    full_name=child.full_name,
                    created_at=child.created_at,
                )
                for child in children
            )
            seen.update(c.id for c in children)
            frontier = [c.id for c in children]

        result.sort(key=lambda u: u.created_at, reverse=True)
        result.sort(key=lambda u: u.level)
        return result

    async def get_referred_users(self, user_id: str) -> list[ReferredUser]:
        """Get direct referrals of a user, newest first."""
        return await self.get_all_level_referred_users(user_id, max_levels=1)

    async def count_referrals_by_level(
        self, user_id: str, max_levels: int = REFERRAL_DEPTH
    ) -> dict[int, int]:
        """
        Count referred users per level.

        Returns:
            Dict level -> count, with every level 1..max_levels present
        """
        counts = dict.fromkeys(range(1, max_levels + 1), 0)
        for user in await self.get_all_level_referred_users(
            user_id, max_levels
        ):
            counts[user.level] += 1
        return counts

    async def get_commissions(
        self, user_id: str
    ) -> list[ReferralCommission]:
        """Get commissions earned by a user, newest first."""
        profile = await self._require_profile(user_id)
        return await self.commission_repo.get_by_referrer(profile.id)

    async def get_commissions_by_level(
        self, user_id: str
    ) -> dict[int, list[ReferralCommission]]:
        """
        Group a user's commissions by referral level.

        Returns:
            Dict level -> commissions (newest first); levels without
            commissions are omitted
        """
        grouped: dict[int, list[ReferralCommission]] = {}
        for commission in await self.get_commissions(user_id):
            grouped.setdefault(commission.level, []).append(commission)
        return dict(sorted(grouped.items()))

    async def reconcile_earnings(self, profile_id: int) -> ReconciliationReport:
        """
        Compare a profile's total_earnings with its commission rows.

        Args:
            profile_id: Profile ID

        Returns:
            ReconciliationReport

        Raises:
            NotFoundError: Profile does not exist
        """
        profile = await self.profile_repo.get_by_id(profile_id)
        if not profile:
            raise NotFoundError(f"Profile {profile_id} not found")
        await self.session.refresh(profile)

        computed = await self.commission_repo.sum_for_referrer(profile_id)
        # SQLite sums in floating point
        return ReconciliationReport(
            profile_id=profile_id,
            recorded=Decimal(str(profile.total_earnings)).quantize(
                COMMISSION_QUANTUM
            ),
            computed=computed.quantize(COMMISSION_QUANTUM),
        )
