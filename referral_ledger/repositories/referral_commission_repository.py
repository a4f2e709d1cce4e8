"""
Referral commission repository.

Data access layer for ReferralCommission model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.referral_commission import ReferralCommission
from referral_ledger.repositories.base import BaseRepository


class ReferralCommissionRepository(BaseRepository[ReferralCommission]):
    """Referral commission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral commission repository."""
        super().__init__(ReferralCommission, session)

    async def exists_for_trigger(
        self, trigger_user_id: str, trigger_type: str
    ) -> bool:
        """
        Check if any level was already written for a trigger.

        Args:
            trigger_user_id: External user reference of the trigger user
            trigger_type: Trigger type value

        Returns:
            True if at least one commission row exists
        """
        return await self.exists(
            trigger_user_id=trigger_user_id, trigger_type=trigger_type
        )

    async def get_by_referrer(
        self, referrer_id: int
    ) -> list[ReferralCommission]:
        """
        Get commissions earned by a profile, newest first.

        Args:
            referrer_id: Referrer profile ID

        Returns:
            List of commissions
        """
        stmt = (
            select(ReferralCommission)
            .where(ReferralCommission.referrer_id == referrer_id)
            .order_by(
                ReferralCommission.created_at.desc(),
                ReferralCommission.id.desc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_trigger(
        self, trigger_user_id: str, trigger_type: str
    ) -> list[ReferralCommission]:
        """Get all levels written for a trigger, ordered by level."""
        stmt = (
            select(ReferralCommission)
            .where(
                ReferralCommission.trigger_user_id == trigger_user_id,
                ReferralCommission.trigger_type == trigger_type,
            )
            .order_by(ReferralCommission.level.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_for_referrer(self, referrer_id: int) -> Decimal:
        """
        Sum commission amounts earned by a profile.

        Args:
            referrer_id: Referrer profile ID

        Returns:
            Total commission amount
        """
        stmt = select(
            func.coalesce(
                func.sum(ReferralCommission.commission_amount),
                Decimal("0"),
            )
        ).where(ReferralCommission.referrer_id == referrer_id)
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
