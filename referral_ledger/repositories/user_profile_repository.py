"""
User profile repository.

Data access layer for UserProfile model, including the atomic balance
mutations used by the commission distributor and the withdrawal ledger.
"""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.user_profile import UserProfile
from referral_ledger.repositories.base import BaseRepository


class UserProfileRepository(BaseRepository[UserProfile]):
    """User profile repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user profile repository."""
        super().__init__(UserProfile, session)

    async def get_by_user_id(
        self, user_id: str, for_update: bool = False
    ) -> UserProfile | None:
        """
        Get profile by external user reference.

        Always reloads column values so balances reflect the latest
        committed state even if the profile is already in the session.

        Args:
            user_id: External user reference
            for_update: Lock the row (SELECT FOR UPDATE)

        Returns:
            UserProfile or None
        """
        stmt = (
            select(UserProfile)
            .where(UserProfile.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_referral_code(
        self, referral_code: str
    ) -> UserProfile | None:
        """
        Get profile by referral code.

        Args:
            referral_code: Referral code (stored uppercase)

        Returns:
            UserProfile or None
        """
        return await self.get_by(referral_code=referral_code)

    async def registration_number_exists(
        self, registration_number: str
    ) -> bool:
        """Check if a registration number is already taken."""
        return await self.exists(registration_number=registration_number)

    async def get_referrer_link(
        self, profile_id: int
    ) -> tuple[bool, int | None]:
        """
        Look up a single hop of the referrer chain.

        Args:
            profile_id: Profile ID

        Returns:
            Tuple of (profile_found, referred_by)
        """
        stmt = select(UserProfile.referred_by).where(
            UserProfile.id == profile_id
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return False, None
        return True, row.referred_by

    async def get_referred_by_any(
        self, profile_ids: list[int]
    ) -> list[UserProfile]:
        """
        Get all profiles directly referred by any of the given profiles.

        One batched IN query, newest first.

        Args:
            profile_ids: Referrer profile IDs

        Returns:
            List of referred profiles
        """
        if not profile_ids:
            return []

        stmt = (
            select(UserProfile)
            .where(UserProfile.referred_by.in_(profile_ids))
            .order_by(UserProfile.created_at.desc(), UserProfile.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_direct_referrals(self, profile_id: int) -> int:
        """Count profiles whose referred_by is profile_id."""
        stmt = select(func.count(UserProfile.id)).where(
            UserProfile.referred_by == profile_id
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def credit_earnings(
        self, profile_id: int, amount: Decimal
    ) -> bool:
        """
        Atomically credit a commission to total_earnings and available_balance.

        Args:
            profile_id: Referrer profile ID
            amount: Commission amount

        Returns:
            True if the profile row was updated
        """
        stmt = (
            update(UserProfile)
            .where(UserProfile.id == profile_id)
            .values(
                total_earnings=UserProfile.total_earnings + amount,
                available_balance=UserProfile.available_balance + amount,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def hold_available_balance(
        self, user_id: str, amount: Decimal
    ) -> bool:
        """
        Debit available_balance only if it covers the amount.

        Single compare-and-swap statement: concurrent holds on the same
        profile can never jointly overdraw it.

        Args:
            user_id: External user reference
            amount: Amount to hold

        Returns:
            True if debited, False if profile missing or balance too low
        """
        stmt = (
            update(UserProfile)
            .where(
                UserProfile.user_id == user_id,
                UserProfile.available_balance >= amount,
            )
            .values(
                available_balance=UserProfile.available_balance - amount,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def refund_available_balance(
        self, user_id: str, amount: Decimal
    ) -> bool:
        """Atomically return a held amount to available_balance."""
        stmt = (
            update(UserProfile)
            .where(UserProfile.user_id == user_id)
            .values(
                available_balance=UserProfile.available_balance + amount,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def add_withdrawn_amount(
        self, user_id: str, amount: Decimal
    ) -> bool:
        """Atomically add a settled withdrawal to withdrawn_amount."""
        stmt = (
            update(UserProfile)
            .where(UserProfile.user_id == user_id)
            .values(
                withdrawn_amount=UserProfile.withdrawn_amount + amount,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def assign_registration_number(
        self, profile_id: int, registration_number: str
    ) -> bool:
        """
        Set registration number if the profile does not have one yet.

        Args:
            profile_id: Profile ID
            registration_number: Candidate number

        Returns:
            True if assigned
        """
        stmt = (
            update(UserProfile)
            .where(
                UserProfile.id == profile_id,
                UserProfile.registration_number.is_(None),
            )
            .values(registration_number=registration_number)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
