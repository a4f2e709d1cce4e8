"""
Referral chain management module.

Resolves a profile's referrer chain one hop at a time and guards the
referred_by forest against cycles at registration time.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.referral.config import REFERRAL_DEPTH
from referral_ledger.utils.exceptions import ValidationError


@dataclass(frozen=True)
class ReferrerInfo:
    """Direct referrer details shown to the referred user."""

    id: int
    full_name: str | None
    referral_code: str
    phone: str | None


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.profile_repo = UserProfileRepository(session)

    async def ancestor_chain(
        self, profile_id: int, max_levels: int = REFERRAL_DEPTH
    ) -> AsyncIterator[tuple[int, int]]:
        """
        Walk the referrer chain upwards, lazily.

        Yields (ancestor_profile_id, level) with level 1 being the direct
        referrer. Each step costs one profile lookup. The walk stops at
        max_levels, at a profile without referrer, or when an ancestor
        row is missing; the last case truncates silently.

        Args:
            profile_id: Starting profile ID (not yielded itself)
            max_levels: Maximum number of hops

        Yields:
            Tuple of (profile_id, level)
        """
        if max_levels < 1:
            return

        found, current = await self.profile_repo.get_referrer_link(
            profile_id
        )
        if not found or current is None:
            return

        for level in range(1, max_levels + 1):
            # Resolving the ancestor's own row proves it exists and
            # gives the next hop
            found, parent_id = await self.profile_repo.get_referrer_link(
                current
            )
            if not found:
                logger.debug(
                    "Referral chain truncated at missing profile",
                    extra={
                        "start_profile_id": profile_id,
                        "missing_profile_id": current,
                        "level": level,
                    },
                )
                return

            yield current, level

            if parent_id is None:
                return
            current = parent_id

    async def get_referrer(self, profile_id: int) -> int | None:
        """
        Get direct referrer profile ID.

        Args:
            profile_id: Profile ID

        Returns:
            Referrer profile ID or None
        """
        _, referrer_id = await self.profile_repo.get_referrer_link(
            profile_id
        )
        return referrer_id

    async def get_referrer_info(self, user_id: str) -> ReferrerInfo | None:
        """
        Get direct referrer details for a user.

        Args:
            user_id: External user reference

        Returns:
            ReferrerInfo or None if user unknown or not referred
        """
        profile = await self.profile_repo.get_by_user_id(user_id)
        if not profile or profile.referred_by is None:
            return None

        referrer = await self.profile_repo.get_by_id(profile.referred_by)
        if not referrer:
            return None

        return ReferrerInfo(
            id=referrer.id,
            full_name=referrer.full_name,
            referral_code=referrer.referral_code,
            phone=referrer.phone,
        )

    async def ensure_no_cycle(self, referrer_profile_id: int) -> None:
        """
        Check that the referrer's ancestor chain ends at a root.

        A registering user has no profile yet, so it cannot appear in the
        chain; a new leaf keeps the forest acyclic as long as the chain
        above it already is. The walk is unbounded, since a loop in
        existing data may sit deeper than the commission depth.

        Args:
            referrer_profile_id: Prospective referrer profile ID

        Raises:
            ValidationError: If the chain loops back on itself
        """
        seen = {referrer_profile_id}
        current = referrer_profile_id
        while True:
            found, parent_id = await self.profile_repo.get_referrer_link(
                current
            )
            if not found or parent_id is None:
                return
            if parent_id in seen:
                logger.warning(
                    "Referral loop detected in existing data",
                    extra={
                        "profile_id": parent_id,
                        "referrer_profile_id": referrer_profile_id,
                    },
                )
                raise ValidationError("Referral chain contains a cycle")
            seen.add(parent_id)
            current = parent_id
