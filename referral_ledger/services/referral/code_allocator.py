"""
Referral code and registration number allocation.

Referral codes are random; uniqueness is enforced by the database and the
caller retries on collision. Registration numbers are sequential
(MAT1001, MAT1002, ...) and seeded from a dedicated atomic sequence.
"""

import secrets
import string

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.config.settings import settings
from referral_ledger.repositories.id_sequence_repository import (
    IdSequenceRepository,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.base_service import BaseService, transaction
from referral_ledger.utils.exceptions import (
    AllocationExhaustedError,
    NotFoundError,
)


REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REGISTRATION_SEQUENCE = "registration_number"


def generate_referral_code(
    prefix: str | None = None, length: int | None = None
) -> str:
    """
    Generate a referral code like MTC7K2QX.

    No uniqueness check: the caller retries on a persisted collision.

    Args:
        prefix: Code prefix (default from settings)
        length: Number of random symbols (default from settings)

    Returns:
        Referral code
    """
    prefix = settings.referral_code_prefix if prefix is None else prefix
    length = settings.referral_code_length if length is None else length
    suffix = "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length)
    )
    return f"{prefix}{suffix}"


def generate_referral_link(referral_code: str) -> str:
    """Build the registration link that carries a referral code."""
    return f"{settings.site_url}/register?ref={referral_code}"


def format_registration_number(suffix: int) -> str:
    """Format registration number as prefix + at least 4 digits."""
    return f"{settings.registration_prefix}{suffix:04d}"


class ReferralCodeAllocator(BaseService):
    """Allocates and validates user-facing identifiers."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize allocator."""
        super().__init__(session)
        self.profile_repo = UserProfileRepository(session)
        self.sequence_repo = IdSequenceRepository(session)

    async def validate_referral_code(self, referral_code: str) -> bool:
        """
        Check that a referral code belongs to an existing profile.

        Args:
            referral_code: Code entered by the user (any case)

        Returns:
            True if a profile owns the code
        """
        if not referral_code or not referral_code.strip():
            return False
        profile = await self.profile_repo.get_by_referral_code(
            referral_code.strip().upper()
        )
        return profile is not None

    @transaction
    async def allocate_registration_number(self, profile_id: int) -> str:
        """
        Ensure a profile has a registration number.

        Idempotent: an already assigned number is returned unchanged.
        Candidate is prefix + (base + next sequence value); taken
        candidates are skipped by incrementing the suffix, up to
        registration_max_attempts candidates.

        Args:
            profile_id: Profile ID

        Returns:
            Registration number

        Raises:
            NotFoundError: Profile does not exist
            AllocationExhaustedError: No free candidate within the attempts
        """
        profile = await self.profile_repo.get_by_id(profile_id)
        if not profile:
            raise NotFoundError(f"Profile {profile_id} not found")
        await self.session.refresh(profile)

        if profile.registration_number:
            return profile.registration_number

        suffix = settings.registration_base + await self.sequence_repo.next_value(
            REGISTRATION_SEQUENCE
        )

        for attempt in range(settings.registration_max_attempts):
            candidate = format_registration_number(suffix)
            if not await self.profile_repo.registration_number_exists(
                candidate
            ):
                if await self.profile_repo.assign_registration_number(
                    profile_id, candidate
                ):
                    logger.info(
                        "Registration number assigned",
                        extra={
                            "profile_id": profile_id,
                            "registration_number": candidate,
                            "attempts": attempt + 1,
                        },
                    )
                    return candidate

                # Assigned concurrently by another caller
                await self.session.refresh(profile)
                if profile.registration_number:
                    return profile.registration_number

            suffix += 1

        raise AllocationExhaustedError(
            f"No free registration number for profile {profile_id} after "
            f"{settings.registration_max_attempts} attempts"
        )
