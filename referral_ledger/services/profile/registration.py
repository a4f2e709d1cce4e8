"""
Profile registration module.

Creates a profile under an optional referrer, with a fresh referral code
and, best effort, a registration number.
"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.config.settings import settings
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.base_service import BaseService
from referral_ledger.services.referral.chain_manager import (
    ReferralChainManager,
)
from referral_ledger.services.referral.code_allocator import (
    ReferralCodeAllocator,
    generate_referral_code,
)
from referral_ledger.utils.exceptions import (
    AllocationExhaustedError,
    ConflictError,
    NotFoundError,
)
from referral_ledger.utils.validation import validate_user_reference


class ProfileRegistrationService(BaseService):
    """Registers new profiles in the referral tree."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize registration service."""
        super().__init__(session)
        self.profile_repo = UserProfileRepository(session)
        self.chain_manager = ReferralChainManager(session)
        self.allocator = ReferralCodeAllocator(session)

    async def register_profile(
        self,
        user_id: str,
        referral_code: str | None = None,
        full_name: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> UserProfile:
        """
        Register a profile, optionally under the owner of referral_code.

        The referrer link is set here once and never changes afterwards.
        A failed registration number allocation does not fail the
        registration; the number can be allocated later.

        Args:
            user_id: External user reference
            referral_code: Referrer's code (case-insensitive)
            full_name: Display name
            phone: Phone number
            email: Email address

        Returns:
            Created UserProfile

        Raises:
            ValidationError: Bad user reference or cyclic referral
            ConflictError: Profile already exists for user_id
            NotFoundError: Unknown referral code
            AllocationExhaustedError: No free referral code
        """
        user_ref = validate_user_reference(user_id)

        if await self.profile_repo.get_by_user_id(user_ref):
            raise ConflictError(f"Profile already exists for user {user_ref}")

        referrer_id = None
        if referral_code and referral_code.strip():
            code = referral_code.strip().upper()
            referrer = await self.profile_repo.get_by_referral_code(code)
            if not referrer:
                raise NotFoundError(f"Referral code {code} not found")
            referrer_id = referrer.id
            await self.chain_manager.ensure_no_cycle(referrer_id)

        profile = await self._create_with_unique_code(
            user_id=user_ref,
            referred_by=referrer_id,
            full_name=full_name,
            phone=phone,
            email=email,
        )

        logger.info(
            "Profile registered",
            extra={
                "user_id": user_ref,
                "profile_id": profile.id,
                "referred_by": referrer_id,
                "referral_code": profile.referral_code,
            },
        )

        profile_id = profile.id
        try:
            await self.allocator.allocate_registration_number(profile_id)
        except AllocationExhaustedError as e:
            # Rollback expired the profile; reloaded below
            logger.warning(
                "Registration number not allocated",
                extra={"profile_id": profile_id, "error": str(e)},
            )

        await self.session.refresh(profile)
        return profile

    async def _create_with_unique_code(self, **data) -> UserProfile:
        """Insert the profile, drawing a new code on each collision."""
        for attempt in range(settings.referral_code_max_attempts):
            try:
                profile = await self.profile_repo.create(
                    referral_code=generate_referral_code(), **data
                )
                await self.commit()
                return profile
            except IntegrityError:
                await self.rollback()
                # Same user registered concurrently
                if await self.profile_repo.get_by_user_id(data["user_id"]):
                    raise ConflictError(
                        f"Profile already exists for user {data['user_id']}"
                    ) from None
                logger.debug(
                    "Referral code collision, retrying",
                    extra={"user_id": data["user_id"], "attempt": attempt + 1},
                )

        raise AllocationExhaustedError(
            f"No free referral code after "
            f"{settings.referral_code_max_attempts} attempts"
        )
