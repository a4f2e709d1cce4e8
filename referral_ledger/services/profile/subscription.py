"""
Subscription status module.

Stores a profile's subscription status and, on activation, pays
subscription commissions up the referrer chain.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.enums import SubscriptionStatus, TriggerType
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.base_service import BaseService
from referral_ledger.services.referral.commission_distributor import (
    CommissionDistributor,
    DistributionOutcome,
)
from referral_ledger.utils.exceptions import (
    LedgerError,
    NotFoundError,
    ValidationError,
)
from referral_ledger.utils.validation import (
    validate_positive_amount,
    validate_user_reference,
)


@dataclass
class SubscriptionUpdate:
    """Updated profile plus the activation distribution, if one ran."""

    profile: UserProfile
    distribution: DistributionOutcome | None = None


class SubscriptionService(BaseService):
    """Updates subscription status and triggers activation commissions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize subscription service."""
        super().__init__(session)
        self.profile_repo = UserProfileRepository(session)
        self.commission_repo = ReferralCommissionRepository(session)
        self.distributor = CommissionDistributor(session)

    async def update_subscription_status(
        self,
        user_id: str,
        status: SubscriptionStatus | str,
        activation_amount: Decimal | int | str | None = None,
    ) -> SubscriptionUpdate:
        """
        Set subscription status; distribute commissions on activation.

        Distribution runs when the status becomes active with an
        activation_amount and the user was inactive before or has no
        activation commissions yet. A failed distribution is logged and
        does not undo the status change.

        Args:
            user_id: External user reference
            status: active or inactive
            activation_amount: Subscription price used as commission base

        Returns:
            SubscriptionUpdate

        Raises:
            ValidationError: Bad status, amount or user reference
            NotFoundError: Profile does not exist
        """
        user_ref = validate_user_reference(user_id)
        try:
            new_status = SubscriptionStatus(status)
        except ValueError:
            raise ValidationError(
                f"Unknown subscription status: {status!r}"
            ) from None
        amount = (
            validate_positive_amount(activation_amount)
            if activation_amount is not None
            else None
        )

        profile = await self.profile_repo.get_by_user_id(
            user_ref, for_update=True
        )
        if not profile:
            raise NotFoundError(f"Profile not found for user {user_ref}")

        was_active = profile.is_subscribed
        profile.subscription_status = new_status.value
        await self.commit()

        logger.info(
            "Subscription status updated",
            extra={
                "user_id": user_ref,
                "status": new_status.value,
                "was_active": was_active,
            },
        )

        update = SubscriptionUpdate(profile=profile)
        if new_status != SubscriptionStatus.ACTIVE or amount is None:
            return update

        already_paid = await self.commission_repo.exists_for_trigger(
            user_ref, TriggerType.SUBSCRIPTION_ACTIVATION.value
        )
        if was_active and already_paid:
            return update

        try:
            update.distribution = await self.distributor.distribute(
                user_ref, TriggerType.SUBSCRIPTION_ACTIVATION, amount
            )
        except (LedgerError, SQLAlchemyError) as e:
            await self.rollback()
            logger.error(
                "Activation commission distribution failed",
                extra={"user_id": user_ref, "error": str(e)},
            )

        # A rollback inside or after the distribution expires the profile
        await self.session.refresh(profile)
        return update
