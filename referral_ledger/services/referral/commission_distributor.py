"""
Referral commission distributor.

Walks the referrer chain of the user who triggered an order purchase or a
subscription activation and credits every ancestor with its level's share.
Each level (commission row + balance credit) is committed on its own; a
failing level stops the walk and leaves earlier levels in place.
"""

from contextlib import aclosing
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.enums import CommissionStatus, TriggerType
from referral_ledger.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.referral.chain_manager import (
    ReferralChainManager,
)
from referral_ledger.services.referral.config import (
    REFERRAL_DEPTH,
    calculate_level_commission,
    get_commission_rate,
)
from referral_ledger.utils.exceptions import NotFoundError, ValidationError
from referral_ledger.utils.validation import (
    validate_positive_amount,
    validate_trigger_type,
    validate_user_reference,
)


StopReason = Literal[
    "chain-end",
    "max-levels",
    "error",
    "already-processed",
    "no-referrer",
]


@dataclass
class DistributionOutcome:
    """Result of a commission distribution run."""

    levels_processed: int
    stopped_reason: StopReason
    total_distributed: Decimal = Decimal("0")
    error_message: str | None = None

    @property
    def is_partial(self) -> bool:
        """True when a write error stopped the walk early."""
        return self.stopped_reason == "error"


class CommissionDistributor:
    """
    Distributes multi-level referral commissions for trigger events.

    Idempotent per (trigger_user_id, trigger_type): a trigger that already
    has commission rows is not processed again. The unique constraint on
    (trigger_user_id, trigger_type, level) closes the window between the
    check and the first insert.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize commission distributor.

        Args:
            session: Async database session
        """
        self.session = session
        self.profile_repo = UserProfileRepository(session)
        self.commission_repo = ReferralCommissionRepository(session)
        self.chain_manager = ReferralChainManager(session)

    async def distribute(
        self,
        trigger_user_id: str,
        trigger_type: TriggerType | str,
        base_amount: Decimal | int | str,
        order_id: str | None = None,
    ) -> DistributionOutcome:
        """
        Distribute commissions up the trigger user's referrer chain.

        Args:
            trigger_user_id: External user reference of the buyer/subscriber
            trigger_type: order_purchase or subscription_activation
            base_amount: Order total or subscription amount (> 0)
            order_id: Source order reference, if any

        Returns:
            DistributionOutcome with levels processed and why it stopped

        Raises:
            ValidationError: Invalid amount, trigger type or user reference,
                or an amount whose direct commission rounds to zero
            NotFoundError: Trigger user has no profile
        """
        user_ref = validate_user_reference(trigger_user_id)
        trigger = validate_trigger_type(trigger_type)
        amount = validate_positive_amount(base_amount)
        if calculate_level_commission(amount, 1) <= 0:
            raise ValidationError(
                f"Base amount {amount} is too small to earn a commission"
            )

        profile = await self.profile_repo.get_by_user_id(user_ref)
        if not profile:
            raise NotFoundError(f"Profile not found for user {user_ref}")

        if profile.referred_by is None:
            logger.debug(
                "No referrer found for user",
                extra={"user_id": user_ref, "trigger_type": trigger.value},
            )
            return DistributionOutcome(
                levels_processed=0, stopped_reason="no-referrer"
            )

        if await self.commission_repo.exists_for_trigger(
            user_ref, trigger.value
        ):
            logger.info(
                "Commissions already distributed for trigger",
                extra={"user_id": user_ref, "trigger_type": trigger.value},
            )
            return DistributionOutcome(
                levels_processed=0, stopped_reason="already-processed"
            )

        levels_processed = 0
        total = Decimal("0")
        stopped_reason: StopReason = "chain-end"
        error_message = None

        chain = self.chain_manager.ancestor_chain(profile.id, REFERRAL_DEPTH)
        async with aclosing(chain):
            async for referrer_id, level in chain:
                commission = calculate_level_commission(amount, level)
                try:
                    credited = await self._credit_level(
                        referrer_id=referrer_id,
                        referee_id=profile.id,
                        level=level,
                        commission=commission,
                        trigger_user_id=user_ref,
                        trigger_type=trigger,
                        order_id=order_id,
                    )
                    if not credited:
                        await self.session.rollback()
                        stopped_reason = "error"
                        error_message = (
                            f"Referrer profile {referrer_id} not found "
                            f"at level {level}"
                        )
                        break
                    await self.session.commit()
                except IntegrityError as e:
                    await self.session.rollback()
                    if await self.commission_repo.exists(
                        trigger_user_id=user_ref,
                        trigger_type=trigger.value,
                        level=level,
                    ):
                        # Concurrent run already wrote this level
                        stopped_reason = "already-processed"
                    else:
                        stopped_reason = "error"
                        error_message = str(e)
                    break
                except SQLAlchemyError as e:
                    await self.session.rollback()
                    stopped_reason = "error"
                    error_message = str(e)
                    break

                levels_processed += 1
                total += commission

        if stopped_reason == "chain-end" and levels_processed == REFERRAL_DEPTH:
            stopped_reason = "max-levels"

        outcome = DistributionOutcome(
            levels_processed=levels_processed,
            stopped_reason=stopped_reason,
            total_distributed=total,
            error_message=error_message,
        )

        if outcome.is_partial:
            logger.error(
                "Commission distribution stopped early",
                extra={
                    "user_id": user_ref,
                    "trigger_type": trigger.value,
                    "order_id": order_id,
                    "levels_processed": levels_processed,
                    "error": error_message,
                },
            )
        else:
            logger.info(
                "Referral commissions distributed",
                extra={
                    "user_id": user_ref,
                    "trigger_type": trigger.value,
                    "order_id": order_id,
                    "levels_processed": levels_processed,
                    "total_distributed": str(total),
                    "stopped_reason": stopped_reason,
                },
            )

        return outcome

    async def _credit_level(
        self,
        referrer_id: int,
        referee_id: int,
        level: int,
        commission: Decimal,
        trigger_user_id: str,
        trigger_type: TriggerType,
        order_id: str | None,
    ) -> bool:
        """
        Write one commission row and credit the referrer's balances.

        Both statements run in the current transaction; the caller commits
        or rolls back.

        Returns:
            False if the referrer row no longer exists
        """
        await self.commission_repo.create(
            referrer_id=referrer_id,
            referee_id=referee_id,
            order_id=order_id,
            level=level,
            commission_rate=get_commission_rate(level),
            commission_amount=commission,
            status=CommissionStatus.PENDING.value,
            trigger_type=trigger_type.value,
            trigger_user_id=trigger_user_id,
        )

        if not await self.profile_repo.credit_earnings(
            referrer_id, commission
        ):
            return False

        logger.debug(
            "Referral commission credited",
            extra={
                "referrer_id": referrer_id,
                "referee_id": referee_id,
                "level": level,
                "rate": str(get_commission_rate(level)),
                "amount": str(commission),
                "trigger_type": trigger_type.value,
            },
        )
        return True
