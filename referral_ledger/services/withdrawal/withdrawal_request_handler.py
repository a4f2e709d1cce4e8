"""
Withdrawal request handling module.

Handles the creation of withdrawal requests: validation, holding the
amount against available balance and inserting the pending request, all
in one transaction.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.config.settings import settings
from referral_ledger.models.enums import WithdrawalStatus
from referral_ledger.models.withdrawal_request import WithdrawalRequest
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.repositories.withdrawal_request_repository import (
    WithdrawalRequestRepository,
)
from referral_ledger.services.base_service import BaseService, transaction
from referral_ledger.utils.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from referral_ledger.utils.validation import (
    validate_money_amount,
    validate_upi_id,
    validate_user_reference,
)


class WithdrawalRequestHandler(BaseService):
    """Handles withdrawal request creation and validation."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize withdrawal request handler.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.profile_repo = UserProfileRepository(session)
        self.withdrawal_repo = WithdrawalRequestRepository(session)

    @transaction
    async def create_withdrawal(
        self,
        user_id: str,
        amount: Decimal | int | str,
        destination: str,
    ) -> WithdrawalRequest:
        """
        Request a withdrawal and hold the amount.

        The hold is a conditional debit of available_balance, so two
        concurrent requests can never overdraw the profile.

        Args:
            user_id: External user reference
            amount: Withdrawal amount
            destination: UPI id

        Returns:
            Pending WithdrawalRequest

        Raises:
            ValidationError: Bad amount, finer than paise, below minimum
                or bad UPI id
            NotFoundError: Profile does not exist
            InsufficientBalanceError: Amount exceeds available balance
        """
        user_ref = validate_user_reference(user_id)
        amount = validate_money_amount(amount)
        if amount < settings.min_withdrawal_amount:
            raise ValidationError(
                f"Minimum withdrawal amount is {settings.min_withdrawal_amount}"
            )
        destination = validate_upi_id(destination)

        profile = await self.profile_repo.get_by_user_id(user_ref)
        if not profile:
            raise NotFoundError(f"Profile not found for user {user_ref}")

        if not await self.profile_repo.hold_available_balance(
            user_ref, amount
        ):
            # Re-read: the snapshot above may predate a concurrent hold
            profile = await self.profile_repo.get_by_user_id(user_ref)
            raise InsufficientBalanceError(
                available=Decimal(str(profile.available_balance)),
                requested=amount,
            )

        request = await self.withdrawal_repo.create(
            user_id=user_ref,
            amount=amount,
            destination=destination,
            status=WithdrawalStatus.PENDING.value,
        )

        logger.info(
            "Withdrawal requested",
            extra={
                "withdrawal_id": request.id,
                "user_id": user_ref,
                "amount": str(amount),
            },
        )
        return request
