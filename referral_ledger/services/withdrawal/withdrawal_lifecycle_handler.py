"""
Withdrawal lifecycle handling module.

Handles admin approval and rejection of pending withdrawal requests.
Both are terminal: a request leaves pending exactly once.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.enums import WithdrawalStatus
from referral_ledger.models.withdrawal_request import WithdrawalRequest
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.repositories.withdrawal_request_repository import (
    WithdrawalRequestRepository,
)
from referral_ledger.services.base_service import BaseService, transaction
from referral_ledger.utils.exceptions import ConflictError, NotFoundError


class WithdrawalLifecycleHandler(BaseService):
    """Handles withdrawal lifecycle operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize withdrawal lifecycle handler.

        Args:
            session: Database session
        """
        super().__init__(session)
        self.profile_repo = UserProfileRepository(session)
        self.withdrawal_repo = WithdrawalRequestRepository(session)

    @transaction
    async def approve(
        self,
        request_id: int,
        admin_id: str,
        notes: str | None = None,
    ) -> WithdrawalRequest:
        """
        Approve a pending withdrawal and settle the held amount.

        Args:
            request_id: Withdrawal request ID
            admin_id: Admin reference
            notes: Optional admin notes

        Returns:
            Approved WithdrawalRequest

        Raises:
            NotFoundError: Request does not exist
            ConflictError: Request is not pending
        """
        request = await self._close(
            request_id, WithdrawalStatus.APPROVED, admin_id, notes
        )

        if not await self.profile_repo.add_withdrawn_amount(
            request.user_id, Decimal(str(request.amount))
        ):
            raise NotFoundError(
                f"Profile not found for user {request.user_id}"
            )

        logger.info(
            "Withdrawal approved",
            extra={
                "withdrawal_id": request_id,
                "user_id": request.user_id,
                "amount": str(request.amount),
                "admin_id": admin_id,
            },
        )
        return request

    @transaction
    async def reject(
        self,
        request_id: int,
        admin_id: str,
        notes: str | None = None,
    ) -> WithdrawalRequest:
        """
        Reject a pending withdrawal and refund the held amount.

        Args:
            request_id: Withdrawal request ID
            admin_id: Admin reference
            notes: Optional admin notes (rejection reason)

        Returns:
            Rejected WithdrawalRequest

        Raises:
            NotFoundError: Request does not exist
            ConflictError: Request is not pending
        """
        request = await self._close(
            request_id, WithdrawalStatus.REJECTED, admin_id, notes
        )

        if not await self.profile_repo.refund_available_balance(
            request.user_id, Decimal(str(request.amount))
        ):
            raise NotFoundError(
                f"Profile not found for user {request.user_id}"
            )

        logger.info(
            "Withdrawal rejected and balance returned",
            extra={
                "withdrawal_id": request_id,
                "user_id": request.user_id,
                "amount": str(request.amount),
                "admin_id": admin_id,
            },
        )
        return request

    async def _close(
        self,
        request_id: int,
        status: WithdrawalStatus,
        admin_id: str,
        notes: str | None,
    ) -> WithdrawalRequest:
        """Lock the request and move it from pending to status."""
        request = await self.withdrawal_repo.get_for_update(request_id)
        if not request:
            raise NotFoundError(f"Withdrawal request {request_id} not found")
        if not request.is_pending:
            raise ConflictError(
                f"Withdrawal request {request_id} is already {request.status}"
            )

        # Conditional on pending: a concurrent approve/reject loses here
        if not await self.withdrawal_repo.close_pending(
            request_id, status, admin_id, notes
        ):
            raise ConflictError(
                f"Withdrawal request {request_id} is no longer pending"
            )

        await self.session.refresh(request)
        return request
