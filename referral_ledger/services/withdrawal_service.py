"""
Withdrawal service - Main service facade.

Delegates to the specialized withdrawal modules:
- withdrawal/withdrawal_request_handler: Request creation and balance hold
- withdrawal/withdrawal_lifecycle_handler: Approval and rejection
- withdrawal/withdrawal_query_service: Queries and history
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.config.settings import settings
from referral_ledger.models.enums import WithdrawalStatus
from referral_ledger.models.withdrawal_request import WithdrawalRequest
from referral_ledger.services.base_service import BaseService
from referral_ledger.services.withdrawal.withdrawal_lifecycle_handler import (
    WithdrawalLifecycleHandler,
)
from referral_ledger.services.withdrawal.withdrawal_query_service import (
    WithdrawalQueryService,
)
from referral_ledger.services.withdrawal.withdrawal_request_handler import (
    WithdrawalRequestHandler,
)


class WithdrawalService(BaseService):
    """
    Withdrawal service for managing withdrawal requests.

    Facade over the request, lifecycle and query components; all of them
    share the caller's session.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal service and all sub-components."""
        super().__init__(session)

        self.request_handler = WithdrawalRequestHandler(session)
        self.lifecycle_handler = WithdrawalLifecycleHandler(session)
        self.query_service = WithdrawalQueryService(session)

    # ========================================================================
    # REQUEST HANDLING (delegates to WithdrawalRequestHandler)
    # ========================================================================

    def get_min_withdrawal_amount(self) -> Decimal:
        """Get configured minimum withdrawal amount."""
        return settings.min_withdrawal_amount

    async def create_withdrawal(
        self,
        user_id: str,
        amount: Decimal | int | str,
        destination: str,
    ) -> WithdrawalRequest:
        """
        Request withdrawal and hold the amount.

        Args:
            user_id: External user reference
            amount: Withdrawal amount
            destination: UPI id

        Returns:
            Pending WithdrawalRequest
        """
        return await self.request_handler.create_withdrawal(
            user_id, amount, destination
        )

    # ========================================================================
    # LIFECYCLE MANAGEMENT (delegates to WithdrawalLifecycleHandler)
    # ========================================================================

    async def approve(
        self, request_id: int, admin_id: str, notes: str | None = None
    ) -> WithdrawalRequest:
        """Approve a pending withdrawal (admin only)."""
        return await self.lifecycle_handler.approve(
            request_id, admin_id, notes
        )

    async def reject(
        self, request_id: int, admin_id: str, notes: str | None = None
    ) -> WithdrawalRequest:
        """Reject a pending withdrawal and refund it (admin only)."""
        return await self.lifecycle_handler.reject(
            request_id, admin_id, notes
        )

    # ========================================================================
    # QUERIES (delegates to WithdrawalQueryService)
    # ========================================================================

    async def get_user_withdrawals(
        self, user_id: str
    ) -> list[WithdrawalRequest]:
        """Get user's withdrawal history, newest first."""
        return await self.query_service.get_user_withdrawals(user_id)

    async def get_all_withdrawals(
        self, status: WithdrawalStatus | str | None = None
    ) -> list[WithdrawalRequest]:
        """Get all withdrawal requests, optionally filtered by status."""
        return await self.query_service.get_all_withdrawals(status)

    async def get_withdrawal(
        self, request_id: int
    ) -> WithdrawalRequest | None:
        """Get withdrawal request by ID."""
        return await self.query_service.get_withdrawal(request_id)
