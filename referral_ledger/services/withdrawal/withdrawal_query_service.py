"""
Withdrawal query service module.

Read-only access to withdrawal history.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.enums import WithdrawalStatus
from referral_ledger.models.withdrawal_request import WithdrawalRequest
from referral_ledger.repositories.withdrawal_request_repository import (
    WithdrawalRequestRepository,
)
from referral_ledger.utils.validation import (
    validate_user_reference,
    validate_withdrawal_status,
)


class WithdrawalQueryService:
    """Handles withdrawal queries and history."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal query service."""
        self.session = session
        self.withdrawal_repo = WithdrawalRequestRepository(session)

    async def get_user_withdrawals(
        self, user_id: str
    ) -> list[WithdrawalRequest]:
        """
        Get user's withdrawal history, newest first.

        Args:
            user_id: External user reference

        Returns:
            List of withdrawal requests
        """
        return await self.withdrawal_repo.get_by_user(
            validate_user_reference(user_id)
        )

    async def get_all_withdrawals(
        self, status: WithdrawalStatus | str | None = None
    ) -> list[WithdrawalRequest]:
        """
        Get all withdrawal requests for the admin listing.

        Args:
            status: Optional status filter

        Returns:
            List of withdrawal requests, newest first
        """
        if status is not None:
            status = validate_withdrawal_status(status)
        return await self.withdrawal_repo.get_all(status)

    async def get_withdrawal(
        self, request_id: int
    ) -> WithdrawalRequest | None:
        """Get a single withdrawal request by ID."""
        return await self.withdrawal_repo.get_by_id(request_id)
