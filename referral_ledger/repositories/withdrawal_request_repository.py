"""
Withdrawal request repository.

Data access layer for WithdrawalRequest model.
"""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from referral_ledger.models.enums import WithdrawalStatus
from referral_ledger.models.withdrawal_request import WithdrawalRequest
from referral_ledger.repositories.base import BaseRepository


class WithdrawalRequestRepository(BaseRepository[WithdrawalRequest]):
    """Withdrawal request repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal request repository."""
        super().__init__(WithdrawalRequest, session)

    async def get_for_update(
        self, request_id: int
    ) -> WithdrawalRequest | None:
        """
        Get request with row lock and fresh column values.

        Args:
            request_id: Withdrawal request ID

        Returns:
            WithdrawalRequest or None
        """
        stmt = (
            select(WithdrawalRequest)
            .where(WithdrawalRequest.id == request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user(
        self, user_id: str
    ) -> list[WithdrawalRequest]:
        """
        Get user's requests, newest first.

        Args:
            user_id: External user reference

        Returns:
            List of withdrawal requests
        """
        stmt = (
            select(WithdrawalRequest)
            .where(WithdrawalRequest.user_id == user_id)
            .order_by(
                WithdrawalRequest.requested_at.desc(),
                WithdrawalRequest.id.desc(),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_all(
        self, status: WithdrawalStatus | None = None
    ) -> list[WithdrawalRequest]:
        """
        Get all requests (admin), newest first.

        Args:
            status: Optional status filter

        Returns:
            List of withdrawal requests
        """
        stmt = select(WithdrawalRequest)
        if status is not None:
            stmt = stmt.where(WithdrawalRequest.status == status.value)
        stmt = stmt.order_by(
            WithdrawalRequest.requested_at.desc(),
            WithdrawalRequest.id.desc(),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def close_pending(
        self,
        request_id: int,
        status: WithdrawalStatus,
        processed_by: str,
        admin_notes: str | None,
    ) -> bool:
        """
        Move a pending request to a terminal status.

        Conditional on status = pending, so only one concurrent
        approve/reject can win.

        Args:
            request_id: Withdrawal request ID
            status: APPROVED or REJECTED
            processed_by: Admin reference
            admin_notes: Optional notes

        Returns:
            True if the request was still pending and got updated
        """
        stmt = (
            update(WithdrawalRequest)
            .where(
                WithdrawalRequest.id == request_id,
                WithdrawalRequest.status == WithdrawalStatus.PENDING.value,
            )
            .values(
                status=status.value,
                processed_by=processed_by,
                admin_notes=admin_notes,
                processed_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
