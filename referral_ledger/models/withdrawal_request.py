"""
WithdrawalRequest model.

User request to move available balance out of the system. The amount is
held (debited from available_balance) when the request is created.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from referral_ledger.models.base import Base
from referral_ledger.models.enums import WithdrawalStatus
from referral_ledger.models.types import MoneyType


class WithdrawalRequest(Base):
    """Withdrawal request - pending, approved or rejected."""

    __tablename__ = "withdrawal_requests"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_withdrawal_amount_positive'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # External user reference (same as UserProfile.user_id)
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # UPI id the money is sent to
    destination: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=WithdrawalStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed_by: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    @property
    def is_pending(self) -> bool:
        """Check if request still awaits an admin decision."""
        return self.status == WithdrawalStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WithdrawalRequest(id={self.id}, user_id={self.user_id!r}, "
            f"amount={self.amount}, status={self.status})>"
        )
