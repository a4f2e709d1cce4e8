"""
UserProfile model.

Referral and earnings record of a user, distinct from the
authentication identity (referenced by user_id).
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_ledger.models.base import Base
from referral_ledger.models.enums import SubscriptionStatus
from referral_ledger.models.types import MoneyType


class UserProfile(Base):
    """User profile - referral tree node and balance holder."""

    __tablename__ = "user_profiles"
    __table_args__ = (
        CheckConstraint(
            'available_balance >= 0',
            name='check_profile_available_balance_non_negative'
        ),
        CheckConstraint(
            'total_earnings >= 0',
            name='check_profile_total_earnings_non_negative'
        ),
        CheckConstraint(
            'withdrawn_amount >= 0',
            name='check_profile_withdrawn_amount_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # External (auth) user reference
    user_id: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )

    # Descriptive fields
    full_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Referral tree (set once at registration)
    referred_by: Mapped[int | None] = mapped_column(
        ForeignKey("user_profiles.id"),
        nullable=True,
        index=True
    )
    referral_code: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    registration_number: Mapped[str | None] = mapped_column(
        String(20), unique=True, nullable=True
    )

    # Balances
    total_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    available_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    withdrawn_amount: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    subscription_status: Mapped[str] = mapped_column(
        String(20),
        default=SubscriptionStatus.INACTIVE.value,
        nullable=False,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    @property
    def has_referrer(self) -> bool:
        """Check if profile was referred by someone."""
        return self.referred_by is not None

    @property
    def is_subscribed(self) -> bool:
        """Check if subscription is active."""
        return self.subscription_status == SubscriptionStatus.ACTIVE.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<UserProfile(id={self.id}, user_id={self.user_id!r}, "
            f"referred_by={self.referred_by}, "
            f"available_balance={self.available_balance})>"
        )
