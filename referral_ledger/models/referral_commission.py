"""
ReferralCommission model.

One row per (trigger user, trigger type, level) commission payout.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_ledger.models.base import Base
from referral_ledger.models.enums import CommissionStatus
from referral_ledger.models.types import MoneyType, RateType


class ReferralCommission(Base):
    """
    ReferralCommission entity.

    Attributes:
        id: Primary key
        referrer_id: Profile that receives the commission
        referee_id: Profile of the user who triggered it
        order_id: Source order (None for subscription activations)
        level: Position in the referrer chain (1 = direct referrer)
        commission_rate: Rate applied to the base amount
        commission_amount: Credited amount
        status: pending or paid
        trigger_type: order_purchase or subscription_activation
        trigger_user_id: External user reference of the trigger user
        created_at: Creation timestamp
    """

    __tablename__ = "referral_commissions"
    __table_args__ = (
        UniqueConstraint(
            "trigger_user_id", "trigger_type", "level",
            name="uq_commission_trigger_level",
        ),
        CheckConstraint(
            "level >= 1 AND level <= 7",
            name="check_commission_level_range"
        ),
        CheckConstraint(
            "commission_amount >= 0",
            name="check_commission_amount_non_negative"
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    referrer_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id"), nullable=False, index=True
    )
    referee_id: Mapped[int] = mapped_column(
        ForeignKey("user_profiles.id"), nullable=False, index=True
    )
    order_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(
        RateType, nullable=False
    )
    commission_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=CommissionStatus.PENDING.value,
        nullable=False,
    )

    trigger_type: Mapped[str] = mapped_column(String(32), nullable=False)
    trigger_user_id: Mapped[str] = mapped_column(
        String(64), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False
    )

    @property
    def is_pending(self) -> bool:
        """Check if commission is pending payout."""
        return self.status == CommissionStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ReferralCommission(id={self.id}, "
            f"referrer_id={self.referrer_id}, "
            f"level={self.level}, "
            f"amount={self.commission_amount})"
        )


# Composite indexes
Index(
    "idx_commission_referrer_created",
    ReferralCommission.referrer_id,
    ReferralCommission.created_at,
)
