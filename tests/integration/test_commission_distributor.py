"""
Integration tests for multi-level commission distribution.

Runs against a SQLite file database. Covers the happy path chain,
referrer-less users, idempotency, conservation of credited amounts,
the 7-level bound and partial failures.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from referral_ledger.models.enums import TriggerType
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.repositories.referral_commission_repository import (
    ReferralCommissionRepository,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)
from referral_ledger.services.referral.commission_distributor import (
    CommissionDistributor,
)
from referral_ledger.services.referral.statistics import (
    ReferralStatisticsManager,
)
from referral_ledger.utils.exceptions import NotFoundError, ValidationError


async def _balance(session, user_id: str) -> Decimal:
    profile = await UserProfileRepository(session).get_by_user_id(user_id)
    return Decimal(str(profile.available_balance))


class TestDistributionScenarios:
    """End-to-end distribution over small chains."""

    @pytest.mark.asyncio
    async def test_three_level_chain(self, session, make_chain):
        """A <- B <- C <- D, D orders 1000: C +100, B +50, A +30."""
        await make_chain("A", "B", "C", "D")
        distributor = CommissionDistributor(session)

        outcome = await distributor.distribute(
            "D", TriggerType.ORDER_PURCHASE, Decimal("1000"), order_id="ord-1"
        )

        assert outcome.levels_processed == 3
        assert outcome.stopped_reason == "chain-end"
        assert outcome.total_distributed == Decimal("180.00")
        assert await _balance(session, "C") == Decimal("100")
        assert await _balance(session, "B") == Decimal("50")
        assert await _balance(session, "A") == Decimal("30")
        assert await _balance(session, "D") == Decimal("0")

        rows = await ReferralCommissionRepository(session).get_by_trigger(
            "D", TriggerType.ORDER_PURCHASE.value
        )
        assert [r.level for r in rows] == [1, 2, 3]
        assert [Decimal(str(r.commission_rate)) for r in rows] == [
            Decimal("0.10"), Decimal("0.05"), Decimal("0.03"),
        ]
        assert all(r.status == "pending" for r in rows)
        assert all(r.order_id == "ord-1" for r in rows)

    @pytest.mark.asyncio
    async def test_user_without_referrer(self, session, make_profile):
        """Referrer-less user produces no rows and no error."""
        await make_profile(user_id="solo")
        distributor = CommissionDistributor(session)

        outcome = await distributor.distribute(
            "solo", "order_purchase", Decimal("1000")
        )

        assert outcome.levels_processed == 0
        assert outcome.stopped_reason == "no-referrer"
        assert await ReferralCommissionRepository(session).count() == 0

    @pytest.mark.asyncio
    async def test_unknown_trigger_user(self, session):
        """Unknown trigger user raises NotFoundError."""
        distributor = CommissionDistributor(session)

        with pytest.raises(NotFoundError):
            await distributor.distribute(
                "ghost", "order_purchase", Decimal("1000")
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    async def test_non_positive_amount(self, session, make_chain, amount):
        """Non-positive base amounts are rejected before any write."""
        await make_chain("A", "B")
        distributor = CommissionDistributor(session)

        with pytest.raises(ValidationError):
            await distributor.distribute("B", "order_purchase", amount)
        assert await ReferralCommissionRepository(session).count() == 0

    @pytest.mark.asyncio
    async def test_unknown_trigger_type(self, session, make_chain):
        """Unknown trigger types are rejected."""
        await make_chain("A", "B")
        distributor = CommissionDistributor(session)

        with pytest.raises(ValidationError):
            await distributor.distribute("B", "refund", Decimal("100"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0.01"), Decimal("0.049")])
    async def test_amount_below_one_paisa_commission(
        self, session, make_chain, amount
    ):
        """Amounts whose direct commission rounds to zero are rejected."""
        await make_chain("A", "B")
        distributor = CommissionDistributor(session)

        with pytest.raises(ValidationError):
            await distributor.distribute("B", "order_purchase", amount)

        assert await ReferralCommissionRepository(session).count() == 0
        outcome = await distributor.distribute(
            "B", "order_purchase", Decimal("0.05")
        )
        assert outcome.total_distributed == Decimal("0.01")


class TestIdempotency:
    """A trigger is distributed at most once."""

    @pytest.mark.asyncio
    async def test_second_call_is_no_op(self, session, make_chain):
        """Repeating a trigger writes nothing and reports already-processed."""
        await make_chain("A", "B", "C")
        distributor = CommissionDistributor(session)

        first = await distributor.distribute(
            "C", "subscription_activation", Decimal("500")
        )
        second = await distributor.distribute(
            "C", "subscription_activation", Decimal("500")
        )

        assert first.levels_processed == 2
        assert second.levels_processed == 0
        assert second.stopped_reason == "already-processed"
        assert await ReferralCommissionRepository(session).count() == 2
        assert await _balance(session, "B") == Decimal("50")
        assert await _balance(session, "A") == Decimal("25")

    @pytest.mark.asyncio
    async def test_trigger_types_are_independent(self, session, make_chain):
        """Order and activation triggers of one user both pay out."""
        await make_chain("A", "B")
        distributor = CommissionDistributor(session)

        await distributor.distribute("B", "order_purchase", Decimal("100"))
        outcome = await distributor.distribute(
            "B", "subscription_activation", Decimal("100")
        )

        assert outcome.levels_processed == 1
        assert await _balance(session, "A") == Decimal("20")

    @pytest.mark.asyncio
    async def test_duplicate_insert_reported_as_processed(
        self, session, make_chain
    ):
        """A run that loses the race on the unique constraint writes nothing."""
        await make_chain("A", "B", "C")
        distributor = CommissionDistributor(session)
        await distributor.distribute("C", "order_purchase", Decimal("1000"))

        # Simulate a concurrent run that passed the existence check
        distributor.commission_repo.exists_for_trigger = AsyncMock(
            return_value=False
        )
        outcome = await distributor.distribute(
            "C", "order_purchase", Decimal("1000")
        )

        assert outcome.stopped_reason == "already-processed"
        assert outcome.levels_processed == 0
        assert await ReferralCommissionRepository(session).count() == 2
        assert await _balance(session, "B") == Decimal("100")
        assert await _balance(session, "A") == Decimal("50")


class TestConservationAndBounds:
    """Credited balances match commission rows; depth is bounded."""

    @pytest.mark.asyncio
    async def test_nine_deep_chain_pays_seven_levels(
        self, session, make_chain
    ):
        """Only the seven nearest ancestors are paid."""
        names = [f"U{i}" for i in range(10)]
        await make_chain(*names)
        distributor = CommissionDistributor(session)

        outcome = await distributor.distribute(
            "U9", "order_purchase", Decimal("1000")
        )

        assert outcome.levels_processed == 7
        assert outcome.stopped_reason == "max-levels"
        assert outcome.total_distributed == Decimal("220.00")
        assert await _balance(session, "U8") == Decimal("100")
        assert await _balance(session, "U2") == Decimal("5")
        assert await _balance(session, "U1") == Decimal("0")
        assert await _balance(session, "U0") == Decimal("0")

    @pytest.mark.asyncio
    async def test_total_equals_sum_of_rows(self, session, make_chain):
        """Every credited balance equals the sum of its commission rows."""
        profiles = await make_chain("A", "B", "C", "D", "E")
        distributor = CommissionDistributor(session)
        stats = ReferralStatisticsManager(session)

        await distributor.distribute("E", "order_purchase", Decimal("777.77"))
        await distributor.distribute("D", "order_purchase", Decimal("120.10"))
        await distributor.distribute(
            "E", "subscription_activation", Decimal("999")
        )

        for profile in profiles.values():
            report = await stats.reconcile_earnings(profile.id)
            assert report.is_consistent, report

    @pytest.mark.asyncio
    async def test_missing_ancestor_truncates_chain(
        self, session, make_profile
    ):
        """A dangling referrer link ends the walk without an error."""
        parent = await make_profile(user_id="P")
        child = await make_profile(user_id="C", referrer=parent)
        # Point P at a profile that does not exist
        await session.execute(
            update(UserProfile)
            .where(UserProfile.id == parent.id)
            .values(referred_by=99999)
        )
        await session.commit()

        outcome = await CommissionDistributor(session).distribute(
            child.user_id, "order_purchase", Decimal("1000")
        )

        assert outcome.levels_processed == 1
        assert outcome.stopped_reason == "chain-end"
        assert await _balance(session, "P") == Decimal("100")


class TestPartialFailure:
    """A failing level stops the walk and keeps earlier levels."""

    @pytest.mark.asyncio
    async def test_write_error_at_second_level(self, session, make_chain):
        """Level 1 stays committed, level 2 is rolled back."""
        await make_chain("A", "B", "C")
        distributor = CommissionDistributor(session)
        real_credit = distributor.profile_repo.credit_earnings
        calls = 0

        async def flaky_credit(profile_id, amount):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise OperationalError(
                    "UPDATE user_profiles", {}, Exception("disk I/O error")
                )
            return await real_credit(profile_id, amount)

        distributor.profile_repo.credit_earnings = flaky_credit

        outcome = await distributor.distribute(
            "C", "order_purchase", Decimal("1000")
        )

        assert outcome.is_partial
        assert outcome.stopped_reason == "error"
        assert outcome.levels_processed == 1
        assert outcome.total_distributed == Decimal("100.00")
        assert "disk I/O error" in outcome.error_message
        assert await _balance(session, "B") == Decimal("100")
        assert await _balance(session, "A") == Decimal("0")

        rows = await ReferralCommissionRepository(session).get_by_trigger(
            "C", "order_purchase"
        )
        assert [r.level for r in rows] == [1]
