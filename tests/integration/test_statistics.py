"""Integration tests for referral statistics and the downstream tree."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import update

from referral_ledger.config.settings import settings
from referral_ledger.models.user_profile import UserProfile
from referral_ledger.services.referral.chain_manager import (
    ReferralChainManager,
)
from referral_ledger.services.referral.commission_distributor import (
    CommissionDistributor,
)
from referral_ledger.services.referral.statistics import (
    ReferralStatisticsManager,
)
from referral_ledger.utils.exceptions import NotFoundError


BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


class TestStats:
    """Test balance summaries."""

    @pytest.mark.asyncio
    async def test_stats_after_distribution(self, session, make_chain, make_profile):
        """Stats reflect credits and direct referral count only."""
        profiles = await make_chain("A", "B", "C")
        await make_profile(user_id="B2", referrer=profiles["A"])
        await CommissionDistributor(session).distribute(
            "C", "order_purchase", Decimal("1000")
        )

        stats = await ReferralStatisticsManager(session).get_stats("A")

        assert stats.total_earnings == Decimal("50")
        assert stats.available_balance == Decimal("50")
        assert stats.withdrawn_amount == Decimal("0")
        assert stats.referral_count == 2
        assert stats.referral_code == profiles["A"].referral_code
        assert stats.referral_link == (
            f"{settings.site_url}/register?ref={profiles['A'].referral_code}"
        )

    @pytest.mark.asyncio
    async def test_unknown_user(self, session):
        """Stats for unknown users raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await ReferralStatisticsManager(session).get_stats("ghost")


class TestReferredUsers:
    """Test breadth-first downstream listing."""

    @pytest.mark.asyncio
    async def test_levels_and_order(self, session, make_profile):
        """Users are grouped by level, newest first within a level."""
        root = await make_profile(user_id="root")
        old = await make_profile(
            user_id="old", referrer=root, full_name="Old",
            created_at=BASE_TIME,
        )
        new = await make_profile(
            user_id="new", referrer=root, full_name="New",
            created_at=BASE_TIME + timedelta(days=2),
        )
        grandchild = await make_profile(
            user_id="grandchild", referrer=old,
            created_at=BASE_TIME + timedelta(days=5),
        )
        great = await make_profile(
            user_id="great", referrer=grandchild,
            created_at=BASE_TIME + timedelta(days=1),
        )

        users = await ReferralStatisticsManager(
            session
        ).get_all_level_referred_users("root")

        assert [(u.id, u.level) for u in users] == [
            (new.id, 1),
            (old.id, 1),
            (grandchild.id, 2),
            (great.id, 3),
        ]
        assert users[0].full_name == "New"

    @pytest.mark.asyncio
    async def test_max_levels_limit(self, session, make_chain):
        """Depth limit cuts the tree."""
        await make_chain("L0", "L1", "L2", "L3", "L4")
        stats = ReferralStatisticsManager(session)

        users = await stats.get_all_level_referred_users("L0", max_levels=2)

        assert [u.level for u in users] == [1, 2]

    @pytest.mark.asyncio
    async def test_default_depth_is_seven(self, session, make_chain):
        """Default listing stops after seven levels."""
        await make_chain(*[f"N{i}" for i in range(10)])

        users = await ReferralStatisticsManager(
            session
        ).get_all_level_referred_users("N0")

        assert [u.level for u in users] == [1, 2, 3, 4, 5, 6, 7]

    @pytest.mark.asyncio
    async def test_leaf_has_no_referrals(self, session, make_chain):
        """Users without referrals get an empty list and zero counts."""
        await make_chain("A", "B")
        stats = ReferralStatisticsManager(session)

        assert await stats.get_all_level_referred_users("B") == []
        counts = await stats.count_referrals_by_level("B")
        assert counts == dict.fromkeys(range(1, 8), 0)

    @pytest.mark.asyncio
    async def test_direct_and_counts(self, session, make_profile):
        """Direct listing and per-level counts agree with the tree."""
        root = await make_profile(user_id="root")
        a = await make_profile(user_id="a", referrer=root)
        b = await make_profile(user_id="b", referrer=root)
        await make_profile(user_id="a1", referrer=a)
        stats = ReferralStatisticsManager(session)

        direct = await stats.get_referred_users("root")
        counts = await stats.count_referrals_by_level("root")

        assert {u.id for u in direct} == {a.id, b.id}
        assert counts[1] == 2
        assert counts[2] == 1
        assert counts[3] == 0


class TestCommissionHistory:
    """Test commission listings and reconciliation."""

    @pytest.mark.asyncio
    async def test_by_level(self, session, make_chain, make_profile):
        """Commissions are grouped by level."""
        profiles = await make_chain("A", "B", "C")
        await make_profile(user_id="B2", referrer=profiles["A"])
        distributor = CommissionDistributor(session)
        await distributor.distribute("C", "order_purchase", Decimal("1000"))
        await distributor.distribute("B2", "order_purchase", Decimal("200"))
        stats = ReferralStatisticsManager(session)

        commissions = await stats.get_commissions("A")
        by_level = await stats.get_commissions_by_level("A")

        assert len(commissions) == 2
        assert list(by_level) == [1, 2]
        assert by_level[1][0].commission_amount == Decimal("20")
        assert by_level[2][0].commission_amount == Decimal("50")

    @pytest.mark.asyncio
    async def test_reconcile_detects_drift(self, session, make_chain):
        """Balances changed outside the distributor show up as drift."""
        profiles = await make_chain("A", "B")
        await CommissionDistributor(session).distribute(
            "B", "order_purchase", Decimal("1000")
        )
        stats = ReferralStatisticsManager(session)

        report = await stats.reconcile_earnings(profiles["A"].id)
        assert report.is_consistent
        assert report.computed == Decimal("100.00")

        await session.execute(
            update(UserProfile)
            .where(UserProfile.id == profiles["A"].id)
            .values(total_earnings=Decimal("150"))
        )
        await session.commit()

        drift = await stats.reconcile_earnings(profiles["A"].id)
        assert not drift.is_consistent
        assert drift.recorded == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_reconcile_unknown_profile(self, session):
        """Unknown profiles raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await ReferralStatisticsManager(session).reconcile_earnings(9999)


class TestReferrerInfo:
    """Test direct referrer lookup."""

    @pytest.mark.asyncio
    async def test_referrer_info(self, session, make_profile):
        """Referred users see their direct referrer's details."""
        root = await make_profile(
            user_id="root", full_name="Asha", phone="+911234567890"
        )
        await make_profile(user_id="child", referrer=root)
        chain = ReferralChainManager(session)

        info = await chain.get_referrer_info("child")

        assert info.id == root.id
        assert info.full_name == "Asha"
        assert info.referral_code == root.referral_code
        assert info.phone == "+911234567890"
        assert await chain.get_referrer_info("root") is None
        assert await chain.get_referrer_info("ghost") is None

    @pytest.mark.asyncio
    async def test_ancestor_chain_bounds(self, session, make_chain):
        """The walk yields levels 1..max_levels and nothing for zero."""
        profiles = await make_chain("A", "B", "C", "D")
        chain = ReferralChainManager(session)

        walked = [
            pair async for pair in chain.ancestor_chain(profiles["D"].id, 2)
        ]
        assert walked == [(profiles["C"].id, 1), (profiles["B"].id, 2)]
        assert [
            pair async for pair in chain.ancestor_chain(profiles["D"].id, 0)
        ] == []
        assert await chain.get_referrer(profiles["A"].id) is None
