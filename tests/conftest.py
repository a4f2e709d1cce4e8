"""Pytest configuration and shared fixtures for all tests."""

import itertools
import os
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

# Minimal environment before settings are imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_ledger.db")
os.environ.setdefault("SITE_URL", "https://example.test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
import pytest_asyncio

from referral_ledger.database import (
    create_engine,
    create_session_maker,
    init_models,
)
from referral_ledger.repositories.user_profile_repository import (
    UserProfileRepository,
)


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with all tables created."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session factory bound to the test engine."""
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    """Database session for a single test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_profile(session):
    """
    Factory for committed profiles.

    Usage:
        root = await make_profile()
        child = await make_profile(referrer=root, balance=Decimal("300"))
    """
    counter = itertools.count(1)
    repo = UserProfileRepository(session)

    async def _make(
        user_id: str | None = None,
        referrer=None,
        balance: Decimal = Decimal("0"),
        **data,
    ):
        n = next(counter)
        referral_code = data.pop("referral_code", f"TST{n:05d}")
        profile = await repo.create(
            user_id=user_id or f"user-{n}",
            referral_code=referral_code,
            referred_by=referrer.id if referrer is not None else None,
            total_earnings=balance,
            available_balance=balance,
            **data,
        )
        await session.commit()
        return profile

    return _make


@pytest.fixture
def make_chain(make_profile):
    """
    Build a linear referral chain.

    make_chain("A", "B", "C") creates A <- B <- C (A refers B, B refers C)
    and returns the profiles keyed by user_id.
    """
    async def _make(*user_ids: str) -> dict:
        profiles = {}
        previous = None
        for user_id in user_ids:
            previous = await make_profile(user_id=user_id, referrer=previous)
            profiles[user_id] = previous
        return profiles

    return _make


@pytest.fixture
def sample_upi_id():
    """Sample valid UPI id."""
    return "yourname@paytm"
