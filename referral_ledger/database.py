"""Database engine and session factory helpers."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from referral_ledger.config.settings import settings
from referral_ledger.models import Base


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create async engine (defaults to settings.database_url)."""
    url = database_url or settings.database_url
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    connect_args = {}
    if url.startswith("sqlite"):
        # Writers on the same file wait for the lock instead of failing
        connect_args["timeout"] = 30
    return create_async_engine(
        url,
        echo=settings.database_echo,
        poolclass=NullPool,
        connect_args=connect_args,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all ledger tables (checkfirst=True)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
