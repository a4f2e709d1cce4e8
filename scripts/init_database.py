#!/usr/bin/env python3
"""Initialize referral ledger tables."""

import asyncio

from loguru import logger

from referral_ledger.config.settings import settings
from referral_ledger.database import create_engine, init_models
from referral_ledger.utils.logging import setup_logging


async def init_database() -> None:
    """Create all ledger tables."""
    logger.info("Connecting to database...")
    engine = create_engine(settings.database_url)

    try:
        logger.info("Creating tables (checkfirst=True)...")
        await init_models(engine)
    finally:
        await engine.dispose()

    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    setup_logging(level="INFO")
    asyncio.run(init_database())
