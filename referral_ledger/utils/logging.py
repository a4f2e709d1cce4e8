"""
Logging setup.

Configures the loguru logger for the host application.
"""

import sys

from loguru import logger

from referral_ledger.config.settings import settings


def setup_logging(
    level: str | None = None, log_file: str | None = None
) -> None:
    """Configure stderr sink and optional rotating file sink."""
    logger.remove()
    logger.add(sys.stderr, level=level or settings.log_level)

    path = log_file or settings.log_file
    if path:
        logger.add(
            path,
            rotation="1 day",
            retention="7 days",
            level=level or settings.log_level,
            encoding="utf-8",
        )

    logger.info("Referral ledger logging configured")
