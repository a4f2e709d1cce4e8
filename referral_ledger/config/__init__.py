"""Configuration package."""

from referral_ledger.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
