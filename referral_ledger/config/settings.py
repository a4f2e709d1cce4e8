"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Ledger settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./referral_ledger.db"
    database_echo: bool = False

    # Environment
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Referral links
    site_url: str = "http://localhost:5173"

    # Withdrawals
    min_withdrawal_amount: Decimal = Field(
        default=Decimal("10"),
        gt=0,
        description="Minimum withdrawal amount (INR)"
    )

    # Referral code allocation
    referral_code_prefix: str = "MTC"
    referral_code_length: int = Field(
        default=5,
        ge=1,
        description="Number of random symbols after the prefix"
    )
    referral_code_max_attempts: int = Field(default=5, ge=1)

    # Registration number allocation
    registration_prefix: str = "MAT"
    registration_base: int = Field(default=1000, ge=0)
    registration_max_attempts: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith((
            'postgresql://',
            'postgresql+asyncpg://',
            'sqlite+aiosqlite://',
        )):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {
            "TRACE", "DEBUG", "INFO", "SUCCESS",
            "WARNING", "ERROR", "CRITICAL",
        }:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('site_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Referral links are built as f"{site_url}/register"."""
        return v.rstrip("/")


# Global settings instance
settings = Settings()
