"""Unit tests for settings validation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from referral_ledger.config.settings import Settings


class TestSettings:
    """Test Settings defaults and validators."""

    def test_defaults(self):
        """Ledger defaults match the referral program."""
        s = Settings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:")
        assert s.min_withdrawal_amount == Decimal("10")
        assert s.referral_code_prefix == "MTC"
        assert s.referral_code_length == 5
        assert s.registration_prefix == "MAT"
        assert s.registration_base == 1000
        assert s.registration_max_attempts == 10

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql://u:p@localhost/db",
            "postgresql+asyncpg://u:p@localhost/db",
            "sqlite+aiosqlite:///./ledger.db",
        ],
    )
    def test_supported_database_urls(self, url):
        """Postgres and async SQLite URLs are accepted."""
        assert Settings(_env_file=None, database_url=url).database_url == url

    def test_unsupported_database_url(self):
        """Other drivers are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, database_url="mysql://u:p@localhost/db")

    def test_log_level_normalized(self):
        """Log level is uppercased."""
        s = Settings(_env_file=None, log_level="debug")
        assert s.log_level == "DEBUG"

    def test_unknown_log_level(self):
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="verbose")

    def test_site_url_trailing_slash_removed(self):
        """Links are built without double slashes."""
        s = Settings(_env_file=None, site_url="https://shop.example/")
        assert s.site_url == "https://shop.example"

    def test_min_withdrawal_must_be_positive(self):
        """Zero minimum withdrawal is rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, min_withdrawal_amount=Decimal("0"))
