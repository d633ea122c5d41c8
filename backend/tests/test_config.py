# backend/tests/test_config.py
"""
Tests for Settings validation.
"""

import pytest
from pydantic import ValidationError

from portfolio_insights.config import Settings


class TestSettings:
    """Tests for Settings loaded from environment variables."""

    def test_defaults(self, monkeypatch):
        for name in ("DEFAULT_PRIMARY_CURRENCY", "MISSING_FX_RATE_POLICY", "REFERENCE_CRYPTO_ID"):
            monkeypatch.delenv(name, raising=False)

        config = Settings(_env_file=None)

        assert config.default_primary_currency == "USD"
        assert config.missing_fx_rate_policy == "exclude"
        assert config.reference_crypto_id == "bitcoin"
        assert config.usd_anchor_currency == "USD"

    def test_currency_normalized_from_env(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PRIMARY_CURRENCY", " eur ")

        config = Settings(_env_file=None)

        assert config.default_primary_currency == "EUR"

    def test_invalid_currency_rejected(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PRIMARY_CURRENCY", "EURO")

        with pytest.raises(ValidationError, match="DEFAULT_PRIMARY_CURRENCY"):
            Settings(_env_file=None)

    def test_unknown_policy_rejected(self, monkeypatch):
        monkeypatch.setenv("MISSING_FX_RATE_POLICY", "guess")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_empty_reference_id_rejected(self, monkeypatch):
        monkeypatch.setenv("REFERENCE_CRYPTO_ID", "  ")

        with pytest.raises(ValidationError, match="REFERENCE_CRYPTO_ID"):
            Settings(_env_file=None)

    def test_log_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "json")

        config = Settings(_env_file=None)

        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_unknown_log_format_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
