# backend/portfolio_insights/config.py
"""
Engine configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- LOG_LEVEL / LOG_FORMAT: Logging setup (see utils/logging.py)
- DEFAULT_PRIMARY_CURRENCY: Currency used when the caller does not pick one
- MISSING_FX_RATE_POLICY: What to do when a holding's currency has no rate
- REFERENCE_CRYPTO_ID / REFERENCE_CRYPTO_LABEL: Asset used for dominance metrics

Configuration is validated on import. Invalid configuration raises a
ValueError with a descriptive message.

Usage:
    from portfolio_insights.config import settings

    policy = settings.missing_fx_rate_policy
"""
import re
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Single .env at the repository root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

# ISO 4217 format (3 uppercase letters)
_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def _normalize_currency(value: str, env_name: str) -> str:
    normalized = (value or "").strip().upper()
    if not _CURRENCY_PATTERN.match(normalized):
        raise ValueError(
            f"{env_name} must be a 3-letter ISO currency code, got: '{value}'"
        )
    return normalized


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables:
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - DEFAULT_PRIMARY_CURRENCY: ISO 4217 code (default: "USD")
        - MISSING_FX_RATE_POLICY: exclude | identity | raise (default: "exclude")
        - REFERENCE_CRYPTO_ID: Price-provider id of the dominance asset (default: "bitcoin")
        - REFERENCE_CRYPTO_LABEL: Display label for it (default: "Bitcoin")
        - USD_ANCHOR_CURRENCY: Anchor the crypto FX component is measured against
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    # =========================================================================
    # VALUATION
    # =========================================================================
    default_primary_currency: str = Field(
        default="USD",
        description="Primary currency used when the caller does not choose one"
    )
    missing_fx_rate_policy: Literal["exclude", "identity", "raise"] = Field(
        default="exclude",
        description=(
            "Handling of holdings whose currency has no FX rate: exclude and flag, "
            "assume 1:1 (legacy), or raise FXConversionError"
        )
    )
    reference_crypto_id: str = Field(
        default="bitcoin",
        description="Crypto price id used for dominance and the crypto breakdown"
    )
    reference_crypto_label: str = Field(
        default="Bitcoin",
        description="Display label of the reference crypto asset"
    )
    usd_anchor_currency: str = Field(
        default="USD",
        description="Quote currency the crypto FX-only component is measured against"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def normalize_currencies(self) -> "Settings":
        """Upper-case and validate every configured currency code."""
        object.__setattr__(
            self,
            "default_primary_currency",
            _normalize_currency(self.default_primary_currency, "DEFAULT_PRIMARY_CURRENCY"),
        )
        object.__setattr__(
            self,
            "usd_anchor_currency",
            _normalize_currency(self.usd_anchor_currency, "USD_ANCHOR_CURRENCY"),
        )
        if not self.reference_crypto_id.strip():
            raise ValueError("REFERENCE_CRYPTO_ID cannot be empty")
        return self


# Create single instance
settings = Settings()
