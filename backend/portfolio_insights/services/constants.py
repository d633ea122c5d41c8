# backend/portfolio_insights/services/constants.py
"""
Centralized constants for the portfolio insights engine.

Usage:
    from portfolio_insights.services.constants import (
        DAYS_PER_YEAR,
        STABLECOIN_TAG,
    )
"""

from decimal import Decimal

# =============================================================================
# NUMERIC
# =============================================================================

ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")
HUNDRED: Decimal = Decimal("100")

# Income projections: yearly / 12 = monthly, yearly / 365 = daily
MONTHS_PER_YEAR: int = 12
DAYS_PER_YEAR: int = 365


# =============================================================================
# CURRENCIES
# =============================================================================

USD: str = "USD"
EUR: str = "EUR"

# Fallback peg when no keyword in a stablecoin's ticker/name matches
DEFAULT_PEG_CURRENCY: str = USD

# Checked in order; the first currency whose code appears in the ticker
# or name wins
PEG_CURRENCY_KEYWORDS: tuple[str, ...] = ("EUR", "GBP", "CHF")


# =============================================================================
# CLASSIFICATION TAGS
# =============================================================================

# Crypto subcategory that moves a holding into the cash bucket
STABLECOIN_TAG: str = "stablecoin"

# Crypto price ids read for the market overview
BTC_PRICE_ID: str = "bitcoin"
ETH_PRICE_ID: str = "ethereum"

# Label of the non-reference bucket in the crypto breakdown
ALTS_LABEL: str = "Alts"
