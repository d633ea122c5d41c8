# backend/portfolio_insights/schemas/validators.py
"""
Field validators shared by the input schemas.

Holdings, quotes and rate tables arrive from several providers with
inconsistent casing ("usd" vs "USD", "Bitcoin" vs "bitcoin"). Everything
is normalized here before it reaches the engine, which compares codes
and ids by exact string match.
"""

import re
from collections.abc import Mapping
from decimal import Decimal

# =============================================================================
# CONSTANTS
# =============================================================================

# ISO 4217 alphabetic code
CURRENCY_PATTERN = re.compile(r'^[A-Z]{3}$')


# =============================================================================
# CURRENCY VALIDATION
# =============================================================================

def validate_currency(value: str) -> str:
    """
    Trim, upper-case and check an ISO 4217 currency code.

    Args:
        value: Currency as entered or as sent by a provider ("usd", " EUR")

    Returns:
        The three-letter code in upper case

    Raises:
        ValueError: If the value is empty or not three letters
    """
    if not value:
        raise ValueError("Currency cannot be empty")

    normalized = value.strip().upper()

    if not CURRENCY_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid currency format: '{normalized}'. "
            "Expected three letters such as USD or EUR"
        )

    return normalized


def normalize_currency_keys(values: Mapping[str, Decimal]) -> dict[str, Decimal]:
    """
    Validate and upper-case the currency keys of a rate or price map.

    Raises:
        ValueError: If a key is not a currency code, or two keys collide
    """
    normalized: dict[str, Decimal] = {}
    for key, value in values.items():
        code = validate_currency(key)
        if code in normalized:
            raise ValueError(f"Duplicate currency key: '{code}'")
        normalized[code] = value
    return normalized


# =============================================================================
# TICKER / ID NORMALIZATION
# =============================================================================

def normalize_ticker(value: str) -> str:
    """
    Trim and upper-case a ticker.

    Crypto tickers and provider symbols (e.g. "VWCE.DE", "^GSPC") vary too
    much for a strict pattern; only whitespace and case are normalized.

    Args:
        value: Raw ticker input

    Returns:
        The ticker, or "" for empty input
    """
    return value.strip().upper() if value else ""


def normalize_price_id(value: str) -> str:
    """
    Normalize a crypto price-provider id ("Bitcoin " → "bitcoin").

    Raises:
        ValueError: If the id is empty
    """
    normalized = value.strip().lower() if value else ""
    if not normalized:
        raise ValueError("Price id cannot be empty")
    return normalized
