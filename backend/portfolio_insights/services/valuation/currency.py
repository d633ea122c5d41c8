# backend/portfolio_insights/services/valuation/currency.py
"""
Currency conversion against a rate table anchored to the primary currency.

Rate convention (FXRateTable):
    rates[C] = units of C per 1 unit of the anchor currency
    Example: anchor USD, rates = {"EUR": 0.92} means 1 USD = 0.92 EUR

    To convert C → anchor: DIVIDE by rates[C]   (1000 EUR / 0.92 = 1086.96 USD)
    To convert anchor → C: MULTIPLY by rates[C]

Missing rates are never silently treated as 1:1 unless the caller asks for
it with MissingRatePolicy.IDENTITY. The default policy excludes the amount
and lets the caller flag the holding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from portfolio_insights.services.constants import ONE
from portfolio_insights.services.exceptions import FXConversionError
from portfolio_insights.services.valuation.types import FXRateTable, MissingRatePolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """
    Outcome of one conversion.

    Attributes:
        amount: Converted amount, or None if the pair is unconvertible
        rate_used: Rate divided by (1 for same-currency, None if unconvertible)
        is_fallback: True when a missing rate was replaced by 1:1
    """

    amount: Decimal | None
    rate_used: Decimal | None
    is_fallback: bool = False

    @property
    def is_converted(self) -> bool:
        return self.amount is not None


def convert(
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        rates: FXRateTable,
        policy: MissingRatePolicy = MissingRatePolicy.EXCLUDE,
) -> ConversionResult:
    """
    Convert `amount` from `from_currency` into `to_currency`.

    Args:
        amount: Amount in from_currency
        from_currency: Currency of the amount
        to_currency: Target currency; must be the table's anchor unless equal
                     to from_currency
        rates: Rate table anchored to to_currency
        policy: What to do when from_currency has no rate

    Returns:
        ConversionResult (amount is None when excluded)

    Raises:
        FXConversionError: If the table is anchored to another currency, or
                           the rate is missing under MissingRatePolicy.RAISE
    """
    source = from_currency.upper()
    target = to_currency.upper()

    # Same currency → no lookup
    if source == target:
        return ConversionResult(amount=amount, rate_used=ONE)

    if target != rates.anchor.upper():
        raise FXConversionError(
            source, target, reason=f"rate table is anchored to {rates.anchor.upper()}"
        )

    rate = rates.rate_for(source)
    if rate is not None:
        return ConversionResult(amount=amount / rate, rate_used=rate)

    if policy is MissingRatePolicy.RAISE:
        raise FXConversionError(source, target, reason="no rate in table")

    if policy is MissingRatePolicy.IDENTITY:
        logger.warning(f"No FX rate for {source}/{target}, assuming 1:1")
        return ConversionResult(amount=amount, rate_used=None, is_fallback=True)

    logger.debug(f"No FX rate for {source}/{target}, excluding amount")
    return ConversionResult(amount=None, rate_used=None)


def convert_to_base(
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        rates: FXRateTable,
        policy: MissingRatePolicy = MissingRatePolicy.EXCLUDE,
) -> Decimal | None:
    """
    Convert an amount into the base (anchor) currency.

    Example:
        - Base currency: USD, rates = {"EUR": 0.92}
        - 1000 EUR → 1000 / 0.92 = 1086.96 USD

    Returns:
        The converted amount, or None if unconvertible under EXCLUDE
    """
    return convert(amount, from_currency, to_currency, rates, policy).amount


def convert_from_base(
        amount: Decimal,
        to_currency: str,
        rates: FXRateTable,
) -> Decimal | None:
    """
    Convert an anchor-currency amount out to `to_currency`.

    Returns:
        amount × rates[to_currency], or None if the rate is missing
    """
    rate = rates.rate_for(to_currency)
    if rate is None:
        return None
    return amount * rate


def cross_rate(
        rates: FXRateTable,
        base_currency: str,
        quote_currency: str,
) -> Decimal | None:
    """
    Units of quote_currency per one unit of base_currency.

    Derived from two anchor rates: rates[quote] / rates[base].
    Example: anchor EUR, rates = {"USD": 1.08} → cross_rate(EUR, USD) = 1.08

    Returns:
        The cross rate, or None if either leg is missing
    """
    base_rate = rates.rate_for(base_currency)
    quote_rate = rates.rate_for(quote_currency)
    if base_rate is None or quote_rate is None:
        return None
    return quote_rate / base_rate
