# backend/portfolio_insights/services/valuation/attribution.py
"""
24h change attribution.

Every holding's 24h move in the primary currency is split into:
- a native component: the asset's own price move
- an FX-only component: the move caused by its currency against the primary

Both are linear (total % = native % + FX %) and each holding contributes
value × total % / 100 in absolute terms. Bucket and portfolio figures are
plain sums of those contributions, so they reconcile exactly at every level.

FX data model:
    Only one scalar is consumed: the 24h % change of EUR/USD. It gives FX
    exposure to USD holdings under an EUR primary (negated) and to EUR
    holdings under a USD primary. Every other pair has FX change 0; its
    native return is still counted.

Per holding type:
    Crypto:      total = quoted change in the primary currency
                 FX    = total − quoted change in USD (0 for a USD primary)
    Stablecoin:  total = quoted change in the primary currency
                 FX    = FX exposure of the peg currency
    Equity:      native = quoted change in the trading currency
                 FX     = FX exposure of the trading currency
    Fiat cash:   native = 0, FX = FX exposure of the account currency
"""

from __future__ import annotations

import logging
from decimal import Decimal

from portfolio_insights.services.constants import EUR, USD, ZERO
from portfolio_insights.services.valuation.types import (
    AttributedChanges,
    ClassChange,
    CryptoQuote,
    EquityQuote,
    HoldingAttribution,
    ValuedPortfolio,
)

logger = logging.getLogger(__name__)


# =============================================================================
# FX EXPOSURE
# =============================================================================

class FxExposureCalculator:
    """
    24h FX change of a currency against the primary currency.

    EUR/USD going up means EUR strengthened: USD assets lose value in EUR
    terms (negative impact for an EUR primary), EUR assets gain value in USD
    terms (positive impact for a USD primary).
    """

    def __init__(self, primary_currency: str, eur_usd_change_24h: Decimal) -> None:
        self._primary = primary_currency.upper()
        self._eur_usd_change = eur_usd_change_24h

    def fx_change_for(self, currency: str) -> Decimal:
        """FX-only 24h % change of `currency` holdings in the primary currency."""
        asset_currency = currency.upper()
        if asset_currency == self._primary:
            return ZERO
        if self._primary == EUR and asset_currency == USD:
            return -self._eur_usd_change
        if self._primary == USD and asset_currency == EUR:
            return self._eur_usd_change
        return ZERO


# =============================================================================
# CHANGE ATTRIBUTION
# =============================================================================

class ChangeAttributionCalculator:
    """
    Builds per-holding attributions and sums them per bucket.

    Stateless: the FX exposure calculator is passed per call.
    """

    def __init__(self, usd_anchor_currency: str = USD) -> None:
        self._usd_anchor = usd_anchor_currency.upper()

    def for_crypto(
            self,
            quote: CryptoQuote,
            primary_currency: str,
            value: Decimal,
    ) -> HoldingAttribution:
        """
        Attribute a non-stablecoin crypto asset.

        The quote is already in the primary currency, so no FX exposure is
        added on top; the FX-only part is the gap between the primary-currency
        and USD-quoted returns. It is 0 unless both changes are quoted.
        """
        primary_change = quote.change_in(primary_currency)
        total = primary_change if primary_change is not None else ZERO
        fx = ZERO
        if primary_change is not None and primary_currency.upper() != self._usd_anchor:
            usd_change = quote.change_in(self._usd_anchor)
            if usd_change is not None:
                fx = primary_change - usd_change
        return HoldingAttribution(
            value=value,
            native_change_percent=total - fx,
            fx_change_percent=fx,
        )

    def for_stablecoin(
            self,
            quote: CryptoQuote,
            primary_currency: str,
            value: Decimal,
            peg_currency: str,
            fx: FxExposureCalculator,
    ) -> HoldingAttribution:
        """
        Attribute a stablecoin.

        The quoted change carries both peg noise and FX; the FX-only part is
        taken from the peg currency so it stays separable from the noise.
        """
        total = quote.change_in(primary_currency) or ZERO
        fx_change = fx.fx_change_for(peg_currency)
        return HoldingAttribution(
            value=value,
            native_change_percent=total - fx_change,
            fx_change_percent=fx_change,
        )

    @staticmethod
    def for_equity(
            quote: EquityQuote,
            currency: str,
            value: Decimal,
            fx: FxExposureCalculator,
    ) -> HoldingAttribution:
        return HoldingAttribution(
            value=value,
            native_change_percent=quote.change_24h,
            fx_change_percent=fx.fx_change_for(currency),
        )

    @staticmethod
    def for_cash(
            currency: str,
            value: Decimal,
            fx: FxExposureCalculator,
    ) -> HoldingAttribution:
        return HoldingAttribution(
            value=value,
            native_change_percent=ZERO,
            fx_change_percent=fx.fx_change_for(currency),
        )

    @staticmethod
    def summarize(portfolio: ValuedPortfolio) -> AttributedChanges:
        """
        Sum per-holding contributions into bucket change records.

        Args:
            portfolio: Aggregator output

        Returns:
            AttributedChanges whose cash and total records are sums of the parts
        """
        changes = AttributedChanges(
            crypto=ClassChange.from_attributions([v.attribution for v in portfolio.crypto]),
            stocks=ClassChange.from_attributions([v.attribution for v in portfolio.equities]),
            stablecoins=ClassChange.from_attributions(
                [v.attribution for v in portfolio.stablecoins]
            ),
            fiat_cash=ClassChange.from_attributions([v.attribution for v in portfolio.cash]),
        )

        logger.debug(
            f"Attributed 24h change: total={changes.total.value_change_24h} "
            f"fx={changes.total.fx_value_change_24h} {portfolio.primary_currency}"
        )
        return changes
