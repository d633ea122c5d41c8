# backend/portfolio_insights/services/valuation/calculators.py
"""
Valuation aggregator.

Values every holding in the primary currency, attaches its 24h change
attribution, and sorts it into a bucket:

- Crypto: quantity × the quote's price in the primary currency. Crypto
  quotes are natively multi-currency, so no FX conversion is applied
  (converting again would mix two rate sources). Stablecoins go to the
  cash bucket via the StablecoinReclassifier.
- Equities: quantity × native price, converted from the trading currency.
- Cash: native amount converted from the account currency.

A holding without a quote, with an equity quote in another currency than the
asset trades in, or whose currency cannot be converted, is left out of every
total and recorded in ValuedPortfolio.excluded.

Design Principles:
- Stateless (no instance state between calls)
- Never mutates its inputs
- Uses Decimal for ALL financial calculations

Usage:
    aggregator = ValuationAggregator()
    portfolio = aggregator.aggregate(valuation_input)
"""

from __future__ import annotations

import logging
from decimal import Decimal

from portfolio_insights.services.constants import EUR, USD, ZERO
from portfolio_insights.services.valuation.attribution import (
    ChangeAttributionCalculator,
    FxExposureCalculator,
)
from portfolio_insights.services.valuation.classification import StablecoinReclassifier
from portfolio_insights.services.valuation.currency import convert, convert_from_base
from portfolio_insights.services.valuation.types import (
    AssetBucket,
    AttributedChanges,
    CashHolding,
    CryptoAsset,
    CryptoQuote,
    DualCurrencyValues,
    EquityAsset,
    EquityQuote,
    ExcludedHolding,
    ExclusionReason,
    FXRateTable,
    MissingRatePolicy,
    ValuationInput,
    ValuedCash,
    ValuedCrypto,
    ValuedEquity,
    ValuedPortfolio,
)

logger = logging.getLogger(__name__)


# =============================================================================
# VALUATION AGGREGATOR
# =============================================================================

class ValuationAggregator:
    """
    Single pass over all holdings producing a ValuedPortfolio.

    Attributes:
        _reclassifier: Stablecoin rule and peg inference
        _attribution: Per-holding change attribution
        _policy: Handling of currencies missing from the rate table
    """

    def __init__(
            self,
            reclassifier: StablecoinReclassifier | None = None,
            attribution: ChangeAttributionCalculator | None = None,
            missing_rate_policy: MissingRatePolicy = MissingRatePolicy.EXCLUDE,
    ) -> None:
        self._reclassifier = reclassifier or StablecoinReclassifier()
        self._attribution = attribution or ChangeAttributionCalculator()
        self._policy = missing_rate_policy

    def aggregate(self, data: ValuationInput) -> ValuedPortfolio:
        """
        Value all holdings of one computation pass.

        Args:
            data: Holdings, quotes, rate table and EUR/USD change

        Returns:
            ValuedPortfolio with priced holdings per bucket and exclusions
        """
        primary = data.primary_currency.upper()
        rates = data.rate_table
        fx = FxExposureCalculator(primary, data.eur_usd_change_24h)

        result = ValuedPortfolio(
            primary_currency=primary,
            eur_usd_change_24h=data.eur_usd_change_24h,
        )

        for crypto_asset in data.crypto_assets:
            self._value_crypto(
                crypto_asset, data.crypto_quotes.get(crypto_asset.price_id), primary, fx, result
            )

        for equity_asset in data.equity_assets:
            self._value_equity(
                equity_asset, data.equity_quotes.get(equity_asset.price_key), primary, rates, fx,
                result,
            )

        for holding in data.cash_holdings:
            self._value_cash(holding, primary, rates, fx, result)

        logger.info(
            f"Valued {len(result.crypto)} crypto, {len(result.stablecoins)} stablecoin, "
            f"{len(result.equities)} equity and {len(result.cash)} cash holdings in {primary}; "
            f"{len(result.excluded)} excluded"
        )
        return result

    # =========================================================================
    # PER ASSET CLASS
    # =========================================================================

    def _value_crypto(
            self,
            asset: CryptoAsset,
            quote: CryptoQuote | None,
            primary: str,
            fx: FxExposureCalculator,
            result: ValuedPortfolio,
    ) -> None:
        bucket = self._reclassifier.bucket_for(asset)
        unit_price = quote.price_in(primary) if quote is not None else None

        if unit_price is None:
            self._exclude(
                result, bucket, asset.ticker, ExclusionReason.MISSING_PRICE, primary,
                f"No {primary} price quote for {asset.ticker} ({asset.price_id})",
            )
            return

        quantity = asset.total_quantity
        value = quantity * unit_price
        peg = self._reclassifier.peg_currency_for(asset)

        if peg is not None:
            attribution = self._attribution.for_stablecoin(quote, primary, value, peg, fx)
        else:
            attribution = self._attribution.for_crypto(quote, primary, value)

        valued = ValuedCrypto(
            asset=asset,
            bucket=bucket,
            unit_price=unit_price,
            value=value,
            attribution=attribution,
            peg_currency=peg,
            value_usd=_quoted_value(quantity, quote, USD),
            value_eur=_quoted_value(quantity, quote, EUR),
        )

        if bucket is AssetBucket.CASH:
            result.stablecoins.append(valued)
        else:
            result.crypto.append(valued)

        logger.debug(
            f"{asset.ticker}: {quantity} × {unit_price} = {value} {primary} "
            f"({bucket.value}, change {attribution.total_change_percent}%)"
        )

    def _value_equity(
            self,
            asset: EquityAsset,
            quote: EquityQuote | None,
            primary: str,
            rates: FXRateTable,
            fx: FxExposureCalculator,
            result: ValuedPortfolio,
    ) -> None:
        if quote is None:
            self._exclude(
                result, AssetBucket.STOCKS, asset.ticker, ExclusionReason.MISSING_PRICE,
                asset.currency, f"No price quote for {asset.ticker} ({asset.price_key})",
            )
            return

        if quote.currency and quote.currency.upper() != asset.currency.upper():
            self._exclude(
                result, AssetBucket.STOCKS, asset.ticker, ExclusionReason.CURRENCY_MISMATCH,
                asset.currency,
                f"Quote for {asset.ticker} is in {quote.currency.upper()}, "
                f"asset trades in {asset.currency.upper()}",
            )
            return

        native_value = asset.total_quantity * quote.price
        conversion = convert(native_value, asset.currency, primary, rates, self._policy)

        if conversion.amount is None:
            self._exclude(
                result, AssetBucket.STOCKS, asset.ticker, ExclusionReason.MISSING_FX_RATE,
                asset.currency, f"No FX rate for {asset.currency}/{primary}, excluding {asset.ticker}",
            )
            return
        if conversion.is_fallback:
            result.warnings.append(
                f"No FX rate for {asset.currency}/{primary}, {asset.ticker} valued at 1:1"
            )

        result.equities.append(ValuedEquity(
            asset=asset,
            quote=quote,
            native_value=native_value,
            value=conversion.amount,
            attribution=self._attribution.for_equity(
                quote, asset.currency, conversion.amount, fx
            ),
        ))

    def _value_cash(
            self,
            holding: CashHolding,
            primary: str,
            rates: FXRateTable,
            fx: FxExposureCalculator,
            result: ValuedPortfolio,
    ) -> None:
        conversion = convert(holding.amount, holding.currency, primary, rates, self._policy)

        if conversion.amount is None:
            self._exclude(
                result, AssetBucket.CASH, holding.name, ExclusionReason.MISSING_FX_RATE,
                holding.currency, f"No FX rate for {holding.currency}/{primary}, excluding {holding.name}",
            )
            return
        if conversion.is_fallback:
            result.warnings.append(
                f"No FX rate for {holding.currency}/{primary}, {holding.name} valued at 1:1"
            )

        result.cash.append(ValuedCash(
            holding=holding,
            value=conversion.amount,
            attribution=self._attribution.for_cash(holding.currency, conversion.amount, fx),
        ))

    @staticmethod
    def _exclude(
            result: ValuedPortfolio,
            bucket: AssetBucket,
            label: str,
            reason: ExclusionReason,
            currency: str | None,
            message: str,
    ) -> None:
        logger.warning(message)
        result.excluded.append(ExcludedHolding(
            bucket=bucket,
            label=label,
            reason=reason,
            currency=currency.upper() if currency else None,
        ))
        result.warnings.append(message)


# =============================================================================
# DUAL-CURRENCY VALUES
# =============================================================================

def dual_currency_values(
        portfolio: ValuedPortfolio,
        changes: AttributedChanges,
        rates: FXRateTable,
) -> DualCurrencyValues:
    """
    Express bucket values in both USD and EUR for snapshot storage.

    Crypto and stablecoins read their USD/EUR quotes directly; stocks and
    fiat cash are converted out of the primary currency with the rate table.
    A figure is None when a quote or rate it depends on is missing.
    """
    crypto_usd = _sum_optional(*[v.value_usd for v in portfolio.crypto])
    crypto_eur = _sum_optional(*[v.value_eur for v in portfolio.crypto])
    stable_usd = _sum_optional(*[v.value_usd for v in portfolio.stablecoins])
    stable_eur = _sum_optional(*[v.value_eur for v in portfolio.stablecoins])

    stocks_usd = convert_from_base(changes.stocks.value, USD, rates)
    stocks_eur = convert_from_base(changes.stocks.value, EUR, rates)
    fiat_usd = convert_from_base(changes.fiat_cash.value, USD, rates)
    fiat_eur = convert_from_base(changes.fiat_cash.value, EUR, rates)

    cash_usd = _sum_optional(fiat_usd, stable_usd)
    cash_eur = _sum_optional(fiat_eur, stable_eur)

    return DualCurrencyValues(
        total_usd=_sum_optional(crypto_usd, stocks_usd, cash_usd),
        total_eur=_sum_optional(crypto_eur, stocks_eur, cash_eur),
        crypto_usd=crypto_usd,
        crypto_eur=crypto_eur,
        stocks_usd=stocks_usd,
        stocks_eur=stocks_eur,
        cash_usd=cash_usd,
        cash_eur=cash_eur,
    )


# =============================================================================
# HELPERS
# =============================================================================

def _quoted_value(quantity: Decimal, quote: CryptoQuote, currency: str) -> Decimal | None:
    price = quote.price_in(currency)
    if price is None:
        return None
    return quantity * price


def _sum_optional(*values: Decimal | None) -> Decimal | None:
    """Sum of the values, or None if any of them is None."""
    total = ZERO
    for value in values:
        if value is None:
            return None
        total += value
    return total
