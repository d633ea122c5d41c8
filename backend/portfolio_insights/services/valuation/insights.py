# backend/portfolio_insights/services/valuation/insights.py
"""
Breakdown and insight builder.

Post-processes the aggregator output into display-ready structures:
- Allocation percentages and the PortfolioSummary
- Crypto breakdown (reference asset vs alts), dominance, mined/staked share
- Equity breakdown by category with subtype and primary-tag children,
  top holding
- Cash: weighted APY over APY-bearing holdings, income projection,
  currency exposure (fiat + stablecoins by peg)
- Market overview (BTC/ETH, EUR/USD cross rate, pass-through indices)

Every metric falls back to zero / empty on an empty portfolio; no
division is performed on a zero denominator.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from portfolio_insights.services.constants import (
    ALTS_LABEL,
    BTC_PRICE_ID,
    DAYS_PER_YEAR,
    ETH_PRICE_ID,
    EUR,
    HUNDRED,
    MONTHS_PER_YEAR,
    USD,
    ZERO,
)
from portfolio_insights.services.valuation.calculators import dual_currency_values
from portfolio_insights.services.valuation.classification import MINED_OR_STAKED
from portfolio_insights.services.valuation.currency import cross_rate
from portfolio_insights.services.valuation.types import (
    Allocation,
    AttributedChanges,
    BreakdownEntry,
    CashCurrencyEntry,
    CashInsights,
    CryptoInsights,
    DashboardInsights,
    EquityCategory,
    EquityInsights,
    FXRateTable,
    MarketOverview,
    PortfolioSummary,
    TopHolding,
    ValuationInput,
    ValuedPortfolio,
)

logger = logging.getLogger(__name__)

# Display order and labels of the equity breakdown
EQUITY_CATEGORY_LABELS: dict[EquityCategory, str] = {
    EquityCategory.ETF: "ETFs",
    EquityCategory.INDIVIDUAL_STOCK: "Stocks",
    EquityCategory.BOND_FIXED_INCOME: "Bonds",
    EquityCategory.OTHER: "Other",
}


# =============================================================================
# SUMMARY
# =============================================================================

def compute_allocation(crypto: Decimal, stocks: Decimal, cash: Decimal) -> Allocation:
    """Bucket shares in percent; all zero when the total is zero."""
    total = crypto + stocks + cash
    if total <= ZERO:
        return Allocation()
    return Allocation(
        crypto=crypto / total * HUNDRED,
        stocks=stocks / total * HUNDRED,
        cash=cash / total * HUNDRED,
    )


def build_summary(
        portfolio: ValuedPortfolio,
        changes: AttributedChanges,
        rates: FXRateTable,
) -> PortfolioSummary:
    """Assemble the PortfolioSummary from bucket changes."""
    cash = changes.cash
    return PortfolioSummary(
        primary_currency=portfolio.primary_currency,
        crypto=changes.crypto,
        stocks=changes.stocks,
        cash=cash,
        stablecoins=changes.stablecoins,
        fiat_cash=changes.fiat_cash,
        total=changes.total,
        allocation=compute_allocation(changes.crypto.value, changes.stocks.value, cash.value),
        dual_currency=dual_currency_values(portfolio, changes, rates),
        excluded=list(portfolio.excluded),
        warnings=list(portfolio.warnings),
    )


# =============================================================================
# BREAKDOWN HELPERS
# =============================================================================

def percent_of(value: Decimal, total: Decimal) -> Decimal:
    if total <= ZERO:
        return ZERO
    return value / total * HUNDRED


def sorted_entries(values: dict[str, Decimal], parent_total: Decimal) -> list[BreakdownEntry]:
    """Entries for each label, largest value first, percents of parent_total."""
    entries = [
        BreakdownEntry(label=label, value=value, percent=percent_of(value, parent_total))
        for label, value in values.items()
    ]
    entries.sort(key=lambda e: e.value, reverse=True)
    return entries


# =============================================================================
# INSIGHTS CALCULATOR
# =============================================================================

class InsightsCalculator:
    """
    Derives dashboard insights from a valued portfolio.

    Attributes:
        _reference_id: Crypto price id of the dominance asset (e.g. "bitcoin")
        _reference_label: Its label in the crypto breakdown
    """

    def __init__(
            self,
            reference_price_id: str = BTC_PRICE_ID,
            reference_label: str = "Bitcoin",
    ) -> None:
        self._reference_id = reference_price_id
        self._reference_label = reference_label

    def calculate(
            self,
            data: ValuationInput,
            portfolio: ValuedPortfolio,
            summary: PortfolioSummary,
    ) -> DashboardInsights:
        """
        Build all insight cards.

        Args:
            data: The computation input (for market quotes and rates)
            portfolio: Aggregator output for the same input
            summary: Summary built from the same portfolio

        Returns:
            DashboardInsights
        """
        insights = DashboardInsights(
            primary_currency=portfolio.primary_currency,
            market=self._market_overview(data),
            crypto=self._crypto_insights(portfolio, summary),
            equities=self._equity_insights(portfolio, summary),
            cash=self._cash_insights(portfolio, summary),
        )
        logger.info(
            f"Insights built: {insights.crypto.asset_count} crypto assets, "
            f"{insights.equities.position_count} equity positions, "
            f"{insights.cash.account_count} cash accounts"
        )
        return insights

    # =========================================================================
    # MARKET
    # =========================================================================

    @staticmethod
    def _market_overview(data: ValuationInput) -> MarketOverview:
        market = MarketOverview(
            eur_usd_rate=cross_rate(data.rate_table, EUR, USD) or ZERO,
            eur_usd_change_24h=data.eur_usd_change_24h,
            indices=dict(data.index_quotes),
        )
        btc = data.crypto_quotes.get(BTC_PRICE_ID)
        if btc is not None:
            market.btc_price_usd = btc.price_in(USD) or ZERO
            market.btc_change_24h = btc.change_in(USD) or ZERO
        eth = data.crypto_quotes.get(ETH_PRICE_ID)
        if eth is not None:
            market.eth_price_usd = eth.price_in(USD) or ZERO
            market.eth_change_24h = eth.change_in(USD) or ZERO
        return market

    # =========================================================================
    # CRYPTO
    # =========================================================================

    def _crypto_insights(
            self,
            portfolio: ValuedPortfolio,
            summary: PortfolioSummary,
    ) -> CryptoInsights:
        crypto_total = summary.crypto.value
        reference_value = ZERO
        mined_staked_value = ZERO
        mined_staked_count = 0
        alt_values: dict[str, Decimal] = defaultdict(lambda: ZERO)

        for valued in portfolio.crypto:
            if valued.asset.price_id == self._reference_id:
                reference_value += valued.value
            else:
                alt_values[valued.asset.ticker] += valued.value

            for position in valued.asset.positions:
                if position.acquisition_method in MINED_OR_STAKED:
                    mined_staked_value += valued.position_value(position)
                    mined_staked_count += 1

        alts_value = crypto_total - reference_value
        breakdown: list[BreakdownEntry] = []

        if reference_value > ZERO:
            breakdown.append(BreakdownEntry(
                label=self._reference_label,
                value=reference_value,
                percent=percent_of(reference_value, crypto_total),
            ))
        if alts_value > ZERO:
            alts = BreakdownEntry(
                label=ALTS_LABEL,
                value=alts_value,
                percent=percent_of(alts_value, crypto_total),
            )
            # Alt coin percents are shares of the whole crypto bucket
            if len(alt_values) > 1:
                alts.children = sorted_entries(dict(alt_values), crypto_total)
            breakdown.append(alts)

        breakdown.sort(key=lambda e: e.value, reverse=True)

        return CryptoInsights(
            asset_count=len(portfolio.crypto),
            change_24h=summary.crypto.change_24h_percent,
            reference_value=reference_value,
            dominance_percent=percent_of(reference_value, crypto_total),
            mined_staked_value=mined_staked_value,
            mined_staked_percent=percent_of(mined_staked_value, crypto_total),
            mined_staked_count=mined_staked_count,
            breakdown=breakdown,
        )

    # =========================================================================
    # EQUITIES
    # =========================================================================

    @staticmethod
    def _equity_insights(
            portfolio: ValuedPortfolio,
            summary: PortfolioSummary,
    ) -> EquityInsights:
        stock_total = summary.stocks.value
        native_weighted = ZERO
        position_count = 0
        top: tuple[Decimal, TopHolding] | None = None

        category_values: dict[EquityCategory, Decimal] = defaultdict(lambda: ZERO)
        subtype_values: dict[EquityCategory, dict[str, Decimal]] = defaultdict(dict)
        tag_values: dict[EquityCategory, dict[str, Decimal]] = defaultdict(dict)

        for valued in portfolio.equities:
            asset = valued.asset
            value = valued.value
            native_weighted += value * valued.attribution.native_change_percent
            position_count += len(asset.positions)

            category_values[asset.category] += value

            subtype = asset.subtype.strip() if asset.subtype else ""
            if subtype:
                bucket = subtype_values[asset.category]
                bucket[subtype] = bucket.get(subtype, ZERO) + value

            tag = asset.primary_tag
            if tag:
                bucket = tag_values[asset.category]
                bucket[tag] = bucket.get(tag, ZERO) + value

            if top is None or value > top[0]:
                top = (value, TopHolding(
                    name=asset.name, ticker=asset.ticker, value=value, percent=ZERO
                ))

        breakdown: list[BreakdownEntry] = []
        for category, label in EQUITY_CATEGORY_LABELS.items():
            value = category_values.get(category, ZERO)
            if value <= ZERO:
                continue

            entry = BreakdownEntry(
                label=label,
                value=value,
                percent=percent_of(value, stock_total),
            )

            subtypes = subtype_values.get(category, {})
            if len(subtypes) > 1:
                entry.children = sorted_entries(subtypes, value)

            # Skip tags that repeat the category label (e.g. "Stocks" under Stocks)
            tags = {
                tag: tag_value
                for tag, tag_value in tag_values.get(category, {}).items()
                if tag.lower() != label.lower()
            }
            if tags:
                entry.tag_breakdown = sorted_entries(tags, value)

            breakdown.append(entry)

        breakdown.sort(key=lambda e: e.value, reverse=True)

        top_holding = None
        if top is not None and stock_total > ZERO:
            holding = top[1]
            top_holding = TopHolding(
                name=holding.name,
                ticker=holding.ticker,
                value=holding.value,
                percent=percent_of(holding.value, stock_total),
            )

        return EquityInsights(
            position_count=position_count,
            change_24h=native_weighted / stock_total if stock_total > ZERO else ZERO,
            breakdown=breakdown,
            top_holding=top_holding,
        )

    # =========================================================================
    # CASH
    # =========================================================================

    @staticmethod
    def _cash_insights(
            portfolio: ValuedPortfolio,
            summary: PortfolioSummary,
    ) -> CashInsights:
        # Weighted over holdings with apy > 0 only
        apy_weighted_sum = ZERO
        apy_bearing_value = ZERO
        account_count = 0
        fiat_by_currency: dict[str, Decimal] = {}
        stable_by_currency: dict[str, Decimal] = {}

        for valued in portfolio.cash:
            holding = valued.holding
            account_count += 1
            if holding.apy > ZERO:
                apy_weighted_sum += valued.value * holding.apy
                apy_bearing_value += valued.value
            code = holding.currency.upper()
            fiat_by_currency[code] = fiat_by_currency.get(code, ZERO) + valued.value

        for valued in portfolio.stablecoins:
            peg = valued.peg_currency or USD
            stable_by_currency[peg] = stable_by_currency.get(peg, ZERO) + valued.value
            for position in valued.asset.positions:
                account_count += 1
                if position.apy > ZERO:
                    position_value = valued.position_value(position)
                    apy_weighted_sum += position_value * position.apy
                    apy_bearing_value += position_value

        weighted_avg_apy = (
            apy_weighted_sum / apy_bearing_value if apy_bearing_value > ZERO else ZERO
        )
        income_yearly = apy_bearing_value * weighted_avg_apy / HUNDRED

        cash_total = summary.cash.value
        currency_breakdown = []
        for code in dict.fromkeys([*fiat_by_currency, *stable_by_currency]):
            fiat_value = fiat_by_currency.get(code, ZERO)
            stable_value = stable_by_currency.get(code, ZERO)
            value = fiat_value + stable_value
            if value <= ZERO:
                continue
            currency_breakdown.append(CashCurrencyEntry(
                currency=code,
                value=value,
                percent=percent_of(value, cash_total),
                fiat_value=fiat_value,
                stablecoin_value=stable_value,
            ))
        currency_breakdown.sort(key=lambda e: e.value, reverse=True)

        return CashInsights(
            account_count=account_count,
            weighted_avg_apy=weighted_avg_apy,
            apy_bearing_value=apy_bearing_value,
            income_daily=income_yearly / DAYS_PER_YEAR,
            income_monthly=income_yearly / MONTHS_PER_YEAR,
            income_yearly=income_yearly,
            currency_breakdown=currency_breakdown,
        )
