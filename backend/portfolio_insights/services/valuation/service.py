# backend/portfolio_insights/services/valuation/service.py
"""
Portfolio Insights Service - orchestrator for the valuation engine.

Entry points:
- compute_summary(): PortfolioSummary for an already assembled snapshot
- compute_insights(): DashboardInsights for a snapshot
- compute_dashboard(): Both, from a single valuation pass
- get_dashboard(): Fetch holdings, quotes and rates through the injected
  collaborators, then compute the dashboard

Design Principles:
- Dependency Injection: data sources injected via constructor
- The compute_* methods are pure; only get_dashboard() talks to collaborators
- No caching: identical snapshots are recomputed (memoize outside if needed)
- Collaborator failures surface as DataSourceError

Usage:
    from portfolio_insights.services.valuation import PortfolioInsightsService

    service = PortfolioInsightsService(
        holdings_source=repo,
        crypto_prices=coingecko,
        equity_prices=yahoo,
        fx_rates=fx,
    )
    dashboard = service.get_dashboard(user_id="u-1", primary_currency="EUR")

    # Or, with a snapshot assembled by the caller
    summary = PortfolioInsightsService().compute_summary(valuation_input)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, TypeVar

from portfolio_insights.config import settings
from portfolio_insights.services.constants import BTC_PRICE_ID, ETH_PRICE_ID, EUR, USD
from portfolio_insights.services.exceptions import (
    DataSourceError,
    InvalidCurrencyError,
    ServiceError,
)
from portfolio_insights.services.valuation.attribution import ChangeAttributionCalculator
from portfolio_insights.services.valuation.calculators import ValuationAggregator
from portfolio_insights.services.valuation.classification import StablecoinReclassifier
from portfolio_insights.services.valuation.insights import InsightsCalculator, build_summary
from portfolio_insights.services.valuation.types import (
    Dashboard,
    DashboardInsights,
    EquityQuote,
    MissingRatePolicy,
    PortfolioSummary,
    ValuationInput,
    ValuedPortfolio,
)

if TYPE_CHECKING:
    from portfolio_insights.services.protocols import (
        CryptoPriceSource,
        EquityPriceSource,
        FXRateSource,
        HoldingsSource,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")

# Always fetched so the market overview has BTC/ETH figures
MARKET_PRICE_IDS = (BTC_PRICE_ID, ETH_PRICE_ID)


class PortfolioInsightsService:
    """
    Main service for portfolio summary and dashboard insights.

    Attributes:
        _holdings_source: Storage layer returning a user's holdings
        _crypto_prices: Dual-currency crypto quote provider
        _equity_prices: Native-currency equity quote provider
        _fx_rates: FX rate table and EUR/USD change provider
        _aggregator: Valuation aggregator (with reclassifier and attribution)
        _attribution: Change attribution calculator
        _insights_calc: Breakdown and insight builder
    """

    def __init__(
            self,
            holdings_source: HoldingsSource | None = None,
            crypto_prices: CryptoPriceSource | None = None,
            equity_prices: EquityPriceSource | None = None,
            fx_rates: FXRateSource | None = None,
            reclassifier: StablecoinReclassifier | None = None,
            missing_rate_policy: MissingRatePolicy | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            holdings_source: Needed by get_dashboard() only
            crypto_prices: Needed by get_dashboard() only
            equity_prices: Needed by get_dashboard() only
            fx_rates: Needed by get_dashboard() only
            reclassifier: Stablecoin reclassifier; keyword peg inference if None
            missing_rate_policy: Defaults to settings.missing_fx_rate_policy
        """
        self._holdings_source = holdings_source
        self._crypto_prices = crypto_prices
        self._equity_prices = equity_prices
        self._fx_rates = fx_rates

        policy = missing_rate_policy or MissingRatePolicy(settings.missing_fx_rate_policy)
        self._attribution = ChangeAttributionCalculator(settings.usd_anchor_currency)
        self._aggregator = ValuationAggregator(
            reclassifier=reclassifier,
            attribution=self._attribution,
            missing_rate_policy=policy,
        )
        self._insights_calc = InsightsCalculator(
            reference_price_id=settings.reference_crypto_id,
            reference_label=settings.reference_crypto_label,
        )

        logger.info(f"PortfolioInsightsService initialized (missing FX policy: {policy.value})")

    # =========================================================================
    # PURE COMPUTATION
    # =========================================================================

    def compute_summary(self, data: ValuationInput) -> PortfolioSummary:
        """
        Value the snapshot and attribute its 24h change.

        Args:
            data: Holdings, quotes and rates for one computation pass

        Returns:
            PortfolioSummary in data.primary_currency
        """
        _, summary = self._valuate(data)
        return summary

    def compute_insights(self, data: ValuationInput) -> DashboardInsights:
        """Dashboard insight cards for the snapshot."""
        return self.compute_dashboard(data).insights

    def compute_dashboard(self, data: ValuationInput) -> Dashboard:
        """Summary and insights computed from the same valuation pass."""
        portfolio, summary = self._valuate(data)
        insights = self._insights_calc.calculate(data, portfolio, summary)
        return Dashboard(summary=summary, insights=insights)

    # =========================================================================
    # ORCHESTRATION
    # =========================================================================

    def get_dashboard(
            self,
            user_id: str,
            primary_currency: str | None = None,
            index_quotes: Mapping[str, EquityQuote] | None = None,
    ) -> Dashboard:
        """
        Fetch everything a user's dashboard needs and compute it.

        Args:
            user_id: Owner of the holdings
            primary_currency: Defaults to settings.default_primary_currency
            index_quotes: Market indices shown in the overview (passed through)

        Returns:
            Dashboard

        Raises:
            InvalidCurrencyError: If primary_currency is not an ISO code
            DataSourceError: If a collaborator is missing or fails
        """
        data = self.build_input(user_id, primary_currency, index_quotes)
        return self.compute_dashboard(data)

    def build_input(
            self,
            user_id: str,
            primary_currency: str | None = None,
            index_quotes: Mapping[str, EquityQuote] | None = None,
    ) -> ValuationInput:
        """
        Assemble a ValuationInput snapshot from the collaborators.

        Collects the crypto price ids, equity quote keys and currencies the
        holdings need and requests exactly those.
        """
        primary = _validate_primary_currency(
            primary_currency or settings.default_primary_currency
        )

        holdings_source = self._require(self._holdings_source, "holdings")
        crypto_prices = self._require(self._crypto_prices, "crypto_prices")
        equity_prices = self._require(self._equity_prices, "equity_prices")
        fx_rates = self._require(self._fx_rates, "fx_rates")

        bundle = _fetch("holdings", lambda: holdings_source.get_holdings(user_id))

        price_ids = list(dict.fromkeys(
            [asset.price_id for asset in bundle.crypto_assets] + list(MARKET_PRICE_IDS)
        ))
        quote_currencies = list(dict.fromkeys([primary, USD, EUR]))
        crypto_quotes = _fetch(
            "crypto_prices", lambda: crypto_prices.get_prices(price_ids, quote_currencies)
        )

        price_keys = list(dict.fromkeys(asset.price_key for asset in bundle.equity_assets))
        equity_quotes = (
            _fetch("equity_prices", lambda: equity_prices.get_quotes(price_keys))
            if price_keys else {}
        )

        currencies = [asset.currency.upper() for asset in bundle.equity_assets]
        currencies += [holding.currency.upper() for holding in bundle.cash_holdings]
        targets = [c for c in dict.fromkeys(currencies + [USD, EUR]) if c != primary]
        rate_table = _fetch("fx_rates", lambda: fx_rates.get_rates(primary, targets))
        if rate_table.anchor.upper() != primary:
            logger.error(
                f"Data source 'fx_rates' returned a table anchored to "
                f"{rate_table.anchor.upper()}, expected {primary}"
            )
            raise DataSourceError(
                f"FX rate table is anchored to {rate_table.anchor.upper()}, expected {primary}",
                source="fx_rates",
            )
        eur_usd_change = _fetch("fx_rates", fx_rates.get_eur_usd_change_24h)

        logger.info(
            f"Snapshot for user {user_id}: {len(bundle.crypto_assets)} crypto, "
            f"{len(bundle.equity_assets)} equity, {len(bundle.cash_holdings)} cash holdings "
            f"in {primary}"
        )

        return ValuationInput(
            primary_currency=primary,
            crypto_assets=bundle.crypto_assets,
            crypto_quotes=dict(crypto_quotes),
            equity_assets=bundle.equity_assets,
            equity_quotes=dict(equity_quotes),
            cash_holdings=bundle.cash_holdings,
            fx_rates=rate_table,
            eur_usd_change_24h=eur_usd_change,
            index_quotes=dict(index_quotes or {}),
        )

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    def _valuate(self, data: ValuationInput) -> tuple[ValuedPortfolio, PortfolioSummary]:
        portfolio = self._aggregator.aggregate(data)
        changes = self._attribution.summarize(portfolio)
        summary = build_summary(portfolio, changes, data.rate_table)

        logger.info(
            f"Summary: total={summary.total_value} {summary.primary_currency}, "
            f"change={summary.total_value_change_24h} "
            f"(fx {summary.fx_value_change_24h}), excluded={len(summary.excluded)}"
        )
        return portfolio, summary

    @staticmethod
    def _require(collaborator: T | None, name: str) -> T:
        if collaborator is None:
            raise DataSourceError(f"No {name} source configured", source=name)
        return collaborator


# =============================================================================
# HELPERS
# =============================================================================

def _validate_primary_currency(currency: str) -> str:
    normalized = currency.strip().upper()
    if not _CURRENCY_PATTERN.match(normalized):
        raise InvalidCurrencyError(currency, field="primary_currency")
    return normalized


def _fetch(source: str, call: Callable[[], T]) -> T:
    """Run a collaborator call, wrapping unexpected failures in DataSourceError."""
    try:
        return call()
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Data source '{source}' failed: {e}")
        raise DataSourceError(f"Failed to fetch {source}: {e}", source=source) from e
