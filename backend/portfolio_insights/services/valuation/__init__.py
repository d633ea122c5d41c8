# backend/portfolio_insights/services/valuation/__init__.py
"""
Valuation and insights engine.

Data Flow:
    Holdings + quotes + FX table → ValuationAggregator → ValuedPortfolio
        (CurrencyConversion for equities/cash, StablecoinReclassifier for crypto)
    ValuedPortfolio → ChangeAttributionCalculator.summarize → AttributedChanges
    AttributedChanges → build_summary → PortfolioSummary
    ValuedPortfolio + PortfolioSummary → InsightsCalculator → DashboardInsights

Usage:
    from portfolio_insights.services.valuation import PortfolioInsightsService

    service = PortfolioInsightsService()
    dashboard = service.compute_dashboard(valuation_input)
    dashboard.summary.total_value
    dashboard.insights.cash.weighted_avg_apy
"""

# Building blocks (for testing / direct usage)
from portfolio_insights.services.valuation.attribution import (
    ChangeAttributionCalculator,
    FxExposureCalculator,
)
from portfolio_insights.services.valuation.calculators import (
    ValuationAggregator,
    dual_currency_values,
)
from portfolio_insights.services.valuation.classification import (
    KeywordPegCurrencyStrategy,
    StablecoinReclassifier,
)
from portfolio_insights.services.valuation.currency import (
    ConversionResult,
    convert,
    convert_from_base,
    convert_to_base,
    cross_rate,
)
from portfolio_insights.services.valuation.insights import (
    InsightsCalculator,
    build_summary,
    compute_allocation,
)
# Main service
from portfolio_insights.services.valuation.service import PortfolioInsightsService
# Types
from portfolio_insights.services.valuation.types import (
    AssetBucket,
    CashHolding,
    CashKind,
    CryptoAsset,
    CryptoKind,
    CryptoPosition,
    CryptoQuote,
    Dashboard,
    DashboardInsights,
    EquityAsset,
    EquityCategory,
    EquityPosition,
    EquityQuote,
    FXRateTable,
    HoldingsBundle,
    MissingRatePolicy,
    PortfolioSummary,
    ValuationInput,
)
