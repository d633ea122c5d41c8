# backend/portfolio_insights/schemas/__init__.py
"""
Pydantic schemas for engine input and output.

- holdings: Input models (holdings, quotes, rate table) with to_domain()
- insights: Response models built from the engine's result dataclasses
- validators: Reusable validation functions (currency, ticker, price id)

Usage:
    from portfolio_insights.schemas import ValuationRequest, DashboardResponse

    request = ValuationRequest.model_validate(payload)
    dashboard = service.compute_dashboard(request.to_domain())
    response = DashboardResponse.model_validate(dashboard)
"""

from portfolio_insights.schemas.holdings import (
    CashHoldingInput,
    CryptoAssetInput,
    CryptoPositionInput,
    CryptoQuoteInput,
    EquityAssetInput,
    EquityPositionInput,
    EquityQuoteInput,
    FXRateTableInput,
    ValuationRequest,
)
from portfolio_insights.schemas.insights import (
    AllocationResponse,
    BreakdownEntryResponse,
    CashCurrencyEntryResponse,
    CashInsightsResponse,
    ClassChangeResponse,
    CryptoInsightsResponse,
    DashboardInsightsResponse,
    DashboardResponse,
    DualCurrencyResponse,
    EquityInsightsResponse,
    ExcludedHoldingResponse,
    MarketOverviewResponse,
    PortfolioSummaryResponse,
    TopHoldingResponse,
)
