# backend/portfolio_insights/schemas/insights.py
"""
Pydantic schemas for engine output.

These schemas mirror the result dataclasses of the valuation engine and are
built with model_validate(result), reading attributes and properties:
- Portfolio summary (totals, allocation, attributed 24h change)
- Dashboard insights (market, crypto, equities, cash)

Values are unrounded Decimals; rounding for display is left to the caller.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from portfolio_insights.services.valuation.types import AssetBucket, ExclusionReason


# =============================================================================
# SUMMARY SCHEMAS
# =============================================================================

class ClassChangeResponse(BaseModel):
    """Value and attributed 24h change of one asset class."""

    model_config = ConfigDict(from_attributes=True)

    value: Decimal = Field(..., description="Value in the primary currency")
    value_change_24h: Decimal = Field(..., description="Absolute 24h change")
    fx_value_change_24h: Decimal = Field(
        ...,
        description="Part of the 24h change caused by currency movement"
    )
    native_value_change_24h: Decimal = Field(
        ...,
        description="Part of the 24h change caused by the assets' own prices"
    )
    change_24h_percent: Decimal
    fx_change_24h_percent: Decimal


class AllocationResponse(BaseModel):
    """Share of each asset class in the total, in percent."""

    model_config = ConfigDict(from_attributes=True)

    crypto: Decimal
    stocks: Decimal
    cash: Decimal


class DualCurrencyResponse(BaseModel):
    """Snapshot values in USD and EUR (None if a rate is unavailable)."""

    model_config = ConfigDict(from_attributes=True)

    total_usd: Decimal | None = None
    total_eur: Decimal | None = None
    crypto_usd: Decimal | None = None
    crypto_eur: Decimal | None = None
    stocks_usd: Decimal | None = None
    stocks_eur: Decimal | None = None
    cash_usd: Decimal | None = None
    cash_eur: Decimal | None = None


class ExcludedHoldingResponse(BaseModel):
    """A holding left out of every total."""

    model_config = ConfigDict(from_attributes=True)

    bucket: AssetBucket
    label: str
    reason: ExclusionReason
    currency: str | None = None


class PortfolioSummaryResponse(BaseModel):
    """
    Portfolio totals in the primary currency.

    total_value == crypto_value + stocks_value + cash_value, and the absolute
    24h changes of the classes add up to the total change.
    """

    model_config = ConfigDict(from_attributes=True)

    primary_currency: str
    total_value: Decimal
    crypto_value: Decimal
    stocks_value: Decimal
    cash_value: Decimal = Field(..., description="Fiat cash plus stablecoins")
    stablecoin_value: Decimal = Field(..., description="Stablecoin part of cash_value")

    change_24h_percent: Decimal
    fx_change_24h_percent: Decimal
    total_value_change_24h: Decimal
    fx_value_change_24h: Decimal

    crypto: ClassChangeResponse
    stocks: ClassChangeResponse
    cash: ClassChangeResponse
    stablecoins: ClassChangeResponse
    fiat_cash: ClassChangeResponse
    total: ClassChangeResponse

    allocation: AllocationResponse
    dual_currency: DualCurrencyResponse

    has_complete_data: bool = Field(
        ...,
        description="False when a holding was excluded for a missing quote or FX rate"
    )
    excluded: list[ExcludedHoldingResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# INSIGHT SCHEMAS
# =============================================================================

class BreakdownEntryResponse(BaseModel):
    """A chart slice with optional nested slices."""

    model_config = ConfigDict(from_attributes=True)

    label: str
    value: Decimal
    percent: Decimal
    children: list["BreakdownEntryResponse"] | None = None
    tag_breakdown: list["BreakdownEntryResponse"] | None = None


class CashCurrencyEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    currency: str
    value: Decimal
    percent: Decimal
    fiat_value: Decimal
    stablecoin_value: Decimal


class TopHoldingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    ticker: str
    value: Decimal
    percent: Decimal


class IndexQuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    price: Decimal
    change_24h: Decimal
    currency: str | None = None


class MarketOverviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    btc_price_usd: Decimal
    btc_change_24h: Decimal
    eth_price_usd: Decimal
    eth_change_24h: Decimal
    eur_usd_rate: Decimal = Field(..., description="USD per 1 EUR (0 if not derivable)")
    eur_usd_change_24h: Decimal
    indices: dict[str, IndexQuoteResponse] = Field(default_factory=dict)


class CryptoInsightsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_count: int
    change_24h: Decimal
    reference_value: Decimal
    dominance_percent: Decimal
    mined_staked_value: Decimal
    mined_staked_percent: Decimal
    mined_staked_count: int
    breakdown: list[BreakdownEntryResponse] = Field(default_factory=list)


class EquityInsightsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position_count: int
    change_24h: Decimal = Field(..., description="Value-weighted local-currency 24h change")
    breakdown: list[BreakdownEntryResponse] = Field(default_factory=list)
    top_holding: TopHoldingResponse | None = None


class CashInsightsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account_count: int
    weighted_avg_apy: Decimal = Field(
        ...,
        description="APY weighted over yield-bearing holdings only"
    )
    apy_bearing_value: Decimal
    income_daily: Decimal
    income_monthly: Decimal
    income_yearly: Decimal
    currency_breakdown: list[CashCurrencyEntryResponse] = Field(default_factory=list)


class DashboardInsightsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    primary_currency: str
    market: MarketOverviewResponse
    crypto: CryptoInsightsResponse
    equities: EquityInsightsResponse
    cash: CashInsightsResponse


class DashboardResponse(BaseModel):
    """Summary and insights from the same valuation pass."""

    model_config = ConfigDict(from_attributes=True)

    summary: PortfolioSummaryResponse
    insights: DashboardInsightsResponse
