# backend/tests/schemas/test_insights_schemas.py
"""
Tests for the response schemas built from engine results.
"""

from decimal import Decimal

from portfolio_insights.schemas.insights import DashboardResponse, PortfolioSummaryResponse
from portfolio_insights.services.valuation.service import PortfolioInsightsService
from portfolio_insights.services.valuation.types import EquityCategory
from tests.conftest import (
    create_cash_holding,
    create_crypto_asset,
    create_crypto_quote,
    create_equity_asset,
    create_equity_quote,
    create_rate_table,
    create_valuation_input,
)


def _dashboard():
    data = create_valuation_input(
        crypto_assets=(create_crypto_asset(quantity="1"),),
        crypto_quotes={"bitcoin": create_crypto_quote(usd="50000", change_usd="2")},
        equity_assets=(
            create_equity_asset(ticker="VTI", category=EquityCategory.ETF, subtype="US"),
            create_equity_asset(ticker="VXUS", category=EquityCategory.ETF, subtype="Intl"),
        ),
        equity_quotes={
            "VTI": create_equity_quote(price="250"),
            "VXUS": create_equity_quote(price="60"),
        },
        cash_holdings=(
            create_cash_holding(amount="1000", apy="4"),
            create_cash_holding(amount="100", currency="CHF", name="Swiss"),
        ),
        fx_rates=create_rate_table("USD", EUR="0.92"),
        index_quotes={"Gold": create_equity_quote(price="2300", change_24h="0.2")},
    )
    return PortfolioInsightsService().compute_dashboard(data)


class TestPortfolioSummaryResponse:
    """Tests for PortfolioSummaryResponse."""

    def test_reads_properties(self):
        response = PortfolioSummaryResponse.model_validate(_dashboard().summary)

        assert response.total_value == Decimal("54100")
        assert response.crypto_value == Decimal("50000")
        assert response.crypto.native_value_change_24h == Decimal("1000")
        assert response.has_complete_data is False
        assert response.excluded[0].label == "Swiss"
        assert response.excluded[0].reason.value == "missing_fx_rate"
        assert response.dual_currency.total_usd == Decimal("54100")


class TestDashboardResponse:
    """Tests for DashboardResponse."""

    def test_nested_breakdowns(self):
        response = DashboardResponse.model_validate(_dashboard())

        etfs = response.insights.equities.breakdown[0]
        assert etfs.label == "ETFs"
        assert [c.label for c in etfs.children] == ["US", "Intl"]
        assert response.insights.market.indices["Gold"].price == Decimal("2300")
        assert response.insights.cash.weighted_avg_apy == Decimal("4")

    def test_json_serialization(self):
        payload = DashboardResponse.model_validate(_dashboard()).model_dump(mode="json")

        assert payload["summary"]["primary_currency"] == "USD"
        assert payload["summary"]["excluded"][0]["bucket"] == "cash"
        assert payload["insights"]["crypto"]["asset_count"] == 1
