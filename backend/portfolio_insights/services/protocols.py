# backend/portfolio_insights/services/protocols.py
"""
Protocol interfaces for the engine's collaborators.

Fetching prices, FX rates and holdings is not part of the engine. These
protocols describe what PortfolioInsightsService expects to be handed;
any object with matching methods qualifies (structural typing), so price
provider adapters and test doubles need no common base class.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_insights.services.valuation.types import (
        CryptoAsset,
        CryptoQuote,
        EquityQuote,
        FXRateTable,
        HoldingsBundle,
    )


class PegCurrencyStrategy(Protocol):
    """Decides which fiat currency a stablecoin tracks."""

    def infer_peg(self, asset: CryptoAsset) -> str:
        ...


class HoldingsSource(Protocol):
    """Interface of the storage layer holding a user's positions."""

    def get_holdings(self, user_id: str) -> HoldingsBundle:
        ...


class CryptoPriceSource(Protocol):
    """Interface of the crypto price provider (dual-currency quotes)."""

    def get_prices(
        self,
        price_ids: list[str],
        currencies: list[str],
    ) -> Mapping[str, CryptoQuote]:
        ...


class EquityPriceSource(Protocol):
    """Interface of the equity price provider (native-currency quotes)."""

    def get_quotes(self, price_keys: list[str]) -> Mapping[str, EquityQuote]:
        ...


class FXRateSource(Protocol):
    """Interface of the FX provider."""

    def get_rates(self, base_currency: str, targets: list[str]) -> FXRateTable:
        ...

    def get_eur_usd_change_24h(self) -> Decimal:
        ...
