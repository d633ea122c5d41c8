# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Sample data factories for holdings, quotes and rate tables
- Mock collaborator fixtures (holdings, crypto/equity prices, FX)
"""

from collections.abc import Mapping
from decimal import Decimal

import pytest

from portfolio_insights.services.valuation.types import (
    AcquisitionMethod,
    CashHolding,
    CashKind,
    CryptoAsset,
    CryptoKind,
    CryptoPosition,
    CryptoQuote,
    EquityAsset,
    EquityCategory,
    EquityPosition,
    EquityQuote,
    FXRateTable,
    HoldingsBundle,
    ValuationInput,
)
from portfolio_insights.utils.context import clear_run_id


@pytest.fixture(autouse=True)
def _reset_run_id():
    """Every test starts without a bound run id."""
    clear_run_id()
    yield
    clear_run_id()


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def create_crypto_asset(
        price_id: str = "bitcoin",
        ticker: str = "BTC",
        name: str = "Bitcoin",
        quantity: Decimal | str = "1",
        subcategory: str | None = None,
        acquisition_method: AcquisitionMethod = AcquisitionMethod.BOUGHT,
        apy: Decimal | str = "0",
        positions: tuple[CryptoPosition, ...] | None = None,
) -> CryptoAsset:
    """Factory for a crypto asset with a single position (unless positions is given)."""
    if positions is None:
        positions = (CryptoPosition(
            quantity=Decimal(quantity),
            venue="Ledger",
            acquisition_method=acquisition_method,
            apy=Decimal(apy),
        ),)
    kind = (
        CryptoKind.STABLECOIN
        if subcategory and subcategory.lower() == "stablecoin"
        else CryptoKind.STANDARD
    )
    return CryptoAsset(
        price_id=price_id,
        ticker=ticker,
        name=name,
        kind=kind,
        subcategory=subcategory,
        positions=positions,
    )


def create_stablecoin(
        price_id: str = "usd-coin",
        ticker: str = "USDC",
        name: str = "USD Coin",
        quantity: Decimal | str = "1000",
        apy: Decimal | str = "0",
) -> CryptoAsset:
    """Factory for a stablecoin-tagged crypto asset."""
    return create_crypto_asset(
        price_id=price_id,
        ticker=ticker,
        name=name,
        quantity=quantity,
        subcategory="Stablecoin",
        apy=apy,
    )


def create_crypto_quote(
        usd: Decimal | str | None = "50000",
        eur: Decimal | str | None = "46000",
        change_usd: Decimal | str | None = "0",
        change_eur: Decimal | str | None = "0",
) -> CryptoQuote:
    """Factory for a dual-currency crypto quote (None leaves a currency out)."""
    prices = {}
    changes = {}
    if usd is not None:
        prices["USD"] = Decimal(usd)
    if eur is not None:
        prices["EUR"] = Decimal(eur)
    if change_usd is not None:
        changes["USD"] = Decimal(change_usd)
    if change_eur is not None:
        changes["EUR"] = Decimal(change_eur)
    return CryptoQuote(prices=prices, changes_24h=changes)


def create_equity_asset(
        ticker: str = "AAPL",
        name: str = "Apple Inc.",
        currency: str = "USD",
        quantity: Decimal | str = "10",
        category: EquityCategory = EquityCategory.INDIVIDUAL_STOCK,
        subtype: str | None = None,
        tags: tuple[str, ...] = (),
        quote_key: str | None = None,
) -> EquityAsset:
    """Factory for an equity asset with a single position."""
    return EquityAsset(
        ticker=ticker,
        name=name,
        currency=currency,
        category=category,
        subtype=subtype,
        tags=tags,
        quote_key=quote_key,
        positions=(EquityPosition(quantity=Decimal(quantity), venue="Broker"),),
    )


def create_equity_quote(
        price: Decimal | str = "100",
        change_24h: Decimal | str = "0",
        currency: str | None = None,
) -> EquityQuote:
    return EquityQuote(price=Decimal(price), change_24h=Decimal(change_24h), currency=currency)


def create_cash_holding(
        amount: Decimal | str = "1000",
        currency: str = "USD",
        apy: Decimal | str = "0",
        name: str = "Checking",
        kind: CashKind = CashKind.BANK_ACCOUNT,
) -> CashHolding:
    """Factory for a cash holding."""
    return CashHolding(
        kind=kind,
        name=name,
        currency=currency,
        amount=Decimal(amount),
        apy=Decimal(apy),
        venue="Bank",
    )


def create_rate_table(anchor: str = "USD", **rates: Decimal | str) -> FXRateTable:
    """Factory for a rate table: create_rate_table("USD", EUR="0.92")."""
    return FXRateTable(anchor=anchor, rates={k: Decimal(v) for k, v in rates.items()})


def create_valuation_input(
        primary_currency: str = "USD",
        crypto_assets: tuple[CryptoAsset, ...] = (),
        crypto_quotes: Mapping[str, CryptoQuote] | None = None,
        equity_assets: tuple[EquityAsset, ...] = (),
        equity_quotes: Mapping[str, EquityQuote] | None = None,
        cash_holdings: tuple[CashHolding, ...] = (),
        fx_rates: FXRateTable | None = None,
        eur_usd_change_24h: Decimal | str = "0",
        index_quotes: Mapping[str, EquityQuote] | None = None,
) -> ValuationInput:
    """Factory for a ValuationInput snapshot."""
    return ValuationInput(
        primary_currency=primary_currency,
        crypto_assets=tuple(crypto_assets),
        crypto_quotes=dict(crypto_quotes or {}),
        equity_assets=tuple(equity_assets),
        equity_quotes=dict(equity_quotes or {}),
        cash_holdings=tuple(cash_holdings),
        fx_rates=fx_rates,
        eur_usd_change_24h=Decimal(eur_usd_change_24h),
        index_quotes=dict(index_quotes or {}),
    )


# =============================================================================
# MOCK COLLABORATORS
# =============================================================================

class MockHoldingsSource:
    """In-memory HoldingsSource keyed by user id."""

    def __init__(self):
        self._holdings: dict[str, HoldingsBundle] = {}
        self._error: Exception | None = None
        self.calls: list[str] = []

    def set_holdings(self, user_id: str, bundle: HoldingsBundle) -> None:
        self._holdings[user_id] = bundle

    def set_error(self, error: Exception) -> None:
        self._error = error

    def get_holdings(self, user_id: str) -> HoldingsBundle:
        self.calls.append(user_id)
        if self._error is not None:
            raise self._error
        return self._holdings.get(user_id, HoldingsBundle())


class MockCryptoPriceSource:
    """CryptoPriceSource returning configured quotes for known ids only."""

    def __init__(self):
        self._quotes: dict[str, CryptoQuote] = {}
        self._error: Exception | None = None
        self.calls: list[tuple[list[str], list[str]]] = []

    def add_quote(self, price_id: str, quote: CryptoQuote) -> None:
        self._quotes[price_id] = quote

    def set_error(self, error: Exception) -> None:
        self._error = error

    def get_prices(self, price_ids: list[str], currencies: list[str]) -> dict[str, CryptoQuote]:
        self.calls.append((list(price_ids), list(currencies)))
        if self._error is not None:
            raise self._error
        return {pid: self._quotes[pid] for pid in price_ids if pid in self._quotes}


class MockEquityPriceSource:
    """EquityPriceSource returning configured quotes for known keys only."""

    def __init__(self):
        self._quotes: dict[str, EquityQuote] = {}
        self._error: Exception | None = None
        self.calls: list[list[str]] = []

    def add_quote(self, price_key: str, quote: EquityQuote) -> None:
        self._quotes[price_key] = quote

    def set_error(self, error: Exception) -> None:
        self._error = error

    def get_quotes(self, price_keys: list[str]) -> dict[str, EquityQuote]:
        self.calls.append(list(price_keys))
        if self._error is not None:
            raise self._error
        return {key: self._quotes[key] for key in price_keys if key in self._quotes}


class MockFXRateSource:
    """FXRateSource backed by one configured table per base currency."""

    def __init__(self, eur_usd_change_24h: Decimal = Decimal("0")):
        self._tables: dict[str, dict[str, Decimal]] = {}
        self._eur_usd_change = eur_usd_change_24h
        self._error: Exception | None = None
        self.calls: list[tuple[str, list[str]]] = []

    def set_rates(self, base_currency: str, **rates: Decimal | str) -> None:
        self._tables[base_currency] = {k: Decimal(v) for k, v in rates.items()}

    def set_error(self, error: Exception) -> None:
        self._error = error

    def get_rates(self, base_currency: str, targets: list[str]) -> FXRateTable:
        self.calls.append((base_currency, list(targets)))
        if self._error is not None:
            raise self._error
        table = self._tables.get(base_currency, {})
        return FXRateTable(
            anchor=base_currency,
            rates={code: table[code] for code in targets if code in table},
        )

    def get_eur_usd_change_24h(self) -> Decimal:
        return self._eur_usd_change


@pytest.fixture
def mock_holdings() -> MockHoldingsSource:
    return MockHoldingsSource()


@pytest.fixture
def mock_crypto_prices() -> MockCryptoPriceSource:
    return MockCryptoPriceSource()


@pytest.fixture
def mock_equity_prices() -> MockEquityPriceSource:
    return MockEquityPriceSource()


@pytest.fixture
def mock_fx() -> MockFXRateSource:
    return MockFXRateSource(eur_usd_change_24h=Decimal("0.5"))
