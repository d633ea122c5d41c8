# backend/portfolio_insights/services/valuation/types.py
"""
Data types for the valuation and insights engine.

These dataclasses are used internally by the calculators. They are NOT
Pydantic schemas: input validation lives in portfolio_insights/schemas/holdings.py
and serialization in portfolio_insights/schemas/insights.py.

Design Principles:
- Inputs are frozen snapshots; the engine never mutates them
- Use Decimal for ALL financial values (never float)
- Closed enums instead of free-text tags past the ingestion boundary
- Percentages are expressed in percent units (1.5 means 1.5%)

Type Hierarchy:
    Inputs
        CryptoAsset / CryptoPosition / CryptoQuote
        EquityAsset / EquityPosition / EquityQuote
        CashHolding
        FXRateTable
        ValuationInput      - Everything one computation pass needs
    Valuation
        HoldingAttribution  - Native vs FX split of one holding's 24h move
        ValuedCrypto / ValuedEquity / ValuedCash
        ExcludedHolding     - Holding left out of every total, with reason
        ValuedPortfolio     - Aggregator output
    Results
        ClassChange         - Additive value/change record for one bucket
        PortfolioSummary    - Totals, allocation, attributed 24h change
        BreakdownEntry, CashCurrencyEntry, TopHolding, MarketOverview
        DashboardInsights   - Display-ready insights per asset class
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from portfolio_insights.services.constants import HUNDRED, ONE, ZERO


# =============================================================================
# ENUMS
# =============================================================================

class AssetBucket(str, Enum):
    """Top-level asset class a holding is valued under (after reclassification)."""
    CRYPTO = "crypto"
    STOCKS = "stocks"
    CASH = "cash"


class CryptoKind(str, Enum):
    STANDARD = "standard"
    STABLECOIN = "stablecoin"


class AcquisitionMethod(str, Enum):
    BOUGHT = "bought"
    SWAPPED = "swapped"
    MINED = "mined"
    STAKED = "staked"
    AIRDROP = "airdrop"
    OTHER = "other"


class EquityCategory(str, Enum):
    INDIVIDUAL_STOCK = "individual_stock"
    ETF = "etf"
    BOND_FIXED_INCOME = "bond_fixed_income"
    OTHER = "other"


class CashKind(str, Enum):
    """The three cash flavors are equivalent for valuation purposes."""
    BANK_ACCOUNT = "bank_account"
    EXCHANGE_DEPOSIT = "exchange_deposit"
    BROKER_DEPOSIT = "broker_deposit"


class MissingRatePolicy(str, Enum):
    """
    Handling of an amount whose currency has no entry in the rate table.

    Attributes:
        EXCLUDE: Contribute nothing and flag the holding as excluded
        IDENTITY: Assume a 1:1 rate (legacy behaviour), flagged as a warning
        RAISE: Raise FXConversionError
    """
    EXCLUDE = "exclude"
    IDENTITY = "identity"
    RAISE = "raise"


class ExclusionReason(str, Enum):
    MISSING_PRICE = "missing_price"
    MISSING_FX_RATE = "missing_fx_rate"
    CURRENCY_MISMATCH = "currency_mismatch"


# =============================================================================
# CRYPTO INPUTS
# =============================================================================

@dataclass(frozen=True)
class CryptoPosition:
    """One crypto holding of an asset at one venue (wallet or exchange)."""

    quantity: Decimal
    venue: str = ""
    acquisition_method: AcquisitionMethod = AcquisitionMethod.BOUGHT
    apy: Decimal = ZERO


@dataclass(frozen=True)
class CryptoAsset:
    """
    A crypto asset with all of its positions.

    Attributes:
        price_id: Identifier used to look up the CryptoQuote (e.g. "bitcoin")
        ticker: Display ticker (e.g. "BTC")
        name: Display name (e.g. "Bitcoin")
        kind: STABLECOIN moves the asset into the cash bucket
        subcategory: Original free-text tag, kept for display
        positions: Positions across venues
    """

    price_id: str
    ticker: str
    name: str
    kind: CryptoKind = CryptoKind.STANDARD
    subcategory: str | None = None
    positions: tuple[CryptoPosition, ...] = ()

    @property
    def total_quantity(self) -> Decimal:
        return sum((p.quantity for p in self.positions), ZERO)


@dataclass(frozen=True)
class CryptoQuote:
    """
    Crypto price quoted natively in several anchor currencies.

    Attributes:
        prices: Currency code -> price per unit (e.g. {"USD": ..., "EUR": ...})
        changes_24h: Currency code -> 24h % change of the price in that currency
    """

    prices: Mapping[str, Decimal]
    changes_24h: Mapping[str, Decimal] = field(default_factory=dict)

    def price_in(self, currency: str) -> Decimal | None:
        return self.prices.get(currency.upper())

    def change_in(self, currency: str) -> Decimal | None:
        return self.changes_24h.get(currency.upper())


# =============================================================================
# EQUITY INPUTS
# =============================================================================

@dataclass(frozen=True)
class EquityPosition:
    """One equity holding at one broker."""

    quantity: Decimal
    venue: str = ""


@dataclass(frozen=True)
class EquityAsset:
    """
    A listed stock, ETF or bond with all of its positions.

    Attributes:
        ticker: Display ticker
        name: Display name
        currency: Trading currency; the quote's price is in this currency
        category: Equity category used by the breakdown
        subtype: Optional instrument subtype (e.g. "ETF UCITS")
        tags: Theme/strategy tags; the first one is the primary tag
        quote_key: Provider ticker if it differs from `ticker` (e.g. "VWCE.DE")
        positions: Positions across brokers
    """

    ticker: str
    name: str
    currency: str
    category: EquityCategory = EquityCategory.OTHER
    subtype: str | None = None
    tags: tuple[str, ...] = ()
    quote_key: str | None = None
    positions: tuple[EquityPosition, ...] = ()

    @property
    def price_key(self) -> str:
        return self.quote_key or self.ticker

    @property
    def total_quantity(self) -> Decimal:
        return sum((p.quantity for p in self.positions), ZERO)

    @property
    def primary_tag(self) -> str | None:
        if not self.tags:
            return None
        tag = self.tags[0].strip()
        return tag or None


@dataclass(frozen=True)
class EquityQuote:
    """
    Native-currency price and 24h % change of one equity.

    currency, when the provider reports it, must match the asset's trading
    currency; a mismatching quote is not used.
    """

    price: Decimal
    change_24h: Decimal = ZERO
    currency: str | None = None


# =============================================================================
# CASH INPUTS
# =============================================================================

@dataclass(frozen=True)
class CashHolding:
    """A bank account, exchange deposit or broker deposit."""

    kind: CashKind
    name: str
    currency: str
    amount: Decimal
    apy: Decimal = ZERO
    venue: str = ""


# =============================================================================
# FX
# =============================================================================

@dataclass(frozen=True)
class FXRateTable:
    """
    Exchange rates anchored to one currency.

    rates[C] is the number of units of C per one unit of the anchor, so an
    amount A in C is worth A / rates[C] in the anchor currency. The anchor's
    own rate is implicitly 1 and never looked up.
    """

    anchor: str
    rates: Mapping[str, Decimal] = field(default_factory=dict)

    def rate_for(self, currency: str) -> Decimal | None:
        """Rate for `currency`, or None if absent or not positive."""
        code = currency.upper()
        if code == self.anchor.upper():
            return ONE
        rate = self.rates.get(code)
        if rate is None or rate <= ZERO:
            return None
        return rate


# =============================================================================
# COMPUTATION INPUT
# =============================================================================

@dataclass(frozen=True)
class HoldingsBundle:
    """All holdings of one user, as returned by a HoldingsSource."""

    crypto_assets: tuple[CryptoAsset, ...] = ()
    equity_assets: tuple[EquityAsset, ...] = ()
    cash_holdings: tuple[CashHolding, ...] = ()


@dataclass(frozen=True)
class ValuationInput:
    """
    Everything one computation pass needs.

    Attributes:
        primary_currency: Currency all totals are expressed in
        crypto_assets / crypto_quotes: Crypto holdings and quotes keyed by price_id
        equity_assets / equity_quotes: Equity holdings and quotes keyed by price_key
        cash_holdings: Fiat cash holdings
        fx_rates: Rate table anchored to primary_currency
        eur_usd_change_24h: 24h % change of EUR/USD (+0.5 means EUR gained 0.5%)
        index_quotes: Market indices passed through to the market overview
    """

    primary_currency: str
    crypto_assets: tuple[CryptoAsset, ...] = ()
    crypto_quotes: Mapping[str, CryptoQuote] = field(default_factory=dict)
    equity_assets: tuple[EquityAsset, ...] = ()
    equity_quotes: Mapping[str, EquityQuote] = field(default_factory=dict)
    cash_holdings: tuple[CashHolding, ...] = ()
    fx_rates: FXRateTable | None = None
    eur_usd_change_24h: Decimal = ZERO
    index_quotes: Mapping[str, EquityQuote] = field(default_factory=dict)

    @property
    def rate_table(self) -> FXRateTable:
        """The supplied table, or an empty one anchored to the primary currency."""
        if self.fx_rates is not None:
            return self.fx_rates
        return FXRateTable(anchor=self.primary_currency)


# =============================================================================
# PER-HOLDING VALUATION
# =============================================================================

@dataclass(frozen=True)
class HoldingAttribution:
    """
    One holding's 24h move split into a native and an FX-only component.

    total_change_percent = native_change_percent + fx_change_percent
    (linear, not compounded).
    """

    value: Decimal
    native_change_percent: Decimal
    fx_change_percent: Decimal

    @property
    def total_change_percent(self) -> Decimal:
        return self.native_change_percent + self.fx_change_percent

    @property
    def value_change(self) -> Decimal:
        """Absolute 24h change in the primary currency."""
        return self.value * self.total_change_percent / HUNDRED

    @property
    def fx_value_change(self) -> Decimal:
        return self.value * self.fx_change_percent / HUNDRED


@dataclass(frozen=True)
class ValuedCrypto:
    """
    A priced crypto asset.

    Attributes:
        asset: The input asset
        bucket: CRYPTO, or CASH for stablecoins
        unit_price: Price per unit in the primary currency
        value: total_quantity × unit_price
        attribution: 24h change split
        peg_currency: Inferred fiat peg (stablecoins only)
        value_usd / value_eur: Value read from the USD / EUR quote (None if not quoted)
    """

    asset: CryptoAsset
    bucket: AssetBucket
    unit_price: Decimal
    value: Decimal
    attribution: HoldingAttribution
    peg_currency: str | None = None
    value_usd: Decimal | None = None
    value_eur: Decimal | None = None

    def position_value(self, position: CryptoPosition) -> Decimal:
        return position.quantity * self.unit_price


@dataclass(frozen=True)
class ValuedEquity:
    """A priced equity asset converted to the primary currency."""

    asset: EquityAsset
    quote: EquityQuote
    native_value: Decimal
    value: Decimal
    attribution: HoldingAttribution


@dataclass(frozen=True)
class ValuedCash:
    """A cash holding converted to the primary currency."""

    holding: CashHolding
    value: Decimal
    attribution: HoldingAttribution


@dataclass(frozen=True)
class ExcludedHolding:
    """A holding left out of every total in this computation pass."""

    bucket: AssetBucket
    label: str
    reason: ExclusionReason
    currency: str | None = None


@dataclass
class ValuedPortfolio:
    """
    Output of the valuation aggregator.

    Stablecoins live in `stablecoins`, never in `crypto`.
    """

    primary_currency: str
    eur_usd_change_24h: Decimal
    crypto: list[ValuedCrypto] = field(default_factory=list)
    stablecoins: list[ValuedCrypto] = field(default_factory=list)
    equities: list[ValuedEquity] = field(default_factory=list)
    cash: list[ValuedCash] = field(default_factory=list)
    excluded: list[ExcludedHolding] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# =============================================================================
# SUMMARY RESULTS
# =============================================================================

@dataclass(frozen=True)
class ClassChange:
    """
    Value and absolute 24h change of one bucket, in the primary currency.

    Absolute changes are plain sums of per-holding contributions, so records
    can be added together and still reconcile exactly.
    """

    value: Decimal = ZERO
    value_change_24h: Decimal = ZERO
    fx_value_change_24h: Decimal = ZERO

    @classmethod
    def from_attributions(cls, attributions: list[HoldingAttribution]) -> ClassChange:
        return cls(
            value=sum((a.value for a in attributions), ZERO),
            value_change_24h=sum((a.value_change for a in attributions), ZERO),
            fx_value_change_24h=sum((a.fx_value_change for a in attributions), ZERO),
        )

    def __add__(self, other: ClassChange) -> ClassChange:
        return ClassChange(
            value=self.value + other.value,
            value_change_24h=self.value_change_24h + other.value_change_24h,
            fx_value_change_24h=self.fx_value_change_24h + other.fx_value_change_24h,
        )

    @property
    def native_value_change_24h(self) -> Decimal:
        return self.value_change_24h - self.fx_value_change_24h

    @property
    def change_24h_percent(self) -> Decimal:
        """Value-weighted 24h % change (0 when the bucket is empty)."""
        if self.value <= ZERO:
            return ZERO
        return self.value_change_24h / self.value * HUNDRED

    @property
    def fx_change_24h_percent(self) -> Decimal:
        if self.value <= ZERO:
            return ZERO
        return self.fx_value_change_24h / self.value * HUNDRED


@dataclass(frozen=True)
class AttributedChanges:
    """
    Per-bucket change records of one valuation pass.

    cash = stablecoins + fiat_cash; total = crypto + stocks + cash.
    """

    crypto: ClassChange
    stocks: ClassChange
    stablecoins: ClassChange
    fiat_cash: ClassChange

    @property
    def cash(self) -> ClassChange:
        return self.stablecoins + self.fiat_cash

    @property
    def total(self) -> ClassChange:
        return self.crypto + self.stocks + self.cash


@dataclass(frozen=True)
class Allocation:
    """Bucket share of the total value, in percent."""

    crypto: Decimal = ZERO
    stocks: Decimal = ZERO
    cash: Decimal = ZERO


@dataclass(frozen=True)
class DualCurrencyValues:
    """
    Values in both USD and EUR for snapshot storage.

    A field is None when the rate needed to express it is unavailable.
    """

    total_usd: Decimal | None = None
    total_eur: Decimal | None = None
    crypto_usd: Decimal | None = None
    crypto_eur: Decimal | None = None
    stocks_usd: Decimal | None = None
    stocks_eur: Decimal | None = None
    cash_usd: Decimal | None = None
    cash_eur: Decimal | None = None


@dataclass
class PortfolioSummary:
    """
    Portfolio totals and attributed 24h change in the primary currency.

    Invariants:
        total_value == crypto_value + stocks_value + cash_value
        total.value_change_24h == crypto + stocks + cash value changes
        cash == stablecoins + fiat_cash

    Attributes:
        crypto: Non-stablecoin crypto
        stocks: Equities
        cash: Fiat cash plus stablecoins
        stablecoins / fiat_cash: The two halves of `cash`
        total: crypto + stocks + cash
        excluded: Holdings left out (missing quote or FX rate)
    """

    primary_currency: str
    crypto: ClassChange
    stocks: ClassChange
    cash: ClassChange
    stablecoins: ClassChange
    fiat_cash: ClassChange
    total: ClassChange
    allocation: Allocation
    dual_currency: DualCurrencyValues
    excluded: list[ExcludedHolding] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_value(self) -> Decimal:
        return self.total.value

    @property
    def crypto_value(self) -> Decimal:
        return self.crypto.value

    @property
    def stocks_value(self) -> Decimal:
        return self.stocks.value

    @property
    def cash_value(self) -> Decimal:
        return self.cash.value

    @property
    def stablecoin_value(self) -> Decimal:
        return self.stablecoins.value

    @property
    def change_24h_percent(self) -> Decimal:
        return self.total.change_24h_percent

    @property
    def fx_change_24h_percent(self) -> Decimal:
        return self.total.fx_change_24h_percent

    @property
    def total_value_change_24h(self) -> Decimal:
        return self.total.value_change_24h

    @property
    def fx_value_change_24h(self) -> Decimal:
        return self.total.fx_value_change_24h

    @property
    def has_complete_data(self) -> bool:
        return not self.excluded


# =============================================================================
# INSIGHT RESULTS
# =============================================================================

@dataclass
class BreakdownEntry:
    """
    A labeled slice of a chart.

    Attributes:
        label: Display label
        value: Value in the primary currency
        percent: Share of the parent total, in percent
        children: Nested sub-entries (subtypes, alt coins), sorted by value
        tag_breakdown: Primary-tag sub-entries (equities only)
    """

    label: str
    value: Decimal
    percent: Decimal
    children: list[BreakdownEntry] | None = None
    tag_breakdown: list[BreakdownEntry] | None = None


@dataclass(frozen=True)
class CashCurrencyEntry:
    """Cash exposure to one currency: fiat holdings plus pegged stablecoins."""

    currency: str
    value: Decimal
    percent: Decimal
    fiat_value: Decimal
    stablecoin_value: Decimal


@dataclass(frozen=True)
class TopHolding:
    name: str
    ticker: str
    value: Decimal
    percent: Decimal


@dataclass
class MarketOverview:
    """Reference market figures shown next to the portfolio."""

    btc_price_usd: Decimal = ZERO
    btc_change_24h: Decimal = ZERO
    eth_price_usd: Decimal = ZERO
    eth_change_24h: Decimal = ZERO
    eur_usd_rate: Decimal = ZERO
    eur_usd_change_24h: Decimal = ZERO
    indices: dict[str, EquityQuote] = field(default_factory=dict)


@dataclass
class CryptoInsights:
    asset_count: int = 0
    change_24h: Decimal = ZERO
    reference_value: Decimal = ZERO
    dominance_percent: Decimal = ZERO
    mined_staked_value: Decimal = ZERO
    mined_staked_percent: Decimal = ZERO
    mined_staked_count: int = 0
    breakdown: list[BreakdownEntry] = field(default_factory=list)


@dataclass
class EquityInsights:
    """
    Equity card figures.

    change_24h is the value-weighted local-currency price move; the FX part
    is reported by PortfolioSummary.stocks.
    """

    position_count: int = 0
    change_24h: Decimal = ZERO
    breakdown: list[BreakdownEntry] = field(default_factory=list)
    top_holding: TopHolding | None = None


@dataclass
class CashInsights:
    account_count: int = 0
    weighted_avg_apy: Decimal = ZERO
    apy_bearing_value: Decimal = ZERO
    income_daily: Decimal = ZERO
    income_monthly: Decimal = ZERO
    income_yearly: Decimal = ZERO
    currency_breakdown: list[CashCurrencyEntry] = field(default_factory=list)


@dataclass
class DashboardInsights:
    primary_currency: str
    market: MarketOverview
    crypto: CryptoInsights
    equities: EquityInsights
    cash: CashInsights


@dataclass
class Dashboard:
    """Summary and insights computed from the same valuation pass."""

    summary: PortfolioSummary
    insights: DashboardInsights
