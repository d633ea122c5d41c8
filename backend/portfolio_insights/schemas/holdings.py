# backend/portfolio_insights/schemas/holdings.py
"""
Pydantic schemas for engine input.

These schemas are the ingestion boundary:
- Currency codes and tickers are normalized
- Free-text tags (crypto subcategory, acquisition method, equity category)
  are parsed into closed enums
- Amounts, prices and rates are coerced to Decimal

Each schema converts into its frozen engine type with to_domain().

Usage:
    request = ValuationRequest.model_validate(payload)
    summary = PortfolioInsightsService().compute_summary(request.to_domain())
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from portfolio_insights.schemas.validators import (
    normalize_currency_keys,
    normalize_price_id,
    normalize_ticker,
    validate_currency,
)
from portfolio_insights.services.valuation.classification import (
    parse_acquisition_method,
    parse_crypto_kind,
    parse_equity_category,
)
from portfolio_insights.services.valuation.types import (
    CashHolding,
    CashKind,
    CryptoAsset,
    CryptoPosition,
    CryptoQuote,
    EquityAsset,
    EquityPosition,
    EquityQuote,
    FXRateTable,
    ValuationInput,
)


# =============================================================================
# CRYPTO
# =============================================================================

class CryptoPositionInput(BaseModel):
    """One crypto position at a wallet or exchange."""

    quantity: Decimal = Field(
        ...,
        ge=0,
        description="Units held at this venue",
        examples=["0.5", "1200"]
    )
    venue: str = Field(default="", description="Wallet or exchange name")
    acquisition_method: str | None = Field(
        default=None,
        description="bought, swapped, mined, staked, airdrop or other (free text)",
        examples=["bought", "Staked"]
    )
    apy: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Annual yield in percent (e.g. 4.5)"
    )

    def to_domain(self) -> CryptoPosition:
        return CryptoPosition(
            quantity=self.quantity,
            venue=self.venue.strip(),
            acquisition_method=parse_acquisition_method(self.acquisition_method),
            apy=self.apy,
        )


class CryptoAssetInput(BaseModel):
    """A crypto asset with its positions."""

    price_id: str = Field(
        ...,
        description="Price-provider id used to look up the quote",
        examples=["bitcoin", "usd-coin"]
    )
    ticker: str = Field(..., min_length=1, examples=["BTC", "USDC"])
    name: str = Field(default="", examples=["Bitcoin"])
    subcategory: str | None = Field(
        default=None,
        description='Free-text tag; "Stablecoin" (any case) moves the asset to cash',
        examples=["Layer 1", "Stablecoin"]
    )
    positions: list[CryptoPositionInput] = Field(default_factory=list)

    @field_validator('price_id')
    @classmethod
    def validate_and_normalize_price_id(cls, v: str) -> str:
        return normalize_price_id(v)

    @field_validator('ticker')
    @classmethod
    def validate_and_normalize_ticker(cls, v: str) -> str:
        return normalize_ticker(v)

    def to_domain(self) -> CryptoAsset:
        return CryptoAsset(
            price_id=self.price_id,
            ticker=self.ticker,
            name=self.name.strip() or self.ticker,
            kind=parse_crypto_kind(self.subcategory),
            subcategory=self.subcategory,
            positions=tuple(p.to_domain() for p in self.positions),
        )


class CryptoQuoteInput(BaseModel):
    """Crypto price and 24h change, each keyed by quote currency."""

    prices: dict[str, Decimal] = Field(
        ...,
        description="Currency code → price per unit",
        examples=[{"USD": "65000", "EUR": "60000"}]
    )
    changes_24h: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Currency code → 24h % change",
        examples=[{"USD": "2.1", "EUR": "1.8"}]
    )

    @field_validator('prices', 'changes_24h')
    @classmethod
    def validate_and_normalize_currency_keys(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        return normalize_currency_keys(v)

    @field_validator('prices')
    @classmethod
    def validate_positive_prices(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        for code, price in v.items():
            if price < 0:
                raise ValueError(f"Price in {code} cannot be negative")
        return v

    def to_domain(self) -> CryptoQuote:
        return CryptoQuote(prices=dict(self.prices), changes_24h=dict(self.changes_24h))


# =============================================================================
# EQUITIES
# =============================================================================

class EquityPositionInput(BaseModel):
    """One equity position at a broker."""

    quantity: Decimal = Field(..., ge=0, examples=["10", "2.5"])
    venue: str = Field(default="", description="Broker name")

    def to_domain(self) -> EquityPosition:
        return EquityPosition(quantity=self.quantity, venue=self.venue.strip())


class EquityAssetInput(BaseModel):
    """A stock, ETF or bond with its positions."""

    ticker: str = Field(..., min_length=1, examples=["AAPL", "VWCE"])
    name: str = Field(default="", examples=["Apple Inc."])
    currency: str = Field(
        ...,
        description="Trading currency (ISO 4217)",
        examples=["USD", "EUR"]
    )
    category: str | None = Field(
        default=None,
        description="individual_stock, etf, bond_fixed_income or other (free text)",
        examples=["etf", "Stock"]
    )
    subtype: str | None = Field(default=None, examples=["ETF UCITS"])
    tags: list[str] = Field(
        default_factory=list,
        description="Theme tags; the first one is the primary tag",
        examples=[["World", "Dividend"]]
    )
    quote_key: str | None = Field(
        default=None,
        description="Provider symbol when it differs from the ticker",
        examples=["VWCE.DE"]
    )
    positions: list[EquityPositionInput] = Field(default_factory=list)

    @field_validator('ticker')
    @classmethod
    def validate_and_normalize_ticker(cls, v: str) -> str:
        return normalize_ticker(v)

    @field_validator('currency')
    @classmethod
    def validate_and_normalize_currency(cls, v: str) -> str:
        return validate_currency(v)

    @field_validator('quote_key')
    @classmethod
    def normalize_quote_key(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_ticker(v) or None

    def to_domain(self) -> EquityAsset:
        return EquityAsset(
            ticker=self.ticker,
            name=self.name.strip() or self.ticker,
            currency=self.currency,
            category=parse_equity_category(self.category),
            subtype=self.subtype.strip() if self.subtype and self.subtype.strip() else None,
            tags=tuple(tag.strip() for tag in self.tags if tag.strip()),
            quote_key=self.quote_key,
            positions=tuple(p.to_domain() for p in self.positions),
        )


class EquityQuoteInput(BaseModel):
    """Native-currency price and 24h % change of an equity or index."""

    price: Decimal = Field(..., ge=0, examples=["189.50"])
    change_24h: Decimal = Field(default=Decimal("0"), examples=["-0.8"])
    currency: str | None = Field(default=None, examples=["USD"])

    @field_validator('currency')
    @classmethod
    def validate_and_normalize_currency(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_currency(v)

    def to_domain(self) -> EquityQuote:
        return EquityQuote(price=self.price, change_24h=self.change_24h, currency=self.currency)


# =============================================================================
# CASH
# =============================================================================

class CashHoldingInput(BaseModel):
    """A bank account, exchange deposit or broker deposit."""

    kind: CashKind = Field(default=CashKind.BANK_ACCOUNT)
    name: str = Field(..., min_length=1, examples=["Savings"])
    currency: str = Field(..., examples=["EUR"])
    amount: Decimal = Field(..., examples=["1000.00"])
    apy: Decimal = Field(default=Decimal("0"), ge=0, examples=["3.5"])
    venue: str = Field(default="", description="Bank, exchange or broker name")

    @field_validator('currency')
    @classmethod
    def validate_and_normalize_currency(cls, v: str) -> str:
        return validate_currency(v)

    def to_domain(self) -> CashHolding:
        return CashHolding(
            kind=self.kind,
            name=self.name.strip(),
            currency=self.currency,
            amount=self.amount,
            apy=self.apy,
            venue=self.venue.strip(),
        )


# =============================================================================
# FX
# =============================================================================

class FXRateTableInput(BaseModel):
    """
    Rates anchored to one currency.

    rates[C] is units of C per one unit of the anchor. Format example:
    anchor USD, {"EUR": 0.92} means 1 USD = 0.92 EUR.
    """

    anchor: str = Field(..., examples=["USD"])
    rates: dict[str, Decimal] = Field(
        default_factory=dict,
        examples=[{"EUR": "0.92", "GBP": "0.79"}]
    )

    @field_validator('anchor')
    @classmethod
    def validate_anchor(cls, v: str) -> str:
        return validate_currency(v)

    @field_validator('rates')
    @classmethod
    def validate_rates(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        normalized = normalize_currency_keys(v)
        for code, rate in normalized.items():
            if rate <= 0:
                raise ValueError(f"Rate for {code} must be positive")
        return normalized

    def to_domain(self) -> FXRateTable:
        return FXRateTable(anchor=self.anchor, rates=dict(self.rates))


# =============================================================================
# REQUEST
# =============================================================================

class ValuationRequest(BaseModel):
    """Everything one computation pass needs, as received from the caller."""

    model_config = ConfigDict(extra="forbid")

    primary_currency: str = Field(..., examples=["USD", "EUR"])
    crypto_assets: list[CryptoAssetInput] = Field(default_factory=list)
    crypto_quotes: dict[str, CryptoQuoteInput] = Field(
        default_factory=dict,
        description="Quotes keyed by crypto price id"
    )
    equity_assets: list[EquityAssetInput] = Field(default_factory=list)
    equity_quotes: dict[str, EquityQuoteInput] = Field(
        default_factory=dict,
        description="Quotes keyed by ticker (or quote_key)"
    )
    cash_holdings: list[CashHoldingInput] = Field(default_factory=list)
    fx_rates: FXRateTableInput | None = Field(
        default=None,
        description="Rate table anchored to primary_currency"
    )
    eur_usd_change_24h: Decimal = Field(
        default=Decimal("0"),
        description="24h % change of EUR/USD (positive means EUR strengthened)"
    )
    index_quotes: dict[str, EquityQuoteInput] = Field(
        default_factory=dict,
        description="Market indices shown in the overview (e.g. S&P 500, gold)"
    )

    @field_validator('primary_currency')
    @classmethod
    def validate_primary_currency(cls, v: str) -> str:
        return validate_currency(v)

    @field_validator('crypto_quotes')
    @classmethod
    def normalize_crypto_quote_keys(
            cls, v: dict[str, CryptoQuoteInput]
    ) -> dict[str, CryptoQuoteInput]:
        return {normalize_price_id(key): quote for key, quote in v.items()}

    @field_validator('equity_quotes')
    @classmethod
    def normalize_equity_quote_keys(
            cls, v: dict[str, EquityQuoteInput]
    ) -> dict[str, EquityQuoteInput]:
        return {normalize_ticker(key): quote for key, quote in v.items()}

    @model_validator(mode="after")
    def validate_rate_anchor(self) -> "ValuationRequest":
        """The rate table must be anchored to the primary currency."""
        if self.fx_rates is not None and self.fx_rates.anchor != self.primary_currency:
            raise ValueError(
                f"fx_rates must be anchored to the primary currency {self.primary_currency}, "
                f"got {self.fx_rates.anchor}"
            )
        return self

    def to_domain(self) -> ValuationInput:
        return ValuationInput(
            primary_currency=self.primary_currency,
            crypto_assets=tuple(a.to_domain() for a in self.crypto_assets),
            crypto_quotes={k: q.to_domain() for k, q in self.crypto_quotes.items()},
            equity_assets=tuple(a.to_domain() for a in self.equity_assets),
            equity_quotes={k: q.to_domain() for k, q in self.equity_quotes.items()},
            cash_holdings=tuple(h.to_domain() for h in self.cash_holdings),
            fx_rates=self.fx_rates.to_domain() if self.fx_rates else None,
            eur_usd_change_24h=self.eur_usd_change_24h,
            index_quotes={k: q.to_domain() for k, q in self.index_quotes.items()},
        )
