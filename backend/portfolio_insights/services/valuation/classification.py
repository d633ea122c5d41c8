# backend/portfolio_insights/services/valuation/classification.py
"""
Classification rules for holdings.

Two concerns live here, both kept apart from the change arithmetic:

1. Tag parsing (used at the ingestion boundary by the pydantic schemas):
   free-text subcategory / acquisition method / category strings become
   closed enums, so the calculators never compare strings.

2. Stablecoin reclassification: a crypto asset of kind STABLECOIN is valued
   in the cash bucket, and its FX exposure follows the fiat currency it is
   pegged to. Peg inference is a swappable PegCurrencyStrategy.
"""

from __future__ import annotations

from portfolio_insights.services.constants import (
    DEFAULT_PEG_CURRENCY,
    PEG_CURRENCY_KEYWORDS,
    STABLECOIN_TAG,
)
from portfolio_insights.services.protocols import PegCurrencyStrategy
from portfolio_insights.services.valuation.types import (
    AcquisitionMethod,
    AssetBucket,
    CryptoAsset,
    CryptoKind,
    EquityCategory,
)

# Acquisition methods counted by the "mined & staked" insight
MINED_OR_STAKED: frozenset[AcquisitionMethod] = frozenset(
    {AcquisitionMethod.MINED, AcquisitionMethod.STAKED}
)

# Loose spellings accepted for equity categories
_EQUITY_CATEGORY_ALIASES: dict[str, EquityCategory] = {
    "stock": EquityCategory.INDIVIDUAL_STOCK,
    "stocks": EquityCategory.INDIVIDUAL_STOCK,
    "equity": EquityCategory.INDIVIDUAL_STOCK,
    "etfs": EquityCategory.ETF,
    "bond": EquityCategory.BOND_FIXED_INCOME,
    "bonds": EquityCategory.BOND_FIXED_INCOME,
    "fixed_income": EquityCategory.BOND_FIXED_INCOME,
}


# =============================================================================
# TAG PARSING
# =============================================================================

def parse_crypto_kind(subcategory: str | None) -> CryptoKind:
    """STABLECOIN iff the subcategory equals "Stablecoin" in any case."""
    if subcategory and subcategory.strip().lower() == STABLECOIN_TAG:
        return CryptoKind.STABLECOIN
    return CryptoKind.STANDARD


def parse_acquisition_method(raw: str | None) -> AcquisitionMethod:
    """
    Map a free-text acquisition method onto AcquisitionMethod.

    Empty means BOUGHT (the storage default); unknown values map to OTHER.
    """
    if not raw or not raw.strip():
        return AcquisitionMethod.BOUGHT
    try:
        return AcquisitionMethod(raw.strip().lower())
    except ValueError:
        return AcquisitionMethod.OTHER


def parse_equity_category(raw: str | None) -> EquityCategory:
    if not raw or not raw.strip():
        return EquityCategory.OTHER
    normalized = raw.strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return EquityCategory(normalized)
    except ValueError:
        return _EQUITY_CATEGORY_ALIASES.get(normalized, EquityCategory.OTHER)


# =============================================================================
# PEG CURRENCY
# =============================================================================

class KeywordPegCurrencyStrategy:
    """
    Infers a stablecoin's peg from currency codes in its ticker or name.

    Keywords are checked in order; the default applies when none match.
    Example: "EURC" → EUR, "Tether" → USD.
    """

    def __init__(
            self,
            keywords: tuple[str, ...] = PEG_CURRENCY_KEYWORDS,
            default: str = DEFAULT_PEG_CURRENCY,
    ) -> None:
        self._keywords = tuple(k.upper() for k in keywords)
        self._default = default.upper()

    def infer_peg(self, asset: CryptoAsset) -> str:
        ticker = asset.ticker.upper()
        name = asset.name.upper()
        for keyword in self._keywords:
            if keyword in ticker or keyword in name:
                return keyword
        return self._default


# =============================================================================
# STABLECOIN RECLASSIFIER
# =============================================================================

class StablecoinReclassifier:
    """
    Routes stablecoins into the cash bucket.

    The peg currency only drives FX attribution and the currency-exposure
    breakdown; the stablecoin's value is still read from its quote in the
    primary currency like any other crypto asset.
    """

    def __init__(self, peg_strategy: PegCurrencyStrategy | None = None) -> None:
        self._peg_strategy: PegCurrencyStrategy = peg_strategy or KeywordPegCurrencyStrategy()

    @staticmethod
    def is_stablecoin(asset: CryptoAsset) -> bool:
        return asset.kind is CryptoKind.STABLECOIN

    def bucket_for(self, asset: CryptoAsset) -> AssetBucket:
        return AssetBucket.CASH if self.is_stablecoin(asset) else AssetBucket.CRYPTO

    def peg_currency_for(self, asset: CryptoAsset) -> str | None:
        """Peg currency for stablecoins, None for every other crypto asset."""
        if not self.is_stablecoin(asset):
            return None
        return self._peg_strategy.infer_peg(asset).upper()
