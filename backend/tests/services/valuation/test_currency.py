# backend/tests/services/valuation/test_currency.py
"""
Tests for currency conversion against an anchored rate table.

Rate convention: rates[C] = units of C per 1 unit of the anchor.
Converting C → anchor DIVIDES by rates[C].
"""

import logging
from decimal import Decimal

import pytest

from portfolio_insights.services.exceptions import FXConversionError
from portfolio_insights.services.valuation.currency import (
    convert,
    convert_from_base,
    convert_to_base,
    cross_rate,
)
from portfolio_insights.services.valuation.types import FXRateTable, MissingRatePolicy
from tests.conftest import create_rate_table


class TestConvertToBase:
    """Tests for convert_to_base()."""

    def test_same_currency_returns_amount_unchanged(self):
        """Same currency needs no rate, even with an empty table."""
        rates = FXRateTable(anchor="USD")

        assert convert_to_base(Decimal("123.45"), "USD", "USD", rates) == Decimal("123.45")

    def test_same_currency_is_case_insensitive(self):
        rates = FXRateTable(anchor="EUR")

        assert convert_to_base(Decimal("10"), "eur", "EUR", rates) == Decimal("10")

    def test_divides_by_rate(self):
        """1000 EUR with 0.92 EUR per USD → 1086.96 USD."""
        rates = create_rate_table("USD", EUR="0.92")

        result = convert_to_base(Decimal("1000"), "EUR", "USD", rates)

        assert result.quantize(Decimal("0.01")) == Decimal("1086.96")

    def test_rate_above_one(self):
        """100 USD with 1.08 USD per EUR → 92.59 EUR."""
        rates = create_rate_table("EUR", USD="1.08")

        result = convert_to_base(Decimal("100"), "USD", "EUR", rates)

        assert result.quantize(Decimal("0.01")) == Decimal("92.59")

    def test_missing_rate_excluded_by_default(self):
        rates = create_rate_table("USD", EUR="0.92")

        assert convert_to_base(Decimal("500"), "GBP", "USD", rates) is None

    def test_non_positive_rate_treated_as_missing(self):
        rates = create_rate_table("USD", GBP="0")

        assert convert_to_base(Decimal("500"), "GBP", "USD", rates) is None

    def test_target_must_be_table_anchor(self):
        rates = create_rate_table("USD", EUR="0.92")

        with pytest.raises(FXConversionError) as exc_info:
            convert_to_base(Decimal("100"), "GBP", "EUR", rates)

        assert exc_info.value.from_currency == "GBP"
        assert exc_info.value.to_currency == "EUR"
        assert "anchored to USD" in str(exc_info.value)


class TestMissingRatePolicy:
    """Tests for the explicit missing-rate policies of convert()."""

    def test_exclude_returns_unconverted_result(self, caplog):
        """The exclusion itself is reported by the caller; only DEBUG here."""
        rates = FXRateTable(anchor="USD")

        with caplog.at_level(logging.DEBUG):
            result = convert(Decimal("100"), "CHF", "USD", rates, MissingRatePolicy.EXCLUDE)

        assert result.amount is None
        assert not result.is_converted
        assert not result.is_fallback
        assert "No FX rate for CHF/USD" in caplog.text
        assert all(r.levelno == logging.DEBUG for r in caplog.records)

    def test_identity_returns_amount_flagged_as_fallback(self, caplog):
        rates = FXRateTable(anchor="USD")

        with caplog.at_level(logging.WARNING):
            result = convert(Decimal("100"), "CHF", "USD", rates, MissingRatePolicy.IDENTITY)

        assert result.amount == Decimal("100")
        assert result.is_fallback
        assert result.rate_used is None
        assert "assuming 1:1" in caplog.text

    def test_raise_raises_conversion_error(self):
        rates = FXRateTable(anchor="USD")

        with pytest.raises(FXConversionError, match="Cannot convert CHF to USD: no rate in table"):
            convert(Decimal("100"), "CHF", "USD", rates, MissingRatePolicy.RAISE)

    def test_policy_ignored_when_rate_exists(self):
        rates = create_rate_table("USD", CHF="0.8")

        result = convert(Decimal("80"), "CHF", "USD", rates, MissingRatePolicy.RAISE)

        assert result.amount == Decimal("100")
        assert result.rate_used == Decimal("0.8")


class TestConvertFromBase:
    """Tests for convert_from_base()."""

    def test_multiplies_by_rate(self):
        rates = create_rate_table("USD", EUR="0.92")

        assert convert_from_base(Decimal("100"), "EUR", rates) == Decimal("92.00")

    def test_anchor_currency_is_identity(self):
        rates = create_rate_table("USD", EUR="0.92")

        assert convert_from_base(Decimal("100"), "USD", rates) == Decimal("100")

    def test_missing_rate_returns_none(self):
        rates = FXRateTable(anchor="USD")

        assert convert_from_base(Decimal("100"), "EUR", rates) is None


class TestCrossRate:
    """Tests for cross_rate()."""

    def test_eur_anchor_gives_usd_rate(self):
        rates = create_rate_table("EUR", USD="1.08")

        assert cross_rate(rates, "EUR", "USD") == Decimal("1.08")

    def test_usd_anchor_inverts_eur_rate(self):
        rates = create_rate_table("USD", EUR="0.8")

        assert cross_rate(rates, "EUR", "USD") == Decimal("1.25")

    def test_third_currency_anchor(self):
        """GBP anchor: USD per EUR = rate[USD] / rate[EUR]."""
        rates = create_rate_table("GBP", USD="1.25", EUR="1.15")

        result = cross_rate(rates, "EUR", "USD")

        assert result == Decimal("1.25") / Decimal("1.15")

    def test_missing_leg_returns_none(self):
        rates = create_rate_table("GBP", USD="1.25")

        assert cross_rate(rates, "EUR", "USD") is None
