"""
RetailOps Ledger - Tax Calculator Tests

Unit tests for sales tax splits and money rounding.
"""

import pytest
from decimal import Decimal

from app.services.tax_calculators import (
    DEFAULT_TAX_TYPE,
    SalesTaxCalculator,
    TaxSplit,
    to_money,
)
from app.utils.error_handling import ErrorCode, ValidationError


class TestMoneyRounding:
    """Amounts are quantized to cents, half up."""

    def test_half_cent_rounds_up(self):
        assert to_money(Decimal("2.675")) == Decimal("2.68")
        assert to_money(Decimal("2.665")) == Decimal("2.67")

    def test_none_is_zero(self):
        assert to_money(None) == Decimal("0.00")

    def test_floats_go_through_their_string_form(self):
        """0.1 + 0.2 must not leak binary noise into the ledger."""
        assert to_money(0.1 + 0.2) == Decimal("0.30")
        assert to_money(7) == Decimal("7.00")


class TestExclusiveSplit:
    """Orders and invoices: tax is added to the net amount."""

    def test_standard_rate(self):
        split = SalesTaxCalculator.split_exclusive(Decimal("500.00"), "16%")
        assert split == TaxSplit(Decimal("500.00"), Decimal("80.00"), Decimal("580.00"))

    def test_default_is_standard_rate(self):
        assert DEFAULT_TAX_TYPE == "16%"
        assert SalesTaxCalculator.split_exclusive(Decimal("10")).tax == Decimal("1.60")

    def test_zero_rated_and_exempt(self):
        for tax_type in ("zero_rated", "exempted"):
            split = SalesTaxCalculator.split_exclusive(Decimal("99.99"), tax_type)
            assert split.tax == Decimal("0.00")
            assert split.gross == Decimal("99.99")

    def test_tax_rounded_per_line(self):
        split = SalesTaxCalculator.split_exclusive(Decimal("0.03"), "16%")
        assert split.tax == Decimal("0.00")
        split = SalesTaxCalculator.split_exclusive(Decimal("0.04"), "16%")
        assert split.tax == Decimal("0.01")


class TestInclusiveSplit:
    """Credit notes: tax is extracted from the gross amount."""

    def test_standard_rate(self):
        split = SalesTaxCalculator.split_inclusive(Decimal("116.00"), "16%")
        assert split.net == Decimal("100.00")
        assert split.tax == Decimal("16.00")

    def test_net_plus_tax_is_gross(self):
        """Tax is the remainder, so the parts always add back up."""
        for gross in ("0.01", "1.00", "33.33", "1234.57"):
            split = SalesTaxCalculator.split_inclusive(Decimal(gross))
            assert split.net + split.tax == split.gross == Decimal(gross)


class TestRateTable:

    def test_unknown_tax_type_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            SalesTaxCalculator.rate_for("8%")
        assert exc_info.value.code == ErrorCode.INVALID_TAX_TYPE
        assert exc_info.value.field == "tax_type"

    def test_totals_sum_lines(self):
        total = SalesTaxCalculator.total([
            SalesTaxCalculator.split_exclusive(Decimal("10"), "16%"),
            SalesTaxCalculator.split_exclusive(Decimal("5"), "zero_rated"),
        ])
        assert total == TaxSplit(Decimal("15.00"), Decimal("1.60"), Decimal("16.60"))

    def test_empty_total_is_zero(self):
        assert SalesTaxCalculator.total([]).gross == Decimal("0.00")
