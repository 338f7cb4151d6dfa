"""
RetailOps Ledger - Sales Tax Calculator

Per-line tax splits over a fixed rate table.

Two directions are supported:
- Exclusive (orders, invoices): the line amount is net, tax is added.
- Inclusive (credit notes): the line amount already contains tax, which
  is extracted.

Every line is rounded to cents before document totals are summed, so the
document totals always equal the sum of their lines.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

from app.utils.error_handling import ErrorCode, ValidationError


# Fixed rate table; anything else is rejected
TAX_RATES = {
    "16%": Decimal("0.16"),
    "zero_rated": Decimal("0"),
    "exempted": Decimal("0"),
}

DEFAULT_TAX_TYPE = "16%"
CENT = Decimal("0.01")


def to_money(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Quantize any numeric value to cents."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxSplit:
    net: Decimal
    tax: Decimal
    gross: Decimal

    def __add__(self, other: "TaxSplit") -> "TaxSplit":
        return TaxSplit(
            net=self.net + other.net,
            tax=self.tax + other.tax,
            gross=self.gross + other.gross,
        )


ZERO_SPLIT = TaxSplit(Decimal("0.00"), Decimal("0.00"), Decimal("0.00"))


class SalesTaxCalculator:
    """Tax splits over the fixed rate table."""

    @staticmethod
    def rate_for(tax_type: str) -> Decimal:
        try:
            return TAX_RATES[tax_type]
        except KeyError:
            raise ValidationError(
                f"Unknown tax type '{tax_type}'. Expected one of: {', '.join(TAX_RATES)}",
                field="tax_type",
                code=ErrorCode.INVALID_TAX_TYPE,
            )

    @classmethod
    def split_exclusive(cls, net_amount: Decimal, tax_type: str = DEFAULT_TAX_TYPE) -> TaxSplit:
        """Add tax to a net amount."""
        rate = cls.rate_for(tax_type)
        net = to_money(net_amount)
        tax = to_money(net * rate)
        return TaxSplit(net=net, tax=tax, gross=net + tax)

    @classmethod
    def split_inclusive(cls, gross_amount: Decimal, tax_type: str = DEFAULT_TAX_TYPE) -> TaxSplit:
        """Extract tax from an amount that already includes it."""
        rate = cls.rate_for(tax_type)
        gross = to_money(gross_amount)
        net = to_money(gross / (Decimal("1") + rate))
        return TaxSplit(net=net, tax=gross - net, gross=gross)

    @staticmethod
    def total(splits: Iterable[TaxSplit]) -> TaxSplit:
        result = ZERO_SPLIT
        for split in splits:
            result = result + split
        return result
