"""
RetailOps Ledger - Tax Calculators Package

Modules:
- sales_tax: per-line tax splits over the fixed rate table
  ('16%', 'zero_rated', 'exempted')
"""

from app.services.tax_calculators.sales_tax import (
    SalesTaxCalculator,
    TaxSplit,
    TAX_RATES,
    DEFAULT_TAX_TYPE,
    to_money,
)

__all__ = [
    "SalesTaxCalculator",
    "TaxSplit",
    "TAX_RATES",
    "DEFAULT_TAX_TYPE",
    "to_money",
]
