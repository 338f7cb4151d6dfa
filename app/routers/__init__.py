"""
RetailOps Ledger - Routers Package

FastAPI route handlers.

Routers:
- accounts: Chart of accounts and account ledgers
- journal: Journal entries and reversals
- counterparties: Clients and suppliers with their statements
- catalog: Products, stores and stock levels
- purchasing: Purchase orders, goods receipts, asset orders, supplier payments
- sales: Invoices, credit notes and customer receipts
- financial: Expenses, depreciation, equity and the asset register
- reports: Aging, profit & loss, balance sheet, cash flow, reconciliation
"""

from app.routers import (
    accounts,
    journal,
    counterparties,
    catalog,
    purchasing,
    sales,
    financial,
    reports,
)

__all__ = [
    "accounts",
    "journal",
    "counterparties",
    "catalog",
    "purchasing",
    "sales",
    "financial",
    "reports",
]
