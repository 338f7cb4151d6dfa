"""
RetailOps Ledger - Services Package

Business logic services. Modules are imported directly, e.g.
``from app.services.journal_service import JournalService``:

- account_registry: chart of accounts snapshot and role lookup
- chart_of_accounts_service: chart maintenance and default seed
- sequence_service: document and entry numbering
- ledger_service: running-balance ledgers with tail repair
- journal_service: balanced journal entries and reversals
- counterparty_service: clients and suppliers
- inventory_service: products, stores and stock levels
- purchasing_service: purchase orders, receipts, supplier payments
- sales_service: invoices, credit notes, customer receipts
- financial_service: expenses, depreciation, equity, asset register
- reporting_service: aging, statements and financial reports
- tax_calculators: sales tax splits
"""
