"""
RetailOps Ledger - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin, AuditMixin
from app.models.accounting import (
    Account,
    AccountType,
    AccountSubType,
    NormalBalance,
    CashFlowCategory,
    JournalEntry,
    JournalEntryLine,
    JournalEntryStatus,
    JournalEntryType,
    DocumentSequence,
)
from app.models.ledger import (
    AccountLedgerRow,
    ClientLedgerRow,
    SupplierLedgerRow,
    LedgerRowStatus,
)
from app.models.counterparty import Client, Supplier
from app.models.inventory import Product, Store, StoreInventory
from app.models.purchasing import (
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
    InventoryReceipt,
    AssetPurchaseOrder,
    AssetPurchaseOrderItem,
    SupplierPayment,
)
from app.models.sales import (
    SalesInvoice,
    SalesInvoiceItem,
    CreditNote,
    CreditNoteItem,
    CreditNoteScenario,
    Receipt,
    ReceiptStatus,
)
from app.models.fixed_asset import Asset

__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "AuditMixin",
    # Accounting
    "Account",
    "AccountType",
    "AccountSubType",
    "NormalBalance",
    "CashFlowCategory",
    "JournalEntry",
    "JournalEntryLine",
    "JournalEntryStatus",
    "JournalEntryType",
    "DocumentSequence",
    # Ledgers
    "AccountLedgerRow",
    "ClientLedgerRow",
    "SupplierLedgerRow",
    "LedgerRowStatus",
    # Counterparties
    "Client",
    "Supplier",
    # Inventory
    "Product",
    "Store",
    "StoreInventory",
    # Purchasing
    "PurchaseOrder",
    "PurchaseOrderItem",
    "PurchaseOrderStatus",
    "InventoryReceipt",
    "AssetPurchaseOrder",
    "AssetPurchaseOrderItem",
    "SupplierPayment",
    # Sales
    "SalesInvoice",
    "SalesInvoiceItem",
    "CreditNote",
    "CreditNoteItem",
    "CreditNoteScenario",
    "Receipt",
    "ReceiptStatus",
    # Asset register
    "Asset",
]
