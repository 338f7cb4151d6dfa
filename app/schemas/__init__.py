"""
RetailOps Ledger - Schemas Package

Pydantic schemas for request/response validation.
"""

from app.schemas.accounting import (
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    ClassificationResponse,
    JournalEntryLineCreate,
    JournalEntryCreate,
    JournalEntryReverse,
    JournalEntryLineResponse,
    JournalEntryResponse,
    JournalEntryListResponse,
    LedgerRowResponse,
    LedgerStatementResponse,
)
from app.schemas.counterparty import (
    CounterpartyCreateRequest,
    CounterpartyUpdateRequest,
    CounterpartyResponse,
)
from app.schemas.inventory import (
    ProductCreateRequest,
    ProductResponse,
    StoreCreateRequest,
    StoreResponse,
    StockLevelResponse,
)
from app.schemas.purchasing import (
    PurchaseOrderItemCreate,
    PurchaseOrderCreate,
    ReceiveItem,
    PurchaseOrderReceive,
    PurchaseOrderResponse,
    InventoryReceiptResponse,
    AssetPurchaseOrderItemCreate,
    AssetPurchaseOrderCreate,
    AssetPurchaseOrderReceive,
    AssetPurchaseOrderResponse,
    SupplierPaymentCreate,
    SupplierPaymentResponse,
)
from app.schemas.sales import (
    SalesLineCreate,
    SalesInvoiceCreate,
    SalesInvoiceResponse,
    CreditNoteCreate,
    CreditNoteResponse,
    ReceiptCreate,
    ReceiptConfirm,
    ReceiptDecline,
    ReceiptResponse,
)
from app.schemas.financial import (
    ExpenseCreate,
    DepreciationCreate,
    EquityCreate,
    AssetCreate,
    AssetResponse,
)
from app.schemas.reports import (
    ReportPeriod,
    AgingBuckets,
    CounterpartyAging,
    AgingReport,
    StatementLine,
    ProfitAndLossReport,
    BalanceSheetReport,
    CashFlowSection,
    CashFlowReport,
    ControlReconciliation,
    ReconciliationReport,
    TrialBalanceLine,
    TrialBalanceReport,
)

__all__ = [
    # Accounting
    "AccountCreate",
    "AccountUpdate",
    "AccountResponse",
    "ClassificationResponse",
    "JournalEntryLineCreate",
    "JournalEntryCreate",
    "JournalEntryReverse",
    "JournalEntryLineResponse",
    "JournalEntryResponse",
    "JournalEntryListResponse",
    "LedgerRowResponse",
    "LedgerStatementResponse",
    # Counterparties
    "CounterpartyCreateRequest",
    "CounterpartyUpdateRequest",
    "CounterpartyResponse",
    # Catalog
    "ProductCreateRequest",
    "ProductResponse",
    "StoreCreateRequest",
    "StoreResponse",
    "StockLevelResponse",
    # Purchasing
    "PurchaseOrderItemCreate",
    "PurchaseOrderCreate",
    "ReceiveItem",
    "PurchaseOrderReceive",
    "PurchaseOrderResponse",
    "InventoryReceiptResponse",
    "AssetPurchaseOrderItemCreate",
    "AssetPurchaseOrderCreate",
    "AssetPurchaseOrderReceive",
    "AssetPurchaseOrderResponse",
    "SupplierPaymentCreate",
    "SupplierPaymentResponse",
    # Sales
    "SalesLineCreate",
    "SalesInvoiceCreate",
    "SalesInvoiceResponse",
    "CreditNoteCreate",
    "CreditNoteResponse",
    "ReceiptCreate",
    "ReceiptConfirm",
    "ReceiptDecline",
    "ReceiptResponse",
    # Financial
    "ExpenseCreate",
    "DepreciationCreate",
    "EquityCreate",
    "AssetCreate",
    "AssetResponse",
    # Reports
    "ReportPeriod",
    "AgingBuckets",
    "CounterpartyAging",
    "AgingReport",
    "StatementLine",
    "ProfitAndLossReport",
    "BalanceSheetReport",
    "CashFlowSection",
    "CashFlowReport",
    "ControlReconciliation",
    "ReconciliationReport",
    "TrialBalanceLine",
    "TrialBalanceReport",
]
