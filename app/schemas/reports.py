"""
RetailOps Ledger - Report Schemas

Read-only report structures produced by the reporting service.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


ZERO = Decimal("0.00")


class ReportPeriod(str, Enum):
    CURRENT_MONTH = "current_month"
    LAST_MONTH = "last_month"
    CURRENT_QUARTER = "current_quarter"
    CURRENT_YEAR = "current_year"
    CUSTOM = "custom"


# =============================================================================
# AGING
# =============================================================================

class AgingBuckets(BaseModel):
    current: Decimal = ZERO
    days_1_30: Decimal = ZERO
    days_31_60: Decimal = ZERO
    days_61_90: Decimal = ZERO
    over_90: Decimal = ZERO
    total: Decimal = ZERO


class CounterpartyAging(AgingBuckets):
    counterparty_id: int
    name: str


class AgingReport(BaseModel):
    ledger: str = Field(..., description="'client' or 'supplier'")
    as_of_date: date
    counterparties: List[CounterpartyAging]
    totals: AgingBuckets


# =============================================================================
# PROFIT & LOSS
# =============================================================================

class StatementLine(BaseModel):
    account_id: Optional[int] = None
    account_code: Optional[str] = None
    account_name: str
    amount: Decimal
    is_synthetic: bool = False


class ProfitAndLossReport(BaseModel):
    start_date: date
    end_date: date
    revenue: List[StatementLine]
    sales_revenue: Decimal
    other_income: Decimal
    total_revenue: Decimal
    cost_of_goods_sold: Decimal
    gross_profit: Decimal
    gross_margin: Decimal = Field(..., description="Percent of sales revenue")
    operating_expenses: List[StatementLine]
    total_operating_expenses: Decimal
    net_profit: Decimal
    net_margin: Decimal = Field(..., description="Percent of total revenue")


# =============================================================================
# BALANCE SHEET
# =============================================================================

class BalanceSheetReport(BaseModel):
    as_of_date: date
    assets: List[StatementLine]
    liabilities: List[StatementLine]
    equity: List[StatementLine]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    difference: Decimal
    net_book_value: Decimal = Field(..., description="Fixed and intangible assets less accumulated depreciation")


# =============================================================================
# CASH FLOW
# =============================================================================

class CashFlowSection(BaseModel):
    items: List[StatementLine]
    total: Decimal


class CashFlowReport(BaseModel):
    start_date: date
    end_date: date
    operating: CashFlowSection
    investing: CashFlowSection
    financing: CashFlowSection
    net_cash_flow: Decimal
    net_change_in_cash: Decimal


# =============================================================================
# RECONCILIATION
# =============================================================================

class ControlReconciliation(BaseModel):
    ledger: str
    control_account_code: str
    control_balance: Decimal
    subsidiary_total: Decimal
    variance: Decimal
    cached_total: Decimal
    stale_cache_ids: List[int] = []


class ReconciliationReport(BaseModel):
    as_of_date: date
    receivables: ControlReconciliation
    payables: ControlReconciliation


# =============================================================================
# TRIAL BALANCE
# =============================================================================

class TrialBalanceLine(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    total_debit: Decimal
    total_credit: Decimal
    debit_balance: Decimal = ZERO
    credit_balance: Decimal = ZERO


class TrialBalanceReport(BaseModel):
    as_of_date: date
    accounts: List[TrialBalanceLine]
    total_debit: Decimal
    total_credit: Decimal
    total_debit_balance: Decimal
    total_credit_balance: Decimal
    difference: Decimal
    is_balanced: bool
