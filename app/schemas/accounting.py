"""
RetailOps Ledger - Accounting Schemas

Pydantic schemas for the chart of accounts, journal entries and account
ledger rows.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.accounting import (
    AccountSubType,
    AccountType,
    CashFlowCategory,
    JournalEntryStatus,
    JournalEntryType,
    NormalBalance,
)


# =============================================================================
# CHART OF ACCOUNTS SCHEMAS
# =============================================================================

class AccountCreate(BaseModel):
    """
    Schema for creating an account.

    ``type_code`` drives the account type, sub type and normal balance;
    the optional fields override what it implies.
    """
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=200)
    type_code: int = Field(..., ge=1, description="Numeric classification code (1-19)")
    description: Optional[str] = None
    account_sub_type: Optional[AccountSubType] = None
    normal_balance: Optional[NormalBalance] = None
    cash_flow_category: Optional[CashFlowCategory] = None
    parent_id: Optional[int] = None


class AccountUpdate(BaseModel):
    """Schema for updating an account."""
    account_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    parent_id: Optional[int] = None
    cash_flow_category: Optional[CashFlowCategory] = None


class AccountResponse(BaseModel):
    """Schema for account response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_code: str
    account_name: str
    description: Optional[str] = None
    type_code: Optional[int] = None
    account_type: AccountType
    account_sub_type: Optional[AccountSubType] = None
    normal_balance: NormalBalance
    cash_flow_category: Optional[CashFlowCategory] = None
    parent_id: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClassificationResponse(BaseModel):
    type_code: int
    label: str
    account_type: AccountType
    account_sub_type: AccountSubType


# =============================================================================
# JOURNAL ENTRY SCHEMAS
# =============================================================================

class JournalEntryLineCreate(BaseModel):
    """Schema for one line of a manual journal entry."""
    account_id: int
    description: Optional[str] = Field(None, max_length=500)
    debit_amount: Decimal = Field(Decimal("0.00"), ge=0)
    credit_amount: Decimal = Field(Decimal("0.00"), ge=0)


class JournalEntryCreate(BaseModel):
    """Schema for posting a manual journal entry."""
    entry_date: date
    description: str = Field(..., min_length=1, max_length=500)
    reference: Optional[str] = Field(None, max_length=100)
    lines: List[JournalEntryLineCreate] = Field(..., min_length=1)


class JournalEntryReverse(BaseModel):
    reversal_date: Optional[date] = None
    reason: str = Field(..., min_length=1, max_length=500)


class JournalEntryLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    line_number: int
    account_id: int
    description: Optional[str] = None
    debit_amount: Decimal
    credit_amount: Decimal


class JournalEntryResponse(BaseModel):
    """Schema for journal entry response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_number: str
    entry_date: date
    entry_type: JournalEntryType
    reference: Optional[str] = None
    description: str
    source_type: Optional[str] = None
    source_id: Optional[int] = None
    total_debit: Decimal
    total_credit: Decimal
    status: JournalEntryStatus
    reversal_of_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
    lines: List[JournalEntryLineResponse] = []


class JournalEntryListResponse(BaseModel):
    entries: List[JournalEntryResponse]
    total: int


# =============================================================================
# LEDGER SCHEMAS
# =============================================================================

class LedgerRowResponse(BaseModel):
    """One running-balance row of an account, client or supplier ledger."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    journal_entry_id: Optional[int] = None
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


class LedgerStatementResponse(BaseModel):
    subject_id: int
    subject_name: str
    opening_balance: Decimal
    closing_balance: Decimal
    rows: List[LedgerRowResponse]
