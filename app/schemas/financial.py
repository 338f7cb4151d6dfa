"""
RetailOps Ledger - Financial Schemas

Pydantic schemas for expenses, depreciation, equity contributions and the
asset register.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ExpenseCreate(BaseModel):
    """
    An operating expense.

    Paid expenses credit the payment account (the cash account when
    omitted); unpaid ones credit Accrued Expenses.
    """
    expense_account_id: int
    amount: Decimal = Field(..., gt=0)
    expense_date: Optional[date] = None
    description: str = Field(..., min_length=1, max_length=500)
    reference: Optional[str] = Field(None, max_length=100)
    is_paid: bool = True
    payment_account_id: Optional[int] = None


class DepreciationCreate(BaseModel):
    depreciation_account_id: int = Field(..., description="Depreciation expense account")
    amount: Decimal = Field(..., gt=0)
    depreciation_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=500)


class EquityCreate(BaseModel):
    equity_account_id: int
    amount: Decimal = Field(..., gt=0)
    contribution_date: Optional[date] = None
    cash_account_id: Optional[int] = Field(None, description="Cash or bank account credited with the funds")
    description: Optional[str] = Field(None, max_length=500)


class AssetCreate(BaseModel):
    account_id: int = Field(..., description="Fixed or intangible asset account")
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    purchase_date: date
    purchase_value: Decimal = Field(..., gt=0)


class AssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    name: str
    description: Optional[str] = None
    purchase_date: date
    purchase_value: Decimal
    created_by: Optional[str] = None
    created_at: datetime
