"""
RetailOps Ledger - Sales Schemas

Pydantic schemas for sales invoices, credit notes and customer receipts.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.sales import CreditNoteScenario, ReceiptStatus
from app.services.tax_calculators import DEFAULT_TAX_TYPE


class SalesLineCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    tax_type: str = DEFAULT_TAX_TYPE


class SalesLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    tax_type: str
    net_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


# ===========================================
# INVOICES
# ===========================================

class SalesInvoiceCreate(BaseModel):
    """Invoice lines are priced net; tax is added."""
    client_id: int
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[SalesLineCreate] = Field(..., min_length=1)


class SalesInvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    client_id: int
    invoice_date: date
    due_date: Optional[date] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
    items: List[SalesLineResponse] = []


# ===========================================
# CREDIT NOTES
# ===========================================

class CreditNoteCreate(BaseModel):
    """Credit note lines are priced tax-inclusive; tax is extracted."""
    client_id: int
    invoice_id: Optional[int] = None
    credit_note_date: Optional[date] = None
    scenario: CreditNoteScenario = CreditNoteScenario.RETURN
    damage_store_id: Optional[int] = None
    reason: Optional[str] = None
    items: List[SalesLineCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_damage_store(self):
        if self.scenario == CreditNoteScenario.FAULTY_WITH_STOCK and self.damage_store_id is None:
            raise ValueError("damage_store_id is required when faulty goods are taken back into stock")
        return self


class CreditNoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    credit_note_number: str
    client_id: int
    invoice_id: Optional[int] = None
    credit_note_date: date
    scenario: CreditNoteScenario
    damage_store_id: Optional[int] = None
    reason: Optional[str] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
    items: List[SalesLineResponse] = []


# ===========================================
# RECEIPTS
# ===========================================

class ReceiptCreate(BaseModel):
    client_id: int
    amount: Decimal = Field(..., gt=0)
    receipt_date: Optional[date] = None
    account_id: Optional[int] = Field(None, description="Cash or bank account paid into; defaults to the cash account")
    payment_method: Optional[str] = Field(None, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ReceiptConfirm(BaseModel):
    account_id: Optional[int] = Field(None, description="Overrides the account chosen when the receipt was recorded")


class ReceiptDecline(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ReceiptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    receipt_number: str
    client_id: int
    receipt_date: date
    amount: Decimal
    account_id: int
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    status: ReceiptStatus
    decline_reason: Optional[str] = None
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
