"""
RetailOps Ledger - Sales Models

Sales invoices, credit notes and customer receipts.

Receipt lifecycle: recorded as ``in_pay`` (nothing posted), then either
confirmed exactly once, which is when cash and receivables move, or
declined, which posts nothing.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, AuditMixin, MONEY, ZERO


class CreditNoteScenario(str, Enum):
    RETURN = "return"
    FAULTY_NO_STOCK = "faulty_no_stock"
    FAULTY_WITH_STOCK = "faulty_with_stock"


class ReceiptStatus(str, Enum):
    IN_PAY = "in_pay"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


# =============================================================================
# INVOICES
# =============================================================================

class SalesInvoice(BaseModel, AuditMixin):
    __tablename__ = "sales_invoices"

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("journal_entries.id", ondelete="RESTRICT"), nullable=True,
    )

    items: Mapped[List["SalesInvoiceItem"]] = relationship(
        "SalesInvoiceItem",
        order_by="SalesInvoiceItem.id",
        lazy="selectin",
    )


class SalesInvoiceItem(BaseModel):
    __tablename__ = "sales_invoice_items"

    sales_invoice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sales_invoices.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_type: Mapped[str] = mapped_column(String(20), nullable=False, default="16%")
    net_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)


# =============================================================================
# CREDIT NOTES
# =============================================================================

class CreditNote(BaseModel, AuditMixin):
    __tablename__ = "credit_notes"

    credit_note_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    invoice_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("sales_invoices.id", ondelete="RESTRICT"), nullable=True,
    )
    credit_note_date: Mapped[date] = mapped_column(Date, nullable=False)
    scenario: Mapped[CreditNoteScenario] = mapped_column(
        SQLEnum(CreditNoteScenario), nullable=False, default=CreditNoteScenario.RETURN,
    )
    damage_store_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="RESTRICT"), nullable=True,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("journal_entries.id", ondelete="RESTRICT"), nullable=True,
    )

    items: Mapped[List["CreditNoteItem"]] = relationship(
        "CreditNoteItem",
        order_by="CreditNoteItem.id",
        lazy="selectin",
    )


class CreditNoteItem(BaseModel):
    __tablename__ = "credit_note_items"

    credit_note_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("credit_notes.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_type: Mapped[str] = mapped_column(String(20), nullable=False, default="16%")
    net_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)


# =============================================================================
# RECEIPTS
# =============================================================================

class Receipt(BaseModel, AuditMixin):
    """Customer payment against receivables."""

    __tablename__ = "receipts"

    receipt_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    receipt_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"), nullable=False,
        comment="Cash or bank account the money was paid into",
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ReceiptStatus] = mapped_column(
        SQLEnum(ReceiptStatus), nullable=False, default=ReceiptStatus.IN_PAY,
    )
    decline_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("journal_entries.id", ondelete="RESTRICT"), nullable=True,
    )
