"""
RetailOps Ledger - Running-Balance Ledger Models

One row per dated debit/credit posting, carrying the running balance of its
subject (an account, a client or a supplier) in (date, id) order.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, MONEY, ZERO


class LedgerRowStatus(str, Enum):
    CONFIRMED = "confirmed"


class LedgerRowMixin:
    """Columns shared by every running-balance ledger."""

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    reference_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    debit: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    credit: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    running_balance: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)


class AccountLedgerRow(BaseModel, LedgerRowMixin):
    """Per-account running balance (debit - credit)."""

    __tablename__ = "account_ledger"

    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"),
        nullable=False,
    )
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("journal_entries.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    status: Mapped[LedgerRowStatus] = mapped_column(
        SQLEnum(LedgerRowStatus), nullable=False, default=LedgerRowStatus.CONFIRMED,
    )

    __table_args__ = (
        Index("ix_account_ledger_account_date_id", "account_id", "date", "id"),
    )


class ClientLedgerRow(BaseModel, LedgerRowMixin):
    """Client (receivable) subsidiary ledger: debit - credit."""

    __tablename__ = "client_ledger"

    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
    )
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("journal_entries.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    __table_args__ = (
        Index("ix_client_ledger_client_date_id", "client_id", "date", "id"),
    )


class SupplierLedgerRow(BaseModel, LedgerRowMixin):
    """Supplier (payable) subsidiary ledger: credit - debit."""

    __tablename__ = "supplier_ledger"

    supplier_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("suppliers.id", ondelete="RESTRICT"),
        nullable=False,
    )
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("journal_entries.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    __table_args__ = (
        Index("ix_supplier_ledger_supplier_date_id", "supplier_id", "date", "id"),
    )
