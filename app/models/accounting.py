"""
RetailOps Ledger - Chart of Accounts & Journal Models

Double-entry accounting core:
- Chart of Accounts (Assets, Liabilities, Equity, Revenue, Expenses)
- Journal Entries with balanced lines
- Document number sequences

Journal entries are immutable once posted. A correction is a new
reversing entry that points at the entry it reverses.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean, Date, ForeignKey, Integer, String, Text,
    Enum as SQLEnum, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.base import BaseModel, AuditMixin, MONEY, ZERO


# =============================================================================
# ENUMS
# =============================================================================

class AccountType(str, Enum):
    """Main account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class AccountSubType(str, Enum):
    """Detailed account classifications used by adapters and statements."""
    # Assets
    CASH = "cash"
    BANK = "bank"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    PREPAYMENT = "prepayment"
    FIXED_ASSET = "fixed_asset"
    INTANGIBLE_ASSET = "intangible_asset"
    ACCUMULATED_DEPRECIATION = "accumulated_depreciation"
    PURCHASE_TAX_CONTROL = "purchase_tax_control"
    OTHER_ASSET = "other_asset"

    # Liabilities
    ACCOUNTS_PAYABLE = "accounts_payable"
    ACCRUED_EXPENSE = "accrued_expense"
    SALES_TAX_PAYABLE = "sales_tax_payable"
    CREDIT_CARD = "credit_card"
    OTHER_LIABILITY = "other_liability"

    # Equity
    SHARE_CAPITAL = "share_capital"
    RETAINED_EARNINGS = "retained_earnings"

    # Revenue
    SALES_REVENUE = "sales_revenue"
    OTHER_INCOME = "other_income"

    # Expenses
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OPERATING_EXPENSE = "operating_expense"
    DEPRECIATION_EXPENSE = "depreciation_expense"
    DAMAGES_EXPENSE = "damages_expense"


class NormalBalance(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class CashFlowCategory(str, Enum):
    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class JournalEntryStatus(str, Enum):
    POSTED = "posted"


class JournalEntryType(str, Enum):
    """Business event that produced a journal entry."""
    MANUAL = "manual"
    PURCHASE = "purchase"
    ASSET_PURCHASE = "asset_purchase"
    SALES = "sales"
    CREDIT_NOTE = "credit_note"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    EXPENSE = "expense"
    DEPRECIATION = "depreciation"
    EQUITY = "equity"
    REVERSAL = "reversal"


# =============================================================================
# CHART OF ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """
    Chart of Accounts entry.

    Accounts are never deleted because ledger rows reference them
    permanently; deactivation is the only way to retire one.
    """

    __tablename__ = "chart_of_accounts"

    account_code: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True,
        comment="Unique account code (e.g., 1000, 1100, 2000)",
    )
    account_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Classification
    type_code: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True,
        comment="Numeric classification code (see AccountRegistry.classify)",
    )
    account_type: Mapped[AccountType] = mapped_column(
        SQLEnum(AccountType), nullable=False,
    )
    account_sub_type: Mapped[Optional[AccountSubType]] = mapped_column(
        SQLEnum(AccountSubType), nullable=True,
    )
    normal_balance: Mapped[NormalBalance] = mapped_column(
        SQLEnum(NormalBalance), nullable=False,
    )
    cash_flow_category: Mapped[Optional[CashFlowCategory]] = mapped_column(
        SQLEnum(CashFlowCategory), nullable=True,
    )

    # Hierarchy
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("chart_of_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def is_cash(self) -> bool:
        return self.account_sub_type in (AccountSubType.CASH, AccountSubType.BANK)

    def __repr__(self) -> str:
        return f"<Account(code={self.account_code}, name={self.account_name})>"


# =============================================================================
# JOURNAL ENTRIES
# =============================================================================

class JournalEntry(BaseModel, AuditMixin):
    """
    Journal Entry header.

    Totals are stored denormalized and the database refuses an entry whose
    totals differ.
    """

    __tablename__ = "journal_entries"

    entry_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True,
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    entry_type: Mapped[JournalEntryType] = mapped_column(
        SQLEnum(JournalEntryType), nullable=False, default=JournalEntryType.MANUAL,
    )
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Source document
    source_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    source_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    total_debit: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_credit: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)

    status: Mapped[JournalEntryStatus] = mapped_column(
        SQLEnum(JournalEntryStatus), nullable=False, default=JournalEntryStatus.POSTED,
    )

    reversal_of_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("journal_entries.id", ondelete="RESTRICT"),
        nullable=True,
        unique=True,
    )

    lines: Mapped[List["JournalEntryLine"]] = relationship(
        "JournalEntryLine",
        back_populates="journal_entry",
        order_by="JournalEntryLine.line_number",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total_debit = total_credit", name="balanced_entry"),
    )

    def __repr__(self) -> str:
        return f"<JournalEntry(number={self.entry_number}, total={self.total_debit})>"


class JournalEntryLine(BaseModel):
    """Journal Entry line: exactly one of debit or credit is nonzero."""

    __tablename__ = "journal_entry_lines"

    journal_entry_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("journal_entries.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    debit_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    credit_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)

    journal_entry: Mapped["JournalEntry"] = relationship(
        "JournalEntry",
        back_populates="lines",
    )

    __table_args__ = (
        CheckConstraint(
            "(debit_amount > 0 AND credit_amount = 0) OR (debit_amount = 0 AND credit_amount > 0)",
            name="one_sided_line",
        ),
    )


# =============================================================================
# DOCUMENT NUMBERING
# =============================================================================

class DocumentSequence(Base):
    """
    Monotonic counter per document series (e.g. ``JE-2026``, ``PO``).

    Incremented with a single UPDATE so concurrent writers serialize on the
    row instead of racing on a timestamp.
    """

    __tablename__ = "document_sequences"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
