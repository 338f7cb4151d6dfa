"""
RetailOps Ledger - Journal Entry Service

Service layer for journal entries:
- Validation of balanced, one-sided lines before any write
- Entry numbering from the document sequence
- Posting of entries together with their account-ledger rows
- Reversal by a new, mirror-image entry
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounting import (
    JournalEntry,
    JournalEntryLine,
    JournalEntryStatus,
    JournalEntryType,
)
from app.models.ledger import ClientLedgerRow, SupplierLedgerRow
from app.services.account_registry import AccountRegistry
from app.services.ledger_service import LedgerService
from app.services.sequence_service import SequenceService
from app.services.tax_calculators import to_money
from app.utils.error_handling import (
    AlreadyProcessedError,
    InvalidAmountError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class PostingLine(NamedTuple):
    """One side of a journal entry before it is written."""
    account_id: int
    debit: Decimal = Decimal("0.00")
    credit: Decimal = Decimal("0.00")
    description: Optional[str] = None


class JournalService:
    """Service for journal entry operations."""

    def __init__(self, db: AsyncSession, registry: AccountRegistry):
        self.db = db
        self.registry = registry
        self.sequences = SequenceService(db)
        self.ledger = LedgerService(db)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_lines(self, lines: Sequence[PostingLine]) -> Tuple[List[PostingLine], Decimal, Decimal]:
        """
        Quantize and check journal lines.

        Returns the quantized lines with their debit and credit totals.
        Raises before anything is written when a line is malformed, an
        account is unknown or inactive, or the entry does not balance.
        """
        if not lines:
            raise ValidationError("A journal entry needs at least one line", field="lines")

        cleaned = []
        for index, line in enumerate(lines, 1):
            debit = to_money(line.debit)
            credit = to_money(line.credit)
            if debit < 0 or credit < 0:
                raise InvalidAmountError(
                    debit if debit < 0 else credit,
                    field=f"lines[{index}]",
                )
            if (debit > 0) == (credit > 0):
                raise ValidationError(
                    f"Line {index} must have exactly one of debit or credit greater than zero",
                    field=f"lines[{index}]",
                    details={"debit": str(debit), "credit": str(credit)},
                )
            self.registry.get(line.account_id)
            cleaned.append(line._replace(debit=debit, credit=credit))

        total_debit = sum((line.debit for line in cleaned), Decimal("0.00"))
        total_credit = sum((line.credit for line in cleaned), Decimal("0.00"))
        if total_debit != total_credit:
            raise UnbalancedEntryError(total_debit, total_credit)

        return cleaned, total_debit, total_credit

    # =========================================================================
    # POSTING
    # =========================================================================

    async def post_entry(
        self,
        lines: Sequence[PostingLine],
        entry_date: date,
        description: str,
        entry_type: JournalEntryType = JournalEntryType.MANUAL,
        reference: Optional[str] = None,
        source_type: Optional[str] = None,
        source_id: Optional[int] = None,
        created_by: Optional[str] = None,
        reversal_of_id: Optional[int] = None,
    ) -> JournalEntry:
        """
        Write one balanced journal entry and its lines.

        Running balances are left alone; see ``post_to_ledger``.
        """
        cleaned, total_debit, total_credit = self.validate_lines(lines)
        entry_number = await self.sequences.next_entry_number(entry_date)

        entry = JournalEntry(
            entry_number=entry_number,
            entry_date=entry_date,
            entry_type=entry_type,
            reference=reference,
            description=description,
            source_type=source_type,
            source_id=source_id,
            total_debit=total_debit,
            total_credit=total_credit,
            status=JournalEntryStatus.POSTED,
            reversal_of_id=reversal_of_id,
            created_by=created_by,
            lines=[
                JournalEntryLine(
                    line_number=idx,
                    account_id=line.account_id,
                    description=line.description,
                    debit_amount=line.debit,
                    credit_amount=line.credit,
                )
                for idx, line in enumerate(cleaned, 1)
            ],
        )
        self.db.add(entry)
        await self.db.flush()

        logger.info(
            f"Posted journal entry {entry.entry_number} ({entry_type.value}) "
            f"for {total_debit} on {entry_date}"
        )
        return entry

    async def post_to_ledger(
        self,
        lines: Sequence[PostingLine],
        entry_date: date,
        description: str,
        entry_type: JournalEntryType,
        **kwargs,
    ) -> JournalEntry:
        """
        Post a journal entry and one account-ledger row per line.

        This is the integration point every transaction adapter uses.
        """
        entry = await self.post_entry(lines, entry_date, description, entry_type, **kwargs)
        await self.ledger.post_entry_rows(entry)
        return entry

    async def post_manual_entry(
        self,
        lines: Sequence[PostingLine],
        entry_date: date,
        description: str,
        reference: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> JournalEntry:
        """Ad-hoc adjusting entry posted straight to the account ledgers."""
        return await self.post_to_ledger(
            lines,
            entry_date,
            description,
            JournalEntryType.MANUAL,
            reference=reference,
            source_type="manual",
            created_by=created_by,
        )

    async def reverse_entry(
        self,
        entry_id: int,
        reversal_date: date,
        reason: str,
        created_by: Optional[str] = None,
    ) -> JournalEntry:
        """
        Reverse a posted journal entry.

        The original is left untouched. A new entry with every line's
        sides swapped is posted, and subsidiary-ledger rows written for the
        original are mirrored for the same counterparties.
        """
        entry = await self.get_entry(entry_id)

        existing = await self.db.scalar(
            select(JournalEntry.id).where(JournalEntry.reversal_of_id == entry.id)
        )
        if existing is not None:
            raise AlreadyProcessedError("JournalEntry", entry.entry_number)

        reversal_lines = [
            PostingLine(
                account_id=line.account_id,
                debit=line.credit_amount,
                credit=line.debit_amount,
                description=f"Reversal: {line.description or ''}".strip(),
            )
            for line in entry.lines
        ]

        reversal = await self.post_to_ledger(
            reversal_lines,
            reversal_date,
            f"Reversal of {entry.entry_number}: {reason}",
            JournalEntryType.REVERSAL,
            reference=entry.entry_number,
            source_type=entry.source_type,
            source_id=entry.source_id,
            created_by=created_by,
            reversal_of_id=entry.id,
        )

        client_rows = await self.db.execute(
            select(ClientLedgerRow)
            .where(ClientLedgerRow.journal_entry_id == entry.id)
            .order_by(ClientLedgerRow.id)
        )
        for row in client_rows.scalars().all():
            await self.ledger.post_client_row(
                row.client_id,
                reversal_date,
                debit=row.credit,
                credit=row.debit,
                description=f"Reversal of {entry.entry_number}",
                reference_type="reversal",
                reference_id=reversal.id,
                journal_entry_id=reversal.id,
            )

        supplier_rows = await self.db.execute(
            select(SupplierLedgerRow)
            .where(SupplierLedgerRow.journal_entry_id == entry.id)
            .order_by(SupplierLedgerRow.id)
        )
        for row in supplier_rows.scalars().all():
            await self.ledger.post_supplier_row(
                row.supplier_id,
                reversal_date,
                debit=row.credit,
                credit=row.debit,
                description=f"Reversal of {entry.entry_number}",
                reference_type="reversal",
                reference_id=reversal.id,
                journal_entry_id=reversal.id,
            )

        logger.info(f"Reversed journal entry {entry.entry_number} with {reversal.entry_number}")
        return reversal

    # =========================================================================
    # READS
    # =========================================================================

    async def get_entry(self, entry_id: int) -> JournalEntry:
        """Get journal entry by ID with lines."""
        entry = await self.db.scalar(select(JournalEntry).where(JournalEntry.id == entry_id))
        if entry is None:
            raise NotFoundError("JournalEntry", entry_id)
        return entry

    async def list_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        entry_type: Optional[JournalEntryType] = None,
        source_type: Optional[str] = None,
        source_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[JournalEntry], int]:
        """Get journal entries with filtering."""
        query = select(JournalEntry)

        if start_date:
            query = query.where(JournalEntry.entry_date >= start_date)
        if end_date:
            query = query.where(JournalEntry.entry_date <= end_date)
        if entry_type:
            query = query.where(JournalEntry.entry_type == entry_type)
        if source_type:
            query = query.where(JournalEntry.source_type == source_type)
        if source_id is not None:
            query = query.where(JournalEntry.source_id == source_id)

        total = await self.db.scalar(select(func.count()).select_from(query.subquery())) or 0

        query = query.order_by(desc(JournalEntry.entry_date), desc(JournalEntry.id))
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all()), total
