"""
RetailOps Ledger - Document Number Sequences

Monotonic document numbers backed by the ``document_sequences`` counter
table. The increment is a single UPDATE, so two transactions asking for a
number in the same series serialize on the counter row and can never
receive the same value.
"""

import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.accounting import DocumentSequence

logger = logging.getLogger(__name__)


class SequenceService:
    """Atomic counters for entry and document numbers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def next_value(self, name: str) -> int:
        """Increment and return the counter for ``name``, creating it at 1."""
        result = await self.db.execute(
            update(DocumentSequence)
            .where(DocumentSequence.name == name)
            .values(last_value=DocumentSequence.last_value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            try:
                async with self.db.begin_nested():
                    self.db.add(DocumentSequence(name=name, last_value=1))
                logger.debug(f"Started document sequence {name}")
                return 1
            except IntegrityError:
                # Created by a concurrent transaction; increment theirs
                return await self.next_value(name)

        value = await self.db.scalar(
            select(DocumentSequence.last_value).where(DocumentSequence.name == name)
        )
        return int(value)

    async def next_entry_number(self, entry_date: date) -> str:
        """Journal entry number, e.g. ``JE-2026-000042``."""
        prefix = settings.journal_entry_prefix
        value = await self.next_value(f"{prefix}-{entry_date.year}")
        return f"{prefix}-{entry_date.year}-{value:06d}"

    async def next_document_number(self, prefix: str) -> str:
        """Document number, e.g. ``PO-000007``."""
        value = await self.next_value(prefix)
        return f"{prefix}-{value:06d}"
