"""
RetailOps Ledger - Journal Entries Router

Manual journal entries, reversals and the journal listing.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.dependencies import get_actor_id, get_registry
from app.models.accounting import JournalEntryType
from app.schemas.accounting import (
    JournalEntryCreate,
    JournalEntryListResponse,
    JournalEntryResponse,
    JournalEntryReverse,
)
from app.services.account_registry import AccountRegistry
from app.services.journal_service import JournalService, PostingLine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/journal-entries", tags=["Journal Entries"])


@router.get("")
async def list_journal_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    entry_type: Optional[JournalEntryType] = Query(None),
    source_type: Optional[str] = Query(None),
    source_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    """Get journal entries, newest first."""
    service = JournalService(db, registry)
    entries, total = await service.list_entries(
        start_date=start_date,
        end_date=end_date,
        entry_type=entry_type,
        source_type=source_type,
        source_id=source_id,
        limit=limit,
        offset=offset,
    )
    return {
        "success": True,
        "data": JournalEntryListResponse(
            entries=[JournalEntryResponse.model_validate(e) for e in entries],
            total=total,
        ),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_manual_entry(
    data: JournalEntryCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Post a balanced manual journal entry to the account ledgers."""
    service = JournalService(db, registry)
    lines = [
        PostingLine(
            account_id=line.account_id,
            debit=line.debit_amount,
            credit=line.credit_amount,
            description=line.description,
        )
        for line in data.lines
    ]
    async with transaction_scope(db):
        entry = await service.post_manual_entry(
            lines,
            data.entry_date,
            data.description,
            reference=data.reference,
            created_by=actor_id,
        )
    return {
        "success": True,
        "message": f"Journal entry {entry.entry_number} posted",
        "data": JournalEntryResponse.model_validate(entry),
    }


@router.get("/{entry_id}")
async def get_journal_entry(
    entry_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = JournalService(db, registry)
    entry = await service.get_entry(entry_id)
    return {"success": True, "data": JournalEntryResponse.model_validate(entry)}


@router.post("/{entry_id}/reverse", status_code=status.HTTP_201_CREATED)
async def reverse_journal_entry(
    data: JournalEntryReverse,
    entry_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Reverse a posted entry with a new mirror-image entry."""
    service = JournalService(db, registry)
    async with transaction_scope(db):
        reversal = await service.reverse_entry(
            entry_id,
            data.reversal_date or date.today(),
            data.reason,
            created_by=actor_id,
        )
    return {
        "success": True,
        "message": f"Journal entry reversed by {reversal.entry_number}",
        "data": JournalEntryResponse.model_validate(reversal),
    }
