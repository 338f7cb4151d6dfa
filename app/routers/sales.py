"""
RetailOps Ledger - Sales Router

API endpoints for sales invoices, credit notes and customer receipts.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.dependencies import get_actor_id, get_registry
from app.models.sales import ReceiptStatus
from app.schemas.sales import (
    CreditNoteCreate,
    CreditNoteResponse,
    ReceiptConfirm,
    ReceiptCreate,
    ReceiptDecline,
    ReceiptResponse,
    SalesInvoiceCreate,
    SalesInvoiceResponse,
)
from app.services.account_registry import AccountRegistry
from app.services.sales_service import SalesService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sales", tags=["Sales"])


# ===========================================
# INVOICES
# ===========================================

@router.get("/invoices")
async def list_invoices(
    client_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = SalesService(db, registry)
    invoices = await service.list_invoices(client_id=client_id)
    return {"success": True, "data": [SalesInvoiceResponse.model_validate(i) for i in invoices]}


@router.post("/invoices", status_code=status.HTTP_201_CREATED)
async def issue_invoice(
    data: SalesInvoiceCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Issue a sales invoice and post it to the ledgers."""
    service = SalesService(db, registry)
    async with transaction_scope(db):
        invoice = await service.issue_invoice(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Invoice {invoice.invoice_number} issued",
        "data": SalesInvoiceResponse.model_validate(invoice),
    }


@router.get("/invoices/{invoice_id}")
async def get_invoice(
    invoice_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = SalesService(db, registry)
    invoice = await service.get_invoice(invoice_id)
    return {"success": True, "data": SalesInvoiceResponse.model_validate(invoice)}


# ===========================================
# CREDIT NOTES
# ===========================================

@router.get("/credit-notes")
async def list_credit_notes(
    client_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = SalesService(db, registry)
    notes = await service.list_credit_notes(client_id=client_id)
    return {"success": True, "data": [CreditNoteResponse.model_validate(n) for n in notes]}


@router.post("/credit-notes", status_code=status.HTTP_201_CREATED)
async def issue_credit_note(
    data: CreditNoteCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Credit a client for returned or faulty goods."""
    service = SalesService(db, registry)
    async with transaction_scope(db):
        note = await service.issue_credit_note(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Credit note {note.credit_note_number} issued",
        "data": CreditNoteResponse.model_validate(note),
    }


# ===========================================
# RECEIPTS
# ===========================================

@router.get("/receipts")
async def list_receipts(
    client_id: Optional[int] = Query(None),
    receipt_status: Optional[ReceiptStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = SalesService(db, registry)
    receipts = await service.list_receipts(client_id=client_id, status=receipt_status)
    return {"success": True, "data": [ReceiptResponse.model_validate(r) for r in receipts]}


@router.post("/receipts", status_code=status.HTTP_201_CREATED)
async def record_receipt(
    data: ReceiptCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Record a customer payment. It is posted on confirmation."""
    service = SalesService(db, registry)
    async with transaction_scope(db):
        receipt = await service.record_receipt(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Receipt {receipt.receipt_number} recorded",
        "data": ReceiptResponse.model_validate(receipt),
    }


@router.post("/receipts/{receipt_id}/confirm")
async def confirm_receipt(
    data: ReceiptConfirm,
    receipt_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Confirm a receipt: Dr cash/bank, Cr Accounts Receivable, client ledger credit."""
    service = SalesService(db, registry)
    async with transaction_scope(db):
        receipt = await service.confirm_receipt(
            receipt_id, account_id=data.account_id, created_by=actor_id,
        )
    return {
        "success": True,
        "message": f"Receipt {receipt.receipt_number} confirmed",
        "data": ReceiptResponse.model_validate(receipt),
    }


@router.post("/receipts/{receipt_id}/decline")
async def decline_receipt(
    data: ReceiptDecline,
    receipt_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    """Decline a pending receipt. Nothing is posted."""
    service = SalesService(db, registry)
    async with transaction_scope(db):
        receipt = await service.decline_receipt(receipt_id, reason=data.reason)
    return {
        "success": True,
        "message": f"Receipt {receipt.receipt_number} declined",
        "data": ReceiptResponse.model_validate(receipt),
    }
