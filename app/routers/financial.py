"""
RetailOps Ledger - Financial Router

Expenses, depreciation, equity contributions and the asset register.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.dependencies import get_actor_id, get_registry
from app.schemas.accounting import JournalEntryResponse
from app.schemas.financial import (
    AssetCreate,
    AssetResponse,
    DepreciationCreate,
    EquityCreate,
    ExpenseCreate,
)
from app.services.account_registry import AccountRegistry
from app.services.financial_service import FinancialService


router = APIRouter(prefix="/api/v1/financial", tags=["Financial"])


@router.post("/expenses", status_code=status.HTTP_201_CREATED)
async def post_expense(
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    service = FinancialService(db, registry)
    async with transaction_scope(db):
        entry = await service.post_expense(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Expense posted as {entry.entry_number}",
        "data": JournalEntryResponse.model_validate(entry),
    }


@router.post("/depreciation", status_code=status.HTTP_201_CREATED)
async def post_depreciation(
    data: DepreciationCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    service = FinancialService(db, registry)
    async with transaction_scope(db):
        entry = await service.post_depreciation(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Depreciation posted as {entry.entry_number}",
        "data": JournalEntryResponse.model_validate(entry),
    }


@router.post("/equity", status_code=status.HTTP_201_CREATED)
async def add_equity(
    data: EquityCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    service = FinancialService(db, registry)
    async with transaction_scope(db):
        entry = await service.add_equity(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Equity contribution posted as {entry.entry_number}",
        "data": JournalEntryResponse.model_validate(entry),
    }


@router.get("/assets")
async def list_assets(
    account_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = FinancialService(db, registry)
    assets = await service.list_assets(account_id=account_id)
    return {"success": True, "data": [AssetResponse.model_validate(a) for a in assets]}


@router.post("/assets", status_code=status.HTTP_201_CREATED)
async def register_asset(
    data: AssetCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Add an asset to the register. Nothing is posted."""
    service = FinancialService(db, registry)
    async with transaction_scope(db):
        asset = await service.register_asset(data, created_by=actor_id)
    return {
        "success": True,
        "message": "Asset registered",
        "data": AssetResponse.model_validate(asset),
    }
