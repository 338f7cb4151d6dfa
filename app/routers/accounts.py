"""
RetailOps Ledger - Chart of Accounts Router

API endpoints for the chart of accounts and the account ledgers.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.dependencies import get_registry
from app.models.accounting import AccountType
from app.schemas.accounting import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    ClassificationResponse,
    LedgerStatementResponse,
)
from app.services.account_registry import AccountRegistry
from app.services.chart_of_accounts_service import ChartOfAccountsService
from app.services.ledger_service import ACCOUNT_LEDGER, LedgerService
from app.services.reporting_service import ReportingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/accounts", tags=["Chart of Accounts"])


@router.get("")
async def list_accounts(
    account_type: Optional[AccountType] = Query(None, description="Filter by account type"),
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Get the chart of accounts."""
    service = ChartOfAccountsService(db)
    accounts = await service.list_accounts(
        account_type=account_type,
        is_active=None if include_inactive else True,
    )
    return {
        "success": True,
        "data": [AccountResponse.model_validate(a) for a in accounts],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    data: AccountCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new account."""
    service = ChartOfAccountsService(db)
    async with transaction_scope(db):
        account = await service.create_account(data)
    return {
        "success": True,
        "message": f"Account {account.account_code} created",
        "data": AccountResponse.model_validate(account),
    }


@router.post("/seed")
async def seed_chart_of_accounts(db: AsyncSession = Depends(get_db)):
    """Create the default chart of accounts. Existing codes are left alone."""
    service = ChartOfAccountsService(db)
    async with transaction_scope(db):
        created = await service.seed_default_chart()
    return {
        "success": True,
        "message": f"{len(created)} accounts created",
        "data": [AccountResponse.model_validate(a) for a in created],
    }


@router.get("/classify/{type_code}")
async def classify_type_code(type_code: int = Path(..., ge=1)):
    """Semantic classification of a numeric account type code."""
    label, account_type, sub_type = AccountRegistry.classification(type_code)
    return {
        "success": True,
        "data": ClassificationResponse(
            type_code=type_code,
            label=label,
            account_type=account_type,
            account_sub_type=sub_type,
        ),
    }


@router.get("/{account_id}")
async def get_account(
    account_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    service = ChartOfAccountsService(db)
    account = await service.get_account(account_id)
    return {"success": True, "data": AccountResponse.model_validate(account)}


@router.patch("/{account_id}")
async def update_account(
    data: AccountUpdate,
    account_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    service = ChartOfAccountsService(db)
    async with transaction_scope(db):
        account = await service.update_account(account_id, data)
    return {
        "success": True,
        "message": "Account updated",
        "data": AccountResponse.model_validate(account),
    }


@router.post("/{account_id}/deactivate")
async def deactivate_account(
    account_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    service = ChartOfAccountsService(db)
    async with transaction_scope(db):
        account = await service.deactivate_account(account_id)
    return {
        "success": True,
        "message": f"Account {account.account_code} deactivated",
        "data": AccountResponse.model_validate(account),
    }


@router.get("/{account_id}/ledger")
async def get_account_ledger(
    account_id: int = Path(...),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    """Account ledger rows in (date, id) order with opening and closing balances."""
    service = ReportingService(db, registry)
    statement = await service.statement(ACCOUNT_LEDGER, account_id, start_date, end_date)
    return {
        "success": True,
        "data": LedgerStatementResponse.model_validate(statement, from_attributes=True),
    }


@router.post("/{account_id}/ledger/rebuild")
async def rebuild_account_ledger(
    account_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Recompute every running balance of the account from its first row."""
    service = LedgerService(db)
    async with transaction_scope(db):
        changed = await service.rebuild(ACCOUNT_LEDGER, account_id)
    return {
        "success": True,
        "message": f"{changed} rows corrected",
        "data": {"account_id": account_id, "rows_corrected": changed},
    }
