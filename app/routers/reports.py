"""
RetailOps Ledger - Reports Router

Read-only reports over the ledgers: aging, profit & loss, balance sheet,
cash flow, trial balance and control account reconciliation.
"""

from datetime import date
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_registry
from app.schemas.reports import ReportPeriod
from app.services.account_registry import AccountRegistry
from app.services.ledger_service import CLIENT_LEDGER, SUPPLIER_LEDGER
from app.services.reporting_service import ReportingService


router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


class AgingLedger(str, Enum):
    CLIENTS = "clients"
    SUPPLIERS = "suppliers"


@router.get("/aging/{ledger}")
async def get_aging_report(
    ledger: AgingLedger = Path(...),
    as_of_date: Optional[date] = Query(None, description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    """Outstanding client or supplier balances bucketed by age."""
    kind = CLIENT_LEDGER if ledger == AgingLedger.CLIENTS else SUPPLIER_LEDGER
    service = ReportingService(db, registry)
    return {"success": True, "data": await service.aging(kind, as_of_date)}


@router.get("/profit-loss")
async def get_profit_and_loss(
    period: ReportPeriod = Query(ReportPeriod.CURRENT_MONTH),
    start_date: Optional[date] = Query(None, description="Required for a custom period"),
    end_date: Optional[date] = Query(None, description="Required for a custom period"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = ReportingService(db, registry)
    return {"success": True, "data": await service.profit_and_loss(period, start_date, end_date)}


@router.get("/balance-sheet")
async def get_balance_sheet(
    as_of_date: Optional[date] = Query(None, description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = ReportingService(db, registry)
    return {"success": True, "data": await service.balance_sheet(as_of_date)}


@router.get("/cash-flow")
async def get_cash_flow(
    period: ReportPeriod = Query(ReportPeriod.CURRENT_MONTH),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = ReportingService(db, registry)
    return {"success": True, "data": await service.cash_flow(period, start_date, end_date)}


@router.get("/trial-balance")
async def get_trial_balance(
    as_of_date: Optional[date] = Query(None, description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    """Debit and credit totals per account; total debits must equal total credits."""
    service = ReportingService(db, registry)
    return {"success": True, "data": await service.trial_balance(as_of_date)}


@router.get("/reconciliation")
async def get_reconciliation(
    as_of_date: Optional[date] = Query(None, description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    """Control accounts against their subsidiary ledgers and cached balances."""
    service = ReportingService(db, registry)
    return {"success": True, "data": await service.reconciliation(as_of_date)}
