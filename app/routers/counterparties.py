"""
RetailOps Ledger - Clients & Suppliers Router

Clients and suppliers share their shape and endpoints; each gets its own
router bound to its subsidiary ledger.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.dependencies import get_registry
from app.schemas.accounting import LedgerStatementResponse
from app.schemas.counterparty import (
    CounterpartyCreateRequest,
    CounterpartyResponse,
    CounterpartyUpdateRequest,
)
from app.services.account_registry import AccountRegistry
from app.services.counterparty_service import CounterpartyService
from app.services.ledger_service import CLIENT_LEDGER, SUPPLIER_LEDGER, LedgerKind
from app.services.reporting_service import ReportingService


def _build_router(kind: LedgerKind, prefix: str, tag: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])
    label = kind.subject_model.__name__

    @router.get("")
    async def list_counterparties(
        search: Optional[str] = Query(None, description="Match name, email or tax PIN"),
        include_inactive: bool = Query(False),
        db: AsyncSession = Depends(get_db),
    ):
        service = CounterpartyService(db, kind)
        items = await service.list(search=search, include_inactive=include_inactive)
        return {
            "success": True,
            "data": [CounterpartyResponse.model_validate(c) for c in items],
        }

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_counterparty(
        data: CounterpartyCreateRequest,
        db: AsyncSession = Depends(get_db),
    ):
        service = CounterpartyService(db, kind)
        async with transaction_scope(db):
            counterparty = await service.create(data)
        return {
            "success": True,
            "message": f"{label} created",
            "data": CounterpartyResponse.model_validate(counterparty),
        }

    @router.get("/{counterparty_id}")
    async def get_counterparty(
        counterparty_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
    ):
        service = CounterpartyService(db, kind)
        counterparty = await service.get(counterparty_id)
        return {"success": True, "data": CounterpartyResponse.model_validate(counterparty)}

    @router.patch("/{counterparty_id}")
    async def update_counterparty(
        data: CounterpartyUpdateRequest,
        counterparty_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
    ):
        service = CounterpartyService(db, kind)
        async with transaction_scope(db):
            counterparty = await service.update(counterparty_id, data)
        return {
            "success": True,
            "message": f"{label} updated",
            "data": CounterpartyResponse.model_validate(counterparty),
        }

    @router.get("/{counterparty_id}/statement")
    async def get_statement(
        counterparty_id: int = Path(...),
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
        db: AsyncSession = Depends(get_db),
        registry: AccountRegistry = Depends(get_registry),
    ):
        """Subsidiary-ledger rows in (date, id) order."""
        service = ReportingService(db, registry)
        statement = await service.statement(kind, counterparty_id, start_date, end_date)
        return {
            "success": True,
            "data": LedgerStatementResponse.model_validate(statement, from_attributes=True),
        }

    return router


clients_router = _build_router(CLIENT_LEDGER, "/api/v1/clients", "Clients")
suppliers_router = _build_router(SUPPLIER_LEDGER, "/api/v1/suppliers", "Suppliers")
