"""
RetailOps Ledger - Counterparty Service

Business logic for clients and suppliers. The two share one shape, so
one service handles both, parameterized by the ledger kind.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.counterparty import Client, Supplier
from app.schemas.counterparty import CounterpartyCreateRequest, CounterpartyUpdateRequest
from app.services.ledger_service import CLIENT_LEDGER, SUPPLIER_LEDGER, LedgerKind
from app.utils.error_handling import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

Counterparty = Union[Client, Supplier]


class CounterpartyService:
    """Service for client and supplier operations."""

    def __init__(self, db: AsyncSession, kind: LedgerKind):
        if kind not in (CLIENT_LEDGER, SUPPLIER_LEDGER):
            raise ValueError(f"{kind.name} ledger has no counterparties")
        self.db = db
        self.kind = kind
        self.model = kind.subject_model

    @classmethod
    def clients(cls, db: AsyncSession) -> "CounterpartyService":
        return cls(db, CLIENT_LEDGER)

    @classmethod
    def suppliers(cls, db: AsyncSession) -> "CounterpartyService":
        return cls(db, SUPPLIER_LEDGER)

    async def list(
        self,
        search: Optional[str] = None,
        include_inactive: bool = False,
    ) -> List[Counterparty]:
        query = select(self.model)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                (self.model.name.ilike(search_term)) |
                (self.model.email.ilike(search_term)) |
                (self.model.tax_pin.ilike(search_term))
            )
        if not include_inactive:
            query = query.where(self.model.is_active == True)  # noqa: E712
        result = await self.db.execute(query.order_by(self.model.name))
        return list(result.scalars().all())

    async def get(self, counterparty_id: int) -> Counterparty:
        counterparty = await self.db.get(self.model, counterparty_id)
        if counterparty is None:
            raise NotFoundError(self.model.__name__, counterparty_id)
        return counterparty

    async def get_active(self, counterparty_id: int) -> Counterparty:
        """Counterparty that may take new postings."""
        counterparty = await self.get(counterparty_id)
        if not counterparty.is_active:
            raise ValidationError(
                f"{self.model.__name__} '{counterparty.name}' is inactive",
                field=f"{self.kind.subject_attr}",
            )
        return counterparty

    async def create(self, data: CounterpartyCreateRequest) -> Counterparty:
        counterparty = self.model(**data.model_dump())
        self.db.add(counterparty)
        await self.db.flush()
        logger.info(f"Created {self.kind.name} {counterparty.id} ({counterparty.name})")
        return counterparty

    async def update(self, counterparty_id: int, data: CounterpartyUpdateRequest) -> Counterparty:
        counterparty = await self.get(counterparty_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(counterparty, field, value)
        await self.db.flush()
        return counterparty
