"""
RetailOps Ledger - Counterparty Models

Clients and suppliers. ``balance`` is a denormalized copy of the subject's
latest subsidiary-ledger running balance; it is a read optimization and
may lag the ledger, which stays the record of truth.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, MONEY, ZERO


class CounterpartyMixin:
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tax_pin: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    balance: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Client(BaseModel, CounterpartyMixin):
    """Customer buying on account."""

    __tablename__ = "clients"

    def __repr__(self) -> str:
        return f"<Client(name={self.name}, balance={self.balance})>"


class Supplier(BaseModel, CounterpartyMixin):
    """Vendor supplying goods or assets on account."""

    __tablename__ = "suppliers"

    def __repr__(self) -> str:
        return f"<Supplier(name={self.name}, balance={self.balance})>"
