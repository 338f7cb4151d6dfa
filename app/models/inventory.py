"""
RetailOps Ledger - Inventory Models

Products, stores and per-store stock quantities. Store inventory is an
operational quantity table; its valuation appears on the balance sheet
only as a synthetic line.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, MONEY, ZERO


class Product(BaseModel):
    """Stock item with the unit cost used for inventory valuation."""

    __tablename__ = "products"

    sku: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cost_price: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    selling_price: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Store(BaseModel):
    """Physical stock location (shop, warehouse or damages store)."""

    __tablename__ = "stores"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_damage_store: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class StoreInventory(BaseModel):
    """Quantity on hand of one product in one store."""

    __tablename__ = "store_inventory"

    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="RESTRICT"), nullable=False,
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint("store_id", "product_id", name="uq_store_inventory_store_product"),
    )
