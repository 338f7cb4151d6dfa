"""
RetailOps Ledger - Purchasing Models

Purchase orders for stock, asset purchase orders, goods receipts and
supplier payments. Receiving an order or paying a supplier is what posts
to the ledgers; creating an order does not.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, AuditMixin, MONEY, ZERO


class PurchaseOrderStatus(str, Enum):
    DRAFT = "draft"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"


# =============================================================================
# STOCK PURCHASE ORDERS
# =============================================================================

class PurchaseOrder(BaseModel, AuditMixin):
    __tablename__ = "purchase_orders"

    po_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[PurchaseOrderStatus] = mapped_column(
        SQLEnum(PurchaseOrderStatus), nullable=False, default=PurchaseOrderStatus.DRAFT,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)

    items: Mapped[List["PurchaseOrderItem"]] = relationship(
        "PurchaseOrderItem",
        order_by="PurchaseOrderItem.id",
        lazy="selectin",
    )


class PurchaseOrderItem(BaseModel):
    __tablename__ = "purchase_order_items"

    purchase_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    received_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_type: Mapped[str] = mapped_column(String(20), nullable=False, default="16%")


class InventoryReceipt(BaseModel, AuditMixin):
    """One received line of a purchase order into a store."""

    __tablename__ = "inventory_receipts"

    purchase_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("purchase_orders.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False,
    )
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="RESTRICT"), nullable=False,
    )
    received_date: Mapped[date] = mapped_column(Date, nullable=False)
    received_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("journal_entries.id", ondelete="RESTRICT"), nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# =============================================================================
# ASSET PURCHASE ORDERS
# =============================================================================

class AssetPurchaseOrder(BaseModel, AuditMixin):
    __tablename__ = "asset_purchase_orders"

    apo_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PurchaseOrderStatus] = mapped_column(
        SQLEnum(PurchaseOrderStatus), nullable=False, default=PurchaseOrderStatus.DRAFT,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    received_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("journal_entries.id", ondelete="RESTRICT"), nullable=True,
    )

    items: Mapped[List["AssetPurchaseOrderItem"]] = relationship(
        "AssetPurchaseOrderItem",
        order_by="AssetPurchaseOrderItem.id",
        lazy="selectin",
    )


class AssetPurchaseOrderItem(BaseModel):
    __tablename__ = "asset_purchase_order_items"

    asset_purchase_order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("asset_purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_type: Mapped[str] = mapped_column(String(20), nullable=False, default="16%")
    net_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, default=ZERO, nullable=False)


# =============================================================================
# SUPPLIER PAYMENTS
# =============================================================================

class SupplierPayment(BaseModel, AuditMixin):
    __tablename__ = "supplier_payments"

    payment_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True,
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"), nullable=False,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    journal_entry_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("journal_entries.id", ondelete="RESTRICT"), nullable=True,
    )
