"""
RetailOps Ledger - Purchasing Schemas

Pydantic schemas for purchase orders, goods receipts, asset purchase
orders and supplier payments.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.purchasing import PurchaseOrderStatus
from app.services.tax_calculators import DEFAULT_TAX_TYPE


# ===========================================
# PURCHASE ORDERS
# ===========================================

class PurchaseOrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_cost: Decimal = Field(..., ge=0)
    tax_type: str = Field(DEFAULT_TAX_TYPE, description="'16%', 'zero_rated' or 'exempted'")


class PurchaseOrderCreate(BaseModel):
    supplier_id: int
    order_date: Optional[date] = None
    expected_delivery_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[PurchaseOrderItemCreate] = Field(..., min_length=1)


class ReceiveItem(BaseModel):
    item_id: int = Field(..., description="Purchase order item ID")
    quantity: int = Field(..., gt=0)


class PurchaseOrderReceive(BaseModel):
    """
    Goods receipt against a purchase order.

    When ``items`` is omitted every outstanding quantity is received.
    """
    store_id: int
    received_date: Optional[date] = None
    items: Optional[List[ReceiveItem]] = None
    notes: Optional[str] = None


class PurchaseOrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    received_quantity: int
    unit_cost: Decimal
    tax_type: str


class PurchaseOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    po_number: str
    supplier_id: int
    order_date: date
    expected_delivery_date: Optional[date] = None
    status: PurchaseOrderStatus
    notes: Optional[str] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    created_by: Optional[str] = None
    created_at: datetime
    items: List[PurchaseOrderItemResponse] = []


class InventoryReceiptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    purchase_order_id: int
    product_id: int
    store_id: int
    received_date: date
    received_quantity: int
    unit_cost: Decimal
    net_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    journal_entry_id: Optional[int] = None


# ===========================================
# ASSET PURCHASE ORDERS
# ===========================================

class AssetPurchaseOrderItemCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    tax_type: str = DEFAULT_TAX_TYPE


class AssetPurchaseOrderCreate(BaseModel):
    supplier_id: int
    order_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[AssetPurchaseOrderItemCreate] = Field(..., min_length=1)


class AssetPurchaseOrderReceive(BaseModel):
    received_date: Optional[date] = None


class AssetPurchaseOrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    quantity: int
    unit_price: Decimal
    tax_type: str
    net_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


class AssetPurchaseOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    apo_number: str
    supplier_id: int
    order_date: date
    status: PurchaseOrderStatus
    notes: Optional[str] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    received_date: Optional[date] = None
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
    items: List[AssetPurchaseOrderItemResponse] = []


# ===========================================
# SUPPLIER PAYMENTS
# ===========================================

class SupplierPaymentCreate(BaseModel):
    supplier_id: int
    amount: Decimal = Field(..., gt=0)
    payment_date: Optional[date] = None
    account_id: Optional[int] = Field(None, description="Cash or bank account paid from; defaults to the cash account")
    payment_method: Optional[str] = Field(None, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class SupplierPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_number: str
    supplier_id: int
    payment_date: date
    amount: Decimal
    account_id: int
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    journal_entry_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
