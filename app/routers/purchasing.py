"""
RetailOps Ledger - Purchasing Router

API endpoints for purchase orders, goods receipts, asset purchase orders
and supplier payments.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.dependencies import get_actor_id, get_registry
from app.models.purchasing import PurchaseOrderStatus
from app.schemas.purchasing import (
    AssetPurchaseOrderCreate,
    AssetPurchaseOrderReceive,
    AssetPurchaseOrderResponse,
    InventoryReceiptResponse,
    PurchaseOrderCreate,
    PurchaseOrderReceive,
    PurchaseOrderResponse,
    SupplierPaymentCreate,
    SupplierPaymentResponse,
)
from app.services.account_registry import AccountRegistry
from app.services.purchasing_service import PurchasingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/purchasing", tags=["Purchasing"])


# ===========================================
# PURCHASE ORDERS
# ===========================================

@router.get("/orders")
async def list_purchase_orders(
    supplier_id: Optional[int] = Query(None),
    order_status: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = PurchasingService(db, registry)
    orders = await service.list_purchase_orders(supplier_id=supplier_id, status=order_status)
    return {"success": True, "data": [PurchaseOrderResponse.model_validate(o) for o in orders]}


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_purchase_order(
    data: PurchaseOrderCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Create a purchase order. Nothing is posted until goods are received."""
    service = PurchasingService(db, registry)
    async with transaction_scope(db):
        order = await service.create_purchase_order(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Purchase order {order.po_number} created",
        "data": PurchaseOrderResponse.model_validate(order),
    }


@router.get("/orders/{order_id}")
async def get_purchase_order(
    order_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = PurchasingService(db, registry)
    order = await service.get_purchase_order(order_id)
    return {"success": True, "data": PurchaseOrderResponse.model_validate(order)}


@router.post("/orders/{order_id}/receive")
async def receive_purchase_order(
    data: PurchaseOrderReceive,
    order_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Receive goods into a store and post the purchase to the ledgers."""
    service = PurchasingService(db, registry)
    async with transaction_scope(db):
        receipts = await service.receive_purchase_order(order_id, data, created_by=actor_id)
        order = await service.get_purchase_order(order_id)
    return {
        "success": True,
        "message": f"{len(receipts)} lines received against {order.po_number}",
        "data": {
            "order": PurchaseOrderResponse.model_validate(order),
            "receipts": [InventoryReceiptResponse.model_validate(r) for r in receipts],
        },
    }


@router.get("/orders/{order_id}/receipts")
async def list_goods_receipts(
    order_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = PurchasingService(db, registry)
    await service.get_purchase_order(order_id)
    receipts = await service.list_receipts(order_id)
    return {"success": True, "data": [InventoryReceiptResponse.model_validate(r) for r in receipts]}


# ===========================================
# ASSET PURCHASE ORDERS
# ===========================================

@router.get("/asset-orders")
async def list_asset_purchase_orders(
    supplier_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = PurchasingService(db, registry)
    orders = await service.list_asset_purchase_orders(supplier_id=supplier_id)
    return {"success": True, "data": [AssetPurchaseOrderResponse.model_validate(o) for o in orders]}


@router.post("/asset-orders", status_code=status.HTTP_201_CREATED)
async def create_asset_purchase_order(
    data: AssetPurchaseOrderCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    service = PurchasingService(db, registry)
    async with transaction_scope(db):
        order = await service.create_asset_purchase_order(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Asset purchase order {order.apo_number} created",
        "data": AssetPurchaseOrderResponse.model_validate(order),
    }


@router.get("/asset-orders/{order_id}")
async def get_asset_purchase_order(
    order_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = PurchasingService(db, registry)
    order = await service.get_asset_purchase_order(order_id)
    return {"success": True, "data": AssetPurchaseOrderResponse.model_validate(order)}


@router.post("/asset-orders/{order_id}/receive")
async def receive_asset_purchase_order(
    data: AssetPurchaseOrderReceive,
    order_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Receive an asset order in full and post it to Fixed Assets."""
    service = PurchasingService(db, registry)
    async with transaction_scope(db):
        order = await service.receive_asset_purchase_order(
            order_id, received_date=data.received_date, created_by=actor_id,
        )
    return {
        "success": True,
        "message": f"Asset purchase order {order.apo_number} received",
        "data": AssetPurchaseOrderResponse.model_validate(order),
    }


# ===========================================
# SUPPLIER PAYMENTS
# ===========================================

@router.get("/payments")
async def list_supplier_payments(
    supplier_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
):
    service = PurchasingService(db, registry)
    payments = await service.list_supplier_payments(supplier_id=supplier_id)
    return {"success": True, "data": [SupplierPaymentResponse.model_validate(p) for p in payments]}


@router.post("/payments", status_code=status.HTTP_201_CREATED)
async def pay_supplier(
    data: SupplierPaymentCreate,
    db: AsyncSession = Depends(get_db),
    registry: AccountRegistry = Depends(get_registry),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    service = PurchasingService(db, registry)
    async with transaction_scope(db):
        payment = await service.pay_supplier(data, created_by=actor_id)
    return {
        "success": True,
        "message": f"Supplier payment {payment.payment_number} recorded",
        "data": SupplierPaymentResponse.model_validate(payment),
    }
