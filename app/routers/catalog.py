"""
RetailOps Ledger - Catalog Router

Products, stores and store stock levels.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, transaction_scope
from app.schemas.inventory import (
    ProductCreateRequest,
    ProductResponse,
    StockLevelResponse,
    StoreCreateRequest,
    StoreResponse,
)
from app.services.inventory_service import InventoryService


router = APIRouter(prefix="/api/v1/catalog", tags=["Catalog"])


@router.get("/products")
async def list_products(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    service = InventoryService(db)
    products = await service.list_products(include_inactive=include_inactive)
    return {"success": True, "data": [ProductResponse.model_validate(p) for p in products]}


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    service = InventoryService(db)
    async with transaction_scope(db):
        product = await service.create_product(data)
    return {
        "success": True,
        "message": "Product created",
        "data": ProductResponse.model_validate(product),
    }


@router.get("/stores")
async def list_stores(db: AsyncSession = Depends(get_db)):
    service = InventoryService(db)
    stores = await service.list_stores()
    return {"success": True, "data": [StoreResponse.model_validate(s) for s in stores]}


@router.post("/stores", status_code=status.HTTP_201_CREATED)
async def create_store(
    data: StoreCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    service = InventoryService(db)
    async with transaction_scope(db):
        store = await service.create_store(data)
    return {
        "success": True,
        "message": "Store created",
        "data": StoreResponse.model_validate(store),
    }


@router.get("/stock")
async def get_stock_levels(
    store_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Quantity on hand per store and product."""
    service = InventoryService(db)
    levels = await service.stock_levels(store_id)
    return {"success": True, "data": [StockLevelResponse.model_validate(s) for s in levels]}
