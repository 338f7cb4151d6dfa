"""
RetailOps Ledger - Catalog & Store Inventory Service

Products, stores and per-store quantities. Quantities move only as a side
effect of purchase receipts and damaged-goods credit notes.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.inventory import Product, Store, StoreInventory
from app.schemas.inventory import ProductCreateRequest, StoreCreateRequest
from app.utils.error_handling import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for catalog and stock-level operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ===========================================
    # PRODUCTS
    # ===========================================

    async def create_product(self, data: ProductCreateRequest) -> Product:
        if data.sku:
            existing = await self.db.scalar(select(Product.id).where(Product.sku == data.sku))
            if existing is not None:
                raise ValidationError(f"Product SKU {data.sku} already exists", field="sku")
        product = Product(**data.model_dump())
        self.db.add(product)
        await self.db.flush()
        return product

    async def list_products(self, include_inactive: bool = False) -> List[Product]:
        query = select(Product)
        if not include_inactive:
            query = query.where(Product.is_active == True)  # noqa: E712
        result = await self.db.execute(query.order_by(Product.name))
        return list(result.scalars().all())

    async def get_product(self, product_id: int) -> Product:
        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    # ===========================================
    # STORES
    # ===========================================

    async def create_store(self, data: StoreCreateRequest) -> Store:
        store = Store(**data.model_dump())
        self.db.add(store)
        await self.db.flush()
        return store

    async def list_stores(self) -> List[Store]:
        result = await self.db.execute(select(Store).order_by(Store.name))
        return list(result.scalars().all())

    async def get_active_store(self, store_id: int, field: str = "store_id") -> Store:
        store = await self.db.get(Store, store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        if not store.is_active:
            raise ValidationError(f"Store '{store.name}' is inactive", field=field)
        return store

    # ===========================================
    # STOCK LEVELS
    # ===========================================

    async def adjust_stock(self, store_id: int, product_id: int, quantity: int) -> StoreInventory:
        """Add ``quantity`` to a store's stock of a product, creating the row if needed."""
        stock = await self.db.scalar(
            select(StoreInventory)
            .where(StoreInventory.store_id == store_id, StoreInventory.product_id == product_id)
            .with_for_update()
        )
        if stock is None:
            stock = StoreInventory(store_id=store_id, product_id=product_id, quantity=0)
            self.db.add(stock)
        stock.quantity += quantity
        await self.db.flush()
        logger.debug(f"Stock of product {product_id} in store {store_id} now {stock.quantity}")
        return stock

    async def stock_levels(self, store_id: Optional[int] = None) -> List[StoreInventory]:
        query = select(StoreInventory)
        if store_id is not None:
            query = query.where(StoreInventory.store_id == store_id)
        result = await self.db.execute(query.order_by(StoreInventory.store_id, StoreInventory.product_id))
        return list(result.scalars().all())
