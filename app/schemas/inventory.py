"""
RetailOps Ledger - Catalog Schemas

Pydantic schemas for products, stores and store stock levels.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductCreateRequest(BaseModel):
    sku: Optional[str] = Field(None, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    cost_price: Decimal = Field(Decimal("0.00"), ge=0, description="Unit cost used for stock valuation")
    selling_price: Decimal = Field(Decimal("0.00"), ge=0)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sku: Optional[str] = None
    name: str
    description: Optional[str] = None
    cost_price: Decimal
    selling_price: Decimal
    is_active: bool


class StoreCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None
    is_damage_store: bool = False


class StoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: Optional[str] = None
    is_damage_store: bool
    is_active: bool


class StockLevelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    store_id: int
    product_id: int
    quantity: int
