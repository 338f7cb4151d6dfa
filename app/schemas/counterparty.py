"""
RetailOps Ledger - Counterparty Schemas

Pydantic schemas for clients and suppliers.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class CounterpartyCreateRequest(BaseModel):
    """Schema for creating a client or supplier."""
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    tax_pin: Optional[str] = Field(None, max_length=50, description="Tax registration number")


class CounterpartyUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    tax_pin: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class CounterpartyResponse(BaseModel):
    """
    Client or supplier. ``balance`` is the cached copy of the latest
    subsidiary-ledger running balance.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_pin: Optional[str] = None
    balance: Decimal
    is_active: bool
    created_at: datetime
