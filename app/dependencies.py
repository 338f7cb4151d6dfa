"""
RetailOps Ledger - FastAPI Dependencies

Shared dependencies for database sessions, the account registry and the
acting user's identity.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.services.account_registry import AccountRegistry


async def get_registry(
    db: AsyncSession = Depends(get_async_session),
) -> AccountRegistry:
    """
    Load the chart of accounts once per request.

    The registry shares the request session, so accounts it hands out are
    attached to the same unit of work the router commits.
    """
    return await AccountRegistry.load(db)


async def get_actor_id(
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id", max_length=100),
) -> Optional[str]:
    """Identity recorded as ``created_by``. Authentication happens upstream."""
    return x_actor_id
