"""
RetailOps Ledger - Base Model

Base model class and mixins for all SQLAlchemy models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


# Money columns: two decimal places, wide enough for any retail ledger
MONEY = Numeric(18, 2)
ZERO = Decimal("0.00")


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class AuditMixin:
    """Mixin that records the actor identity supplied by the caller."""

    created_by: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )


class BaseModel(Base, TimestampMixin):
    """
    Abstract base model with an integer primary key and timestamps.

    Integer keys are insertion ordered, which ledger tables rely on for
    their (date, id) ordering.
    """

    __abstract__ = True

    # Load server-generated timestamps at flush; async sessions cannot lazy load
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
