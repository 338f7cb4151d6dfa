"""
RetailOps Ledger - Asset Register Model

Off-ledger register of assets held by the business. Registering an asset
posts nothing; the register total is shown on the balance sheet as the
unpaid-asset valuation line.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, AuditMixin, MONEY


class Asset(BaseModel, AuditMixin):
    __tablename__ = "assets"

    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Fixed or intangible asset account the item belongs to",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    purchase_value: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
