"""
RetailOps Ledger - Financial Service

Transaction adapters with no counterparty: expenses, depreciation and
equity contributions, plus the off-ledger asset register.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounting import Account, AccountType, JournalEntry, JournalEntryType
from app.models.fixed_asset import Asset
from app.schemas.financial import AssetCreate, DepreciationCreate, EquityCreate, ExpenseCreate
from app.services.account_registry import INVESTING_SUB_TYPES, AccountRegistry, AccountRole
from app.services.journal_service import JournalService, PostingLine
from app.utils.error_handling import ValidationError

logger = logging.getLogger(__name__)


class FinancialService:
    """Service for expenses, depreciation, equity and the asset register."""

    def __init__(self, db: AsyncSession, registry: AccountRegistry):
        self.db = db
        self.registry = registry
        self.journal = JournalService(db, registry)

    def _account_of_type(self, account_id: int, account_type: AccountType, field: str) -> Account:
        account = self.registry.get(account_id)
        if account.account_type != account_type:
            raise ValidationError(
                f"Account {account.account_code} must be of type '{account_type.value}'",
                field=field,
                details={"account_type": account.account_type.value},
            )
        return account

    async def post_expense(self, data: ExpenseCreate, created_by: Optional[str] = None) -> JournalEntry:
        """Dr expense account; Cr payment account when paid, else Cr Accrued Expenses."""
        expense_account = self._account_of_type(data.expense_account_id, AccountType.EXPENSE, "expense_account_id")
        if data.is_paid:
            credit_account = self.registry.get_cash_account(data.payment_account_id)
        else:
            credit_account = self.registry.require(AccountRole.ACCRUED_EXPENSES)

        entry = await self.journal.post_to_ledger(
            [
                PostingLine(expense_account.id, debit=data.amount, description=data.description),
                PostingLine(credit_account.id, credit=data.amount, description=data.description),
            ],
            data.expense_date or date.today(),
            data.description,
            JournalEntryType.EXPENSE,
            reference=data.reference,
            source_type="expense",
            created_by=created_by,
        )
        logger.info(
            f"Posted {'paid' if data.is_paid else 'accrued'} expense {data.amount} "
            f"to {expense_account.account_code}"
        )
        return entry

    async def post_depreciation(self, data: DepreciationCreate, created_by: Optional[str] = None) -> JournalEntry:
        """Dr depreciation expense, Cr Accumulated Depreciation."""
        expense_account = self._account_of_type(
            data.depreciation_account_id, AccountType.EXPENSE, "depreciation_account_id",
        )
        accumulated = self.registry.require(AccountRole.ACCUMULATED_DEPRECIATION)
        description = data.description or f"Depreciation charge to {expense_account.account_name}"

        return await self.journal.post_to_ledger(
            [
                PostingLine(expense_account.id, debit=data.amount, description=description),
                PostingLine(accumulated.id, credit=data.amount, description=description),
            ],
            data.depreciation_date or date.today(),
            description,
            JournalEntryType.DEPRECIATION,
            source_type="depreciation",
            created_by=created_by,
        )

    async def add_equity(self, data: EquityCreate, created_by: Optional[str] = None) -> JournalEntry:
        """Dr cash/bank, Cr the equity account."""
        equity_account = self._account_of_type(data.equity_account_id, AccountType.EQUITY, "equity_account_id")
        cash_account = self.registry.get_cash_account(data.cash_account_id)
        description = data.description or f"Equity contribution to {equity_account.account_name}"

        entry = await self.journal.post_to_ledger(
            [
                PostingLine(cash_account.id, debit=data.amount, description=description),
                PostingLine(equity_account.id, credit=data.amount, description=description),
            ],
            data.contribution_date or date.today(),
            description,
            JournalEntryType.EQUITY,
            source_type="equity",
            created_by=created_by,
        )
        logger.info(f"Recorded equity contribution of {data.amount} to {equity_account.account_code}")
        return entry

    # =========================================================================
    # ASSET REGISTER
    # =========================================================================

    async def register_asset(self, data: AssetCreate, created_by: Optional[str] = None) -> Asset:
        """Add an asset to the register. The register is off-ledger; nothing is posted."""
        account = self.registry.get(data.account_id)
        if account.account_sub_type not in INVESTING_SUB_TYPES:
            raise ValidationError(
                f"Account {account.account_code} is not a fixed or intangible asset account",
                field="account_id",
            )
        asset = Asset(**data.model_dump(), created_by=created_by)
        self.db.add(asset)
        await self.db.flush()
        return asset

    async def list_assets(self, account_id: Optional[int] = None) -> List[Asset]:
        query = select(Asset)
        if account_id is not None:
            query = query.where(Asset.account_id == account_id)
        result = await self.db.execute(query.order_by(Asset.purchase_date, Asset.id))
        return list(result.scalars().all())
