"""
RetailOps Ledger - Chart of Accounts Service

Chart maintenance: create, update, deactivate, list and the default chart
seed. Accounts are never deleted; ledger rows reference them permanently.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounting import (
    Account,
    AccountSubType,
    AccountType,
    CashFlowCategory,
    NormalBalance,
)
from app.schemas.accounting import AccountCreate, AccountUpdate
from app.services.account_registry import (
    AccountRegistry,
    default_cash_flow_category,
    default_normal_balance,
)
from app.utils.error_handling import ErrorCode, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# Default retail chart. Codes line up with LedgerAccountCodes defaults.
DEFAULT_CHART = [
    # ASSETS
    {"code": "1000", "name": "Cash at Bank", "type_code": 9, "sub_type": AccountSubType.BANK},
    {"code": "1010", "name": "Petty Cash", "type_code": 9},
    {"code": "1100", "name": "Accounts Receivable", "type_code": 7},
    {"code": "100001", "name": "Inventory", "type_code": 6},
    {"code": "1400", "name": "Fixed Assets", "type_code": 4},
    {"code": "1500", "name": "Purchase Tax Control", "type_code": 1, "sub_type": AccountSubType.PURCHASE_TAX_CONTROL},
    {"code": "520007", "name": "Accumulated Depreciation", "type_code": 4,
     "sub_type": AccountSubType.ACCUMULATED_DEPRECIATION, "normal": NormalBalance.CREDIT,
     "cash_flow": CashFlowCategory.OPERATING},

    # LIABILITIES
    {"code": "2000", "name": "Accounts Payable", "type_code": 10},
    {"code": "210003", "name": "Accrued Expenses", "type_code": 11, "sub_type": AccountSubType.ACCRUED_EXPENSE},
    {"code": "210006", "name": "Sales Tax Payable", "type_code": 11, "sub_type": AccountSubType.SALES_TAX_PAYABLE},

    # EQUITY
    {"code": "3000", "name": "Share Capital", "type_code": 3},
    {"code": "3100", "name": "Retained Earnings", "type_code": 18},

    # REVENUE
    {"code": "400001", "name": "Sales Revenue", "type_code": 14},
    {"code": "400006", "name": "Other Income", "type_code": 19},

    # EXPENSES
    {"code": "500000", "name": "Cost of Goods Sold", "type_code": 15},
    {"code": "510001", "name": "Rent Expense", "type_code": 16},
    {"code": "510002", "name": "Utilities Expense", "type_code": 16},
    {"code": "510010", "name": "Damages & Faulty Goods", "type_code": 16, "sub_type": AccountSubType.DAMAGES_EXPENSE},
    {"code": "520001", "name": "Depreciation Expense", "type_code": 17},
]


class ChartOfAccountsService:
    """Service for chart of accounts maintenance."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        is_active: Optional[bool] = True,
    ) -> List[Account]:
        """Get the chart of accounts ordered by code."""
        query = select(Account)
        if account_type:
            query = query.where(Account.account_type == account_type)
        if is_active is not None:
            query = query.where(Account.is_active == is_active)
        result = await self.db.execute(query.order_by(Account.account_code))
        return list(result.scalars().all())

    async def get_account(self, account_id: int) -> Account:
        account = await self.db.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    async def get_account_by_code(self, account_code: str) -> Optional[Account]:
        return await self.db.scalar(select(Account).where(Account.account_code == account_code))

    async def create_account(self, data: AccountCreate) -> Account:
        """Create a new account from its classification code."""
        existing = await self.get_account_by_code(data.account_code)
        if existing:
            raise ValidationError(
                f"Account code {data.account_code} already exists",
                field="account_code",
                code=ErrorCode.DUPLICATE_ENTRY,
            )

        _, account_type, sub_type = AccountRegistry.classification(data.type_code)
        sub_type = data.account_sub_type or sub_type

        if data.parent_id is not None:
            await self.get_account(data.parent_id)

        account = Account(
            account_code=data.account_code,
            account_name=data.account_name,
            description=data.description,
            type_code=data.type_code,
            account_type=account_type,
            account_sub_type=sub_type,
            normal_balance=data.normal_balance or default_normal_balance(account_type),
            cash_flow_category=data.cash_flow_category or default_cash_flow_category(account_type, sub_type),
            parent_id=data.parent_id,
            is_active=True,
        )
        self.db.add(account)
        await self.db.flush()

        logger.info(f"Created account {account.account_code} ({account.account_name})")
        return account

    async def update_account(self, account_id: int, data: AccountUpdate) -> Account:
        """Update descriptive fields; the classification is fixed once created."""
        account = await self.get_account(account_id)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("parent_id") is not None:
            if update_data["parent_id"] == account.id:
                raise ValidationError("An account cannot be its own parent", field="parent_id")
            await self.get_account(update_data["parent_id"])

        for field, value in update_data.items():
            setattr(account, field, value)

        await self.db.flush()
        return account

    async def deactivate_account(self, account_id: int) -> Account:
        """Retire an account. Its ledger history is kept."""
        account = await self.get_account(account_id)
        account.is_active = False
        await self.db.flush()
        logger.info(f"Deactivated account {account.account_code}")
        return account

    async def seed_default_chart(self) -> List[Account]:
        """
        Create the default chart of accounts.

        Idempotent: codes that already exist are left untouched. Returns
        only the accounts created by this call.
        """
        result = await self.db.execute(select(Account.account_code))
        existing = set(result.scalars().all())

        created = []
        for acc_data in DEFAULT_CHART:
            if acc_data["code"] in existing:
                continue
            created.append(await self.create_account(AccountCreate(
                account_code=acc_data["code"],
                account_name=acc_data["name"],
                type_code=acc_data["type_code"],
                account_sub_type=acc_data.get("sub_type"),
                normal_balance=acc_data.get("normal"),
                cash_flow_category=acc_data.get("cash_flow"),
            )))

        if created:
            logger.info(f"Seeded {len(created)} default accounts")
        return created
