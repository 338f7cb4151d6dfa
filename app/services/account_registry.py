"""
RetailOps Ledger - Chart of Accounts Registry

The registry is loaded once per unit of work and injected into every
transaction adapter. Adapters never look accounts up by literal code:
they ask for a role (accounts payable, purchase tax control, ...) and the
registry maps it to the configured code. A missing or inactive account
fails here, in one place, with a ConfigurationError.
"""

from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import LedgerAccountCodes, settings
from app.models.accounting import (
    Account,
    AccountSubType,
    AccountType,
    CashFlowCategory,
    NormalBalance,
)
from app.utils.error_handling import ConfigurationError, NotFoundError, ValidationError


class AccountRole(str, Enum):
    """Fixed accounts the adapters post to. Values match LedgerAccountCodes fields."""
    CASH = "cash"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    FIXED_ASSETS = "fixed_assets"
    PURCHASE_TAX_CONTROL = "purchase_tax_control"
    ACCOUNTS_PAYABLE = "accounts_payable"
    ACCRUED_EXPENSES = "accrued_expenses"
    SALES_TAX_PAYABLE = "sales_tax_payable"
    SALES_REVENUE = "sales_revenue"
    OTHER_INCOME = "other_income"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    ACCUMULATED_DEPRECIATION = "accumulated_depreciation"
    DAMAGES_EXPENSE = "damages_expense"


# Numeric classification codes -> (label, account type, sub type)
ACCOUNT_CLASSIFICATION: Dict[int, Tuple[str, AccountType, AccountSubType]] = {
    1: ("asset", AccountType.ASSET, AccountSubType.OTHER_ASSET),
    2: ("liability", AccountType.LIABILITY, AccountSubType.OTHER_LIABILITY),
    3: ("equity", AccountType.EQUITY, AccountSubType.SHARE_CAPITAL),
    4: ("fixed_asset", AccountType.ASSET, AccountSubType.FIXED_ASSET),
    5: ("intangible_asset", AccountType.ASSET, AccountSubType.INTANGIBLE_ASSET),
    6: ("inventory", AccountType.ASSET, AccountSubType.INVENTORY),
    7: ("receivable", AccountType.ASSET, AccountSubType.ACCOUNTS_RECEIVABLE),
    8: ("prepayment", AccountType.ASSET, AccountSubType.PREPAYMENT),
    9: ("cash", AccountType.ASSET, AccountSubType.CASH),
    10: ("payable", AccountType.LIABILITY, AccountSubType.ACCOUNTS_PAYABLE),
    11: ("other_liability", AccountType.LIABILITY, AccountSubType.OTHER_LIABILITY),
    12: ("credit_card", AccountType.LIABILITY, AccountSubType.CREDIT_CARD),
    13: ("equity", AccountType.EQUITY, AccountSubType.SHARE_CAPITAL),
    14: ("revenue", AccountType.REVENUE, AccountSubType.SALES_REVENUE),
    15: ("cogs", AccountType.EXPENSE, AccountSubType.COST_OF_GOODS_SOLD),
    16: ("expense", AccountType.EXPENSE, AccountSubType.OPERATING_EXPENSE),
    17: ("depreciation", AccountType.EXPENSE, AccountSubType.DEPRECIATION_EXPENSE),
    18: ("retained_earnings", AccountType.EQUITY, AccountSubType.RETAINED_EARNINGS),
    19: ("other_income", AccountType.REVENUE, AccountSubType.OTHER_INCOME),
}

INVESTING_SUB_TYPES = {AccountSubType.FIXED_ASSET, AccountSubType.INTANGIBLE_ASSET}
CASH_SUB_TYPES = {AccountSubType.CASH, AccountSubType.BANK}


def default_normal_balance(account_type: AccountType) -> NormalBalance:
    if account_type in (AccountType.ASSET, AccountType.EXPENSE):
        return NormalBalance.DEBIT
    return NormalBalance.CREDIT


def default_cash_flow_category(
    account_type: AccountType,
    sub_type: Optional[AccountSubType],
) -> Optional[CashFlowCategory]:
    """Cash-flow section of a non-cash account; cash accounts have none."""
    if sub_type in CASH_SUB_TYPES:
        return None
    if sub_type in INVESTING_SUB_TYPES:
        return CashFlowCategory.INVESTING
    if account_type == AccountType.EQUITY:
        return CashFlowCategory.FINANCING
    return CashFlowCategory.OPERATING


class AccountRegistry:
    """
    In-memory snapshot of the chart of accounts for one unit of work.

    Usage:
        registry = await AccountRegistry.load(db)
        payables = registry.require(AccountRole.ACCOUNTS_PAYABLE)
    """

    def __init__(
        self,
        accounts: Iterable[Account],
        codes: Optional[LedgerAccountCodes] = None,
    ):
        accounts = list(accounts)
        self._by_code: Dict[str, Account] = {a.account_code: a for a in accounts}
        self._by_id: Dict[int, Account] = {a.id: a for a in accounts}
        self.codes = codes or settings.ledger_accounts

    @classmethod
    async def load(
        cls,
        db: AsyncSession,
        codes: Optional[LedgerAccountCodes] = None,
    ) -> "AccountRegistry":
        result = await db.execute(select(Account))
        return cls(result.scalars().all(), codes)

    def resolve(self, code: str) -> Account:
        """Active account for ``code`` or ConfigurationError."""
        account = self._by_code.get(code)
        if account is None or not account.is_active:
            raise ConfigurationError(account_code=code)
        return account

    def require(self, role: AccountRole) -> Account:
        """Active account configured for ``role`` or ConfigurationError."""
        code = getattr(self.codes, role.value)
        account = self._by_code.get(code)
        if account is None or not account.is_active:
            raise ConfigurationError(account_code=code, role=role.value)
        return account

    def get(self, account_id: int) -> Account:
        """Account by id; NotFoundError if unknown, ConfigurationError if inactive."""
        account = self._by_id.get(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        if not account.is_active:
            raise ConfigurationError(
                account_code=account.account_code,
                message=f"Account {account.account_code} ({account.account_name}) is inactive",
            )
        return account

    def get_cash_account(self, account_id: Optional[int] = None) -> Account:
        """The chosen cash/bank account, or the configured default cash account."""
        if account_id is None:
            return self.require(AccountRole.CASH)
        account = self.get(account_id)
        if account.account_sub_type not in CASH_SUB_TYPES:
            raise ValidationError(
                f"Account {account.account_code} is not a cash or bank account",
                field="account_id",
            )
        return account

    @staticmethod
    def classify(type_code: int) -> str:
        """Semantic label of a numeric classification code."""
        try:
            return ACCOUNT_CLASSIFICATION[type_code][0]
        except KeyError:
            raise ValidationError(
                f"Unknown account type code: {type_code}",
                field="type_code",
                details={"valid_codes": sorted(ACCOUNT_CLASSIFICATION)},
            )

    @staticmethod
    def classification(type_code: int) -> Tuple[str, AccountType, AccountSubType]:
        AccountRegistry.classify(type_code)
        return ACCOUNT_CLASSIFICATION[type_code]
