"""
RetailOps Ledger - Reporting Service

Read-only aggregation over the ledgers:
- Aging of client and supplier balances
- Profit & loss, balance sheet and cash flow from account-ledger rows
- Trial balance
- Control account reconciliation against the subsidiary ledgers
- Account and counterparty statements

Nothing here writes. Synthetic balance-sheet lines (asset register, store
stock valuation, supplier-ledger payables) are merged into the report
only; they never become accounts or ledger rows.
"""

import logging
from calendar import monthrange
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounting import Account, AccountSubType, AccountType, CashFlowCategory
from app.models.fixed_asset import Asset
from app.models.inventory import Product, StoreInventory
from app.models.ledger import AccountLedgerRow
from app.schemas.reports import (
    AgingBuckets,
    AgingReport,
    BalanceSheetReport,
    CashFlowReport,
    CashFlowSection,
    ControlReconciliation,
    CounterpartyAging,
    ProfitAndLossReport,
    ReconciliationReport,
    ReportPeriod,
    StatementLine,
    TrialBalanceLine,
    TrialBalanceReport,
)
from app.services.account_registry import (
    CASH_SUB_TYPES,
    INVESTING_SUB_TYPES,
    AccountRegistry,
    AccountRole,
)
from app.services.ledger_service import (
    ACCOUNT_LEDGER,
    CLIENT_LEDGER,
    SUPPLIER_LEDGER,
    LedgerKind,
    LedgerService,
)
from app.services.tax_calculators import to_money
from app.utils.error_handling import NotFoundError, ValidationError


logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def aging_bucket(days: int) -> str:
    """Bucket name for a row ``days`` old."""
    if days <= 0:
        return "current"
    if days <= 30:
        return "days_1_30"
    if days <= 60:
        return "days_31_60"
    if days <= 90:
        return "days_61_90"
    return "over_90"


def resolve_period(
    period: ReportPeriod,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """Start and end dates of a reporting period preset."""
    today = today or date.today()

    if period == ReportPeriod.CUSTOM:
        if start_date is None or end_date is None:
            raise ValidationError("A custom period needs start_date and end_date", field="period")
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date", field="start_date")
        return start_date, end_date

    if period == ReportPeriod.CURRENT_MONTH:
        return today.replace(day=1), today.replace(day=monthrange(today.year, today.month)[1])

    if period == ReportPeriod.LAST_MONTH:
        last = today.replace(day=1) - timedelta(days=1)
        return last.replace(day=1), last

    if period == ReportPeriod.CURRENT_QUARTER:
        first_month = 3 * ((today.month - 1) // 3) + 1
        last_month = first_month + 2
        return (
            date(today.year, first_month, 1),
            date(today.year, last_month, monthrange(today.year, last_month)[1]),
        )

    return date(today.year, 1, 1), date(today.year, 12, 31)


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return ZERO
    return to_money(part / whole * HUNDRED)


def _line(account: Account, amount: Decimal) -> StatementLine:
    return StatementLine(
        account_id=account.id,
        account_code=account.account_code,
        account_name=account.account_name,
        amount=amount,
    )


class ReportingService:
    """Service for ledger reports."""

    def __init__(self, db: AsyncSession, registry: AccountRegistry):
        self.db = db
        self.registry = registry
        self.ledger = LedgerService(db)

    async def _accounts(self) -> List[Account]:
        result = await self.db.execute(select(Account).order_by(Account.account_code))
        return list(result.scalars().all())

    async def _movements(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Dict[int, Tuple[Decimal, Decimal]]:
        """Total (debit, credit) per account over the account-ledger rows in the window."""
        query = select(
            AccountLedgerRow.account_id,
            func.coalesce(func.sum(AccountLedgerRow.debit), 0),
            func.coalesce(func.sum(AccountLedgerRow.credit), 0),
        )
        if start_date is not None:
            query = query.where(AccountLedgerRow.date >= start_date)
        if end_date is not None:
            query = query.where(AccountLedgerRow.date <= end_date)
        result = await self.db.execute(query.group_by(AccountLedgerRow.account_id))
        return {
            account_id: (to_money(debit), to_money(credit))
            for account_id, debit, credit in result.all()
        }

    # =========================================================================
    # AGING
    # =========================================================================

    async def aging(self, kind: LedgerKind, as_of: Optional[date] = None) -> AgingReport:
        """
        Bucket every subsidiary-ledger row by its age in days at ``as_of``.

        Each row contributes its signed movement (debit - credit for
        clients, credit - debit for suppliers). Only counterparties whose
        total is positive are reported, largest first.
        """
        if kind not in (CLIENT_LEDGER, SUPPLIER_LEDGER):
            raise ValidationError(f"No aging for the {kind.name} ledger", field="ledger")
        as_of = as_of or date.today()
        model = kind.row_model

        result = await self.db.execute(
            select(kind.subject_column, model.date, model.debit, model.credit)
        )
        buckets: Dict[int, Dict[str, Decimal]] = defaultdict(lambda: defaultdict(lambda: ZERO))
        for subject_id, row_date, debit, credit in result.all():
            bucket = aging_bucket((as_of - row_date).days)
            buckets[subject_id][bucket] += kind.movement(to_money(debit), to_money(credit))

        names = {}
        if buckets:
            subject = kind.subject_model
            rows = await self.db.execute(
                select(subject.id, subject.name).where(subject.id.in_(list(buckets)))
            )
            names = dict(rows.all())

        counterparties = []
        for subject_id, amounts in buckets.items():
            total = sum(amounts.values(), ZERO)
            if total <= 0:
                continue
            counterparties.append(CounterpartyAging(
                counterparty_id=subject_id,
                name=names.get(subject_id, ""),
                total=total,
                **amounts,
            ))
        counterparties.sort(key=lambda c: c.total, reverse=True)

        totals = AgingBuckets()
        for field in ("current", "days_1_30", "days_31_60", "days_61_90", "over_90", "total"):
            setattr(totals, field, sum((getattr(c, field) for c in counterparties), ZERO))

        return AgingReport(
            ledger=kind.name,
            as_of_date=as_of,
            counterparties=counterparties,
            totals=totals,
        )

    # =========================================================================
    # PROFIT & LOSS
    # =========================================================================

    async def profit_and_loss(
        self,
        period: ReportPeriod = ReportPeriod.CURRENT_MONTH,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ProfitAndLossReport:
        start_date, end_date = resolve_period(period, start_date, end_date)
        movements = await self._movements(start_date, end_date)

        revenue_lines = []
        expense_lines = []
        sales_revenue = ZERO
        other_income = ZERO
        cogs = ZERO

        for account in await self._accounts():
            debit, credit = movements.get(account.id, (ZERO, ZERO))
            if account.account_type == AccountType.REVENUE:
                amount = credit - debit
                if amount == 0:
                    continue
                revenue_lines.append(_line(account, amount))
                if account.account_sub_type == AccountSubType.OTHER_INCOME:
                    other_income += amount
                else:
                    sales_revenue += amount
            elif account.account_type == AccountType.EXPENSE:
                amount = debit - credit
                if amount == 0:
                    continue
                if account.account_sub_type == AccountSubType.COST_OF_GOODS_SOLD:
                    cogs += amount
                else:
                    expense_lines.append(_line(account, amount))

        total_revenue = sales_revenue + other_income
        gross_profit = sales_revenue - cogs
        total_operating = sum((line.amount for line in expense_lines), ZERO)
        net_profit = gross_profit + other_income - total_operating

        return ProfitAndLossReport(
            start_date=start_date,
            end_date=end_date,
            revenue=revenue_lines,
            sales_revenue=sales_revenue,
            other_income=other_income,
            total_revenue=total_revenue,
            cost_of_goods_sold=cogs,
            gross_profit=gross_profit,
            gross_margin=_percent(gross_profit, sales_revenue),
            operating_expenses=expense_lines,
            total_operating_expenses=total_operating,
            net_profit=net_profit,
            net_margin=_percent(net_profit, total_revenue),
        )

    # =========================================================================
    # BALANCE SHEET
    # =========================================================================

    async def balance_sheet(self, as_of: Optional[date] = None) -> BalanceSheetReport:
        """
        Category-signed balances at ``as_of``: assets debit - credit,
        liabilities and equity credit - debit. Revenue and expense accounts
        roll into a synthetic Current Earnings equity line.
        """
        as_of = as_of or date.today()
        movements = await self._movements(end_date=as_of)

        assets: List[StatementLine] = []
        liabilities: List[StatementLine] = []
        equity: List[StatementLine] = []
        current_earnings = ZERO
        net_book_value = ZERO
        inventory_carried = False
        payables_carried = False

        for account in await self._accounts():
            debit, credit = movements.get(account.id, (ZERO, ZERO))
            if account.account_type == AccountType.ASSET:
                balance = debit - credit
                if account.account_sub_type in INVESTING_SUB_TYPES or \
                        account.account_sub_type == AccountSubType.ACCUMULATED_DEPRECIATION:
                    net_book_value += balance
                if balance != 0:
                    assets.append(_line(account, balance))
                    if account.account_sub_type == AccountSubType.INVENTORY:
                        inventory_carried = True
            elif account.account_type == AccountType.LIABILITY:
                balance = credit - debit
                if balance != 0:
                    liabilities.append(_line(account, balance))
                    if account.account_sub_type == AccountSubType.ACCOUNTS_PAYABLE:
                        payables_carried = True
            elif account.account_type == AccountType.EQUITY:
                balance = credit - debit
                if balance != 0:
                    equity.append(_line(account, balance))
            elif account.account_type == AccountType.REVENUE:
                current_earnings += credit - debit
            else:
                current_earnings -= debit - credit

        if current_earnings != 0:
            equity.append(StatementLine(account_name="Current Earnings", amount=current_earnings, is_synthetic=True))

        register_value = to_money(await self.db.scalar(
            select(func.coalesce(func.sum(Asset.purchase_value), 0)).where(Asset.purchase_date <= as_of)
        ))
        if register_value > 0:
            assets.append(StatementLine(account_name="Asset Register (unpaid assets)", amount=register_value, is_synthetic=True))

        if not inventory_carried:
            stock_value = to_money(await self.db.scalar(
                select(func.coalesce(func.sum(StoreInventory.quantity * Product.cost_price), 0))
                .join(Product, Product.id == StoreInventory.product_id)
            ))
            if stock_value != 0:
                assets.append(StatementLine(account_name="Store Inventory (valued at cost)", amount=stock_value, is_synthetic=True))

        if not payables_carried:
            supplier_total = sum((await self.ledger.latest_balances(SUPPLIER_LEDGER, as_of)).values(), ZERO)
            if supplier_total != 0:
                liabilities.append(StatementLine(account_name="Supplier Payables (from supplier ledger)", amount=supplier_total, is_synthetic=True))

        total_assets = sum((line.amount for line in assets), ZERO)
        total_liabilities = sum((line.amount for line in liabilities), ZERO)
        total_equity = sum((line.amount for line in equity), ZERO)
        total_le = total_liabilities + total_equity

        return BalanceSheetReport(
            as_of_date=as_of,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
            total_liabilities_and_equity=total_le,
            difference=total_assets - total_le,
            net_book_value=net_book_value,
        )

    # =========================================================================
    # CASH FLOW
    # =========================================================================

    async def cash_flow(
        self,
        period: ReportPeriod = ReportPeriod.CURRENT_MONTH,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> CashFlowReport:
        """
        Direct reading of non-cash account movements.

        Every non-cash account contributes credit - debit to its cash-flow
        section. Depreciation expense and accumulated depreciation are both
        operating, so the non-cash charge cancels out.
        """
        start_date, end_date = resolve_period(period, start_date, end_date)
        movements = await self._movements(start_date, end_date)

        sections: Dict[CashFlowCategory, List[StatementLine]] = {
            CashFlowCategory.OPERATING: [],
            CashFlowCategory.INVESTING: [],
            CashFlowCategory.FINANCING: [],
        }
        net_change_in_cash = ZERO

        for account in await self._accounts():
            if account.id not in movements:
                continue
            debit, credit = movements[account.id]
            if account.account_sub_type in CASH_SUB_TYPES:
                net_change_in_cash += debit - credit
                continue
            effect = credit - debit
            if effect == 0:
                continue
            category = account.cash_flow_category or CashFlowCategory.OPERATING
            sections[category].append(_line(account, effect))

        def section(category: CashFlowCategory) -> CashFlowSection:
            items = sections[category]
            return CashFlowSection(items=items, total=sum((i.amount for i in items), ZERO))

        operating = section(CashFlowCategory.OPERATING)
        investing = section(CashFlowCategory.INVESTING)
        financing = section(CashFlowCategory.FINANCING)

        return CashFlowReport(
            start_date=start_date,
            end_date=end_date,
            operating=operating,
            investing=investing,
            financing=financing,
            net_cash_flow=operating.total + investing.total + financing.total,
            net_change_in_cash=net_change_in_cash,
        )

    # =========================================================================
    # TRIAL BALANCE
    # =========================================================================

    async def trial_balance(self, as_of: Optional[date] = None) -> TrialBalanceReport:
        """
        Debit and credit totals per account up to ``as_of``, with each
        account's net balance on its debit or credit side.

        Every posted entry is balanced, so the totals agree unless ledger
        rows were written or altered outside the journal.
        """
        as_of = as_of or date.today()
        movements = await self._movements(end_date=as_of)

        lines = []
        for account in await self._accounts():
            if account.id not in movements:
                continue
            debit, credit = movements[account.id]
            net = debit - credit
            lines.append(TrialBalanceLine(
                account_id=account.id,
                account_code=account.account_code,
                account_name=account.account_name,
                account_type=account.account_type.value,
                total_debit=debit,
                total_credit=credit,
                debit_balance=net if net > 0 else ZERO,
                credit_balance=-net if net < 0 else ZERO,
            ))

        total_debit = sum((line.total_debit for line in lines), ZERO)
        total_credit = sum((line.total_credit for line in lines), ZERO)
        total_debit_balance = sum((line.debit_balance for line in lines), ZERO)
        total_credit_balance = sum((line.credit_balance for line in lines), ZERO)
        difference = total_debit_balance - total_credit_balance

        if total_debit != total_credit:
            logger.warning(f"Trial balance at {as_of} is out by {total_debit - total_credit}")

        return TrialBalanceReport(
            as_of_date=as_of,
            accounts=lines,
            total_debit=total_debit,
            total_credit=total_credit,
            total_debit_balance=total_debit_balance,
            total_credit_balance=total_credit_balance,
            difference=difference,
            is_balanced=total_debit == total_credit and difference == 0,
        )

    # =========================================================================
    # RECONCILIATION
    # =========================================================================

    async def reconciliation(self, as_of: Optional[date] = None) -> ReconciliationReport:
        """
        Compare each control account with the total of its subsidiary
        ledger, and the cached counterparty balances with the ledger.
        """
        as_of = as_of or date.today()
        receivables = await self._reconcile(CLIENT_LEDGER, AccountRole.ACCOUNTS_RECEIVABLE, as_of)
        payables = await self._reconcile(SUPPLIER_LEDGER, AccountRole.ACCOUNTS_PAYABLE, as_of)
        return ReconciliationReport(as_of_date=as_of, receivables=receivables, payables=payables)

    async def _reconcile(self, kind: LedgerKind, role: AccountRole, as_of: date) -> ControlReconciliation:
        control = self.registry.require(role)
        control_balance = await self.ledger.balance_as_of(ACCOUNT_LEDGER, control.id, as_of)
        if kind.credit_normal:
            control_balance = -control_balance

        ledger_balances = await self.ledger.latest_balances(kind, as_of)
        subsidiary_total = sum(ledger_balances.values(), ZERO)

        # Cached balances always reflect the latest row, whatever the as-of date
        current_balances = await self.ledger.latest_balances(kind)
        subject = kind.subject_model
        result = await self.db.execute(select(subject.id, subject.balance))
        cached_total = ZERO
        stale = []
        for subject_id, cached in result.all():
            cached = to_money(cached)
            cached_total += cached
            if cached != current_balances.get(subject_id, ZERO):
                stale.append(subject_id)

        return ControlReconciliation(
            ledger=kind.name,
            control_account_code=control.account_code,
            control_balance=control_balance,
            subsidiary_total=subsidiary_total,
            variance=control_balance - subsidiary_total,
            cached_total=cached_total,
            stale_cache_ids=sorted(stale),
        )

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    async def statement(
        self,
        kind: LedgerKind,
        subject_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict:
        """Ledger rows of one account, client or supplier in (date, id) order."""
        subject = await self.db.get(kind.subject_model, subject_id)
        if subject is None:
            raise NotFoundError(kind.subject_model.__name__, subject_id)
        statement = await self.ledger.statement(kind, subject_id, start_date, end_date)
        statement["subject_name"] = subject.account_name if kind is ACCOUNT_LEDGER else subject.name
        return statement
