"""
RetailOps Ledger - Reporting Tests

Unit tests for aging, statements, reconciliation and the financial
reports.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.counterparty import Client, Supplier
from app.models.inventory import Product, Store
from app.schemas.financial import AssetCreate, DepreciationCreate, EquityCreate, ExpenseCreate
from app.schemas.purchasing import PurchaseOrderCreate, PurchaseOrderItemCreate, PurchaseOrderReceive
from app.schemas.reports import ReportPeriod
from app.schemas.sales import SalesInvoiceCreate, SalesLineCreate
from app.services.account_registry import AccountRegistry
from app.services.financial_service import FinancialService
from app.services.journal_service import JournalService, PostingLine
from app.services.ledger_service import ACCOUNT_LEDGER, CLIENT_LEDGER, SUPPLIER_LEDGER, LedgerService
from app.services.purchasing_service import PurchasingService
from app.services.reporting_service import ReportingService, aging_bucket, resolve_period
from app.services.sales_service import SalesService
from app.utils.error_handling import NotFoundError, ValidationError


JUNE_START = date(2026, 6, 1)
JUNE_END = date(2026, 6, 30)


async def build_june_books(db, registry, chart, client_party, supplier, product, store):
    """
    A small set of books:

    equity 50,000 in January; in June a 500 + 16% stock purchase, a
    200 + 16% invoice, 120 cost of sales, 1,200 rent paid, 50 other
    income received and 250 depreciation.
    """
    financial = FinancialService(db, registry)
    journal = JournalService(db, registry)

    await financial.add_equity(EquityCreate(
        equity_account_id=chart["3000"].id, amount=Decimal("50000"), contribution_date=date(2026, 1, 2),
    ))

    purchasing = PurchasingService(db, registry)
    order = await purchasing.create_purchase_order(PurchaseOrderCreate(
        supplier_id=supplier.id,
        order_date=JUNE_START,
        items=[PurchaseOrderItemCreate(product_id=product.id, quantity=10, unit_cost=Decimal("50"))],
    ))
    await purchasing.receive_purchase_order(
        order.id, PurchaseOrderReceive(store_id=store.id, received_date=date(2026, 6, 5)),
    )

    await SalesService(db, registry).issue_invoice(SalesInvoiceCreate(
        client_id=client_party.id,
        invoice_date=JUNE_START,
        items=[SalesLineCreate(product_id=product.id, quantity=2, unit_price=Decimal("100"))],
    ))
    await journal.post_manual_entry(
        [
            PostingLine(chart["500000"].id, debit=Decimal("120")),
            PostingLine(chart["100001"].id, credit=Decimal("120")),
        ],
        JUNE_START,
        "Cost of goods sold",
    )
    await financial.post_expense(ExpenseCreate(
        expense_account_id=chart["510001"].id, amount=Decimal("1200"), expense_date=JUNE_START, description="Rent",
    ))
    await journal.post_manual_entry(
        [
            PostingLine(chart["1000"].id, debit=Decimal("50")),
            PostingLine(chart["400006"].id, credit=Decimal("50")),
        ],
        date(2026, 6, 12),
        "Display space rental",
    )
    await financial.post_depreciation(DepreciationCreate(
        depreciation_account_id=chart["520001"].id, amount=Decimal("250"), depreciation_date=JUNE_END,
    ))


@pytest.fixture
def books(db_session, registry, chart, client_party, supplier, product, store):
    async def build():
        await build_june_books(db_session, registry, chart, client_party, supplier, product, store)
    return build


class TestAgingBuckets:
    """Bucket boundaries are inclusive at 30, 60 and 90 days."""

    def test_boundaries(self):
        assert aging_bucket(-5) == "current"
        assert aging_bucket(0) == "current"
        assert aging_bucket(1) == "days_1_30"
        assert aging_bucket(30) == "days_1_30"
        assert aging_bucket(31) == "days_31_60"
        assert aging_bucket(60) == "days_31_60"
        assert aging_bucket(61) == "days_61_90"
        assert aging_bucket(90) == "days_61_90"
        assert aging_bucket(91) == "over_90"


class TestAgingReport:

    @pytest.mark.asyncio
    async def test_rows_bucketed_by_age(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client,
    ):
        ledger = LedgerService(db_session)
        as_of = date(2026, 6, 30)
        for row_date, amount in [
            (date(2026, 6, 30), "1"),    # 0 days
            (date(2026, 5, 31), "2"),    # 30
            (date(2026, 5, 30), "4"),    # 31
            (date(2026, 5, 1), "8"),     # 60
            (date(2026, 4, 30), "16"),   # 61
            (date(2026, 4, 1), "32"),    # 90
            (date(2026, 3, 31), "64"),   # 91
        ]:
            await ledger.post_client_row(client_party.id, row_date, debit=Decimal(amount))

        report = await ReportingService(db_session, registry).aging(CLIENT_LEDGER, as_of)

        assert len(report.counterparties) == 1
        aging = report.counterparties[0]
        assert aging.name == "Amani Traders"
        assert aging.current == Decimal("1.00")
        assert aging.days_1_30 == Decimal("2.00")
        assert aging.days_31_60 == Decimal("12.00")
        assert aging.days_61_90 == Decimal("48.00")
        assert aging.over_90 == Decimal("64.00")
        assert aging.total == Decimal("127.00")
        assert report.totals.total == Decimal("127.00")

    @pytest.mark.asyncio
    async def test_only_positive_balances_largest_first(
        self, db_session: AsyncSession, registry: AccountRegistry,
        client_party: Client, second_client: Client,
    ):
        ledger = LedgerService(db_session)
        third = Client(name="Credit Holder")
        db_session.add(third)
        await db_session.flush()

        await ledger.post_client_row(client_party.id, date(2026, 6, 1), debit=Decimal("10"))
        await ledger.post_client_row(second_client.id, date(2026, 6, 1), debit=Decimal("90"))
        await ledger.post_client_row(third.id, date(2026, 6, 1), credit=Decimal("40"))

        report = await ReportingService(db_session, registry).aging(CLIENT_LEDGER, date(2026, 6, 30))

        assert [c.counterparty_id for c in report.counterparties] == [second_client.id, client_party.id]

    @pytest.mark.asyncio
    async def test_supplier_aging_uses_credit_balances(
        self, db_session: AsyncSession, registry: AccountRegistry, supplier: Supplier,
    ):
        ledger = LedgerService(db_session)
        await ledger.post_supplier_row(supplier.id, date(2026, 4, 1), credit=Decimal("580"))
        await ledger.post_supplier_row(supplier.id, date(2026, 6, 20), debit=Decimal("80"))

        report = await ReportingService(db_session, registry).aging(SUPPLIER_LEDGER, date(2026, 6, 30))

        aging = report.counterparties[0]
        assert report.ledger == "supplier"
        assert aging.days_61_90 == Decimal("580.00")
        assert aging.days_1_30 == Decimal("-80.00")
        assert aging.total == Decimal("500.00")

    @pytest.mark.asyncio
    async def test_no_aging_for_account_ledger(self, db_session: AsyncSession, registry: AccountRegistry):
        with pytest.raises(ValidationError):
            await ReportingService(db_session, registry).aging(ACCOUNT_LEDGER)


class TestStatements:

    @pytest.mark.asyncio
    async def test_account_statement_window(self, db_session: AsyncSession, registry: AccountRegistry, chart, books):
        await books()
        statement = await ReportingService(db_session, registry).statement(
            ACCOUNT_LEDGER, chart["1000"].id, JUNE_START, JUNE_END,
        )

        assert statement["subject_name"] == "Cash at Bank"
        assert statement["opening_balance"] == Decimal("50000.00")
        assert statement["closing_balance"] == Decimal("48850.00")
        assert len(statement["rows"]) == 2

    @pytest.mark.asyncio
    async def test_client_statement(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client, books,
    ):
        await books()
        statement = await ReportingService(db_session, registry).statement(CLIENT_LEDGER, client_party.id)

        assert statement["subject_name"] == "Amani Traders"
        assert statement["opening_balance"] == Decimal("0.00")
        assert statement["closing_balance"] == Decimal("232.00")

    @pytest.mark.asyncio
    async def test_unknown_subject(self, db_session: AsyncSession, registry: AccountRegistry):
        with pytest.raises(NotFoundError):
            await ReportingService(db_session, registry).statement(SUPPLIER_LEDGER, 9999)


class TestReconciliation:
    """Control accounts against subsidiary ledgers."""

    @pytest.mark.asyncio
    async def test_books_reconcile(self, db_session: AsyncSession, registry: AccountRegistry, books):
        await books()
        report = await ReportingService(db_session, registry).reconciliation(JUNE_END)

        assert report.receivables.control_balance == Decimal("232.00")
        assert report.receivables.subsidiary_total == Decimal("232.00")
        assert report.receivables.variance == Decimal("0.00")
        assert report.payables.control_balance == Decimal("580.00")
        assert report.payables.subsidiary_total == Decimal("580.00")
        assert report.payables.variance == Decimal("0.00")
        assert report.payables.cached_total == Decimal("580.00")
        assert report.receivables.stale_cache_ids == []

    @pytest.mark.asyncio
    async def test_variance_and_stale_cache_reported(
        self, db_session: AsyncSession, registry: AccountRegistry, chart, client_party: Client, books,
    ):
        await books()
        # Posted to the control account without a client-ledger row
        await JournalService(db_session, registry).post_manual_entry(
            [
                PostingLine(chart["1100"].id, debit=Decimal("10")),
                PostingLine(chart["400006"].id, credit=Decimal("10")),
            ],
            JUNE_END,
            "Unallocated receivable",
        )
        await db_session.execute(
            update(Client).where(Client.id == client_party.id).values(balance=Decimal("1.00"))
        )

        report = await ReportingService(db_session, registry).reconciliation(JUNE_END)

        assert report.receivables.variance == Decimal("10.00")
        assert report.receivables.stale_cache_ids == [client_party.id]


class TestFinancialStatements:

    @pytest.mark.asyncio
    async def test_profit_and_loss(self, db_session: AsyncSession, registry: AccountRegistry, books):
        await books()
        report = await ReportingService(db_session, registry).profit_and_loss(
            ReportPeriod.CUSTOM, JUNE_START, JUNE_END,
        )

        assert report.sales_revenue == Decimal("200.00")
        assert report.other_income == Decimal("50.00")
        assert report.total_revenue == Decimal("250.00")
        assert report.cost_of_goods_sold == Decimal("120.00")
        assert report.gross_profit == Decimal("80.00")
        assert report.gross_margin == Decimal("40.00")
        assert report.total_operating_expenses == Decimal("1450.00")
        assert report.net_profit == Decimal("-1320.00")
        assert report.net_margin == Decimal("-528.00")

    @pytest.mark.asyncio
    async def test_balance_sheet_balances(self, db_session: AsyncSession, registry: AccountRegistry, books):
        await books()
        report = await ReportingService(db_session, registry).balance_sheet(JUNE_END)

        assert report.total_assets == Decimal("49292.00")
        assert report.total_liabilities == Decimal("612.00")
        assert report.total_equity == Decimal("48680.00")
        assert report.difference == Decimal("0.00")
        assert report.net_book_value == Decimal("-250.00")

        earnings = [line for line in report.equity if line.is_synthetic]
        assert earnings[0].account_name == "Current Earnings"
        assert earnings[0].amount == Decimal("-1320.00")
        assert not any(line.is_synthetic for line in report.assets)

    @pytest.mark.asyncio
    async def test_balance_sheet_includes_asset_register(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
    ):
        await FinancialService(db_session, registry).register_asset(AssetCreate(
            account_id=chart["1400"].id,
            name="Shop shelving",
            purchase_date=date(2026, 2, 1),
            purchase_value=Decimal("4000"),
        ))
        report = await ReportingService(db_session, registry).balance_sheet(JUNE_END)

        register = [line for line in report.assets if line.is_synthetic]
        assert register[0].account_name == "Asset Register (unpaid assets)"
        assert register[0].amount == Decimal("4000.00")

    @pytest.mark.asyncio
    async def test_cash_flow_ties_to_cash_movement(self, db_session: AsyncSession, registry: AccountRegistry, books):
        await books()
        report = await ReportingService(db_session, registry).cash_flow(ReportPeriod.CUSTOM, JUNE_START, JUNE_END)

        assert report.net_change_in_cash == Decimal("-1150.00")
        assert report.net_cash_flow == report.net_change_in_cash
        assert report.financing.total == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_equity_is_financing(self, db_session: AsyncSession, registry: AccountRegistry, chart):
        await FinancialService(db_session, registry).add_equity(EquityCreate(
            equity_account_id=chart["3000"].id, amount=Decimal("1000"), contribution_date=JUNE_START,
        ))
        report = await ReportingService(db_session, registry).cash_flow(ReportPeriod.CUSTOM, JUNE_START, JUNE_END)

        assert report.financing.total == Decimal("1000.00")
        assert report.net_change_in_cash == Decimal("1000.00")


class TestTrialBalance:
    """Total debits equal total credits over every posted entry."""

    @pytest.mark.asyncio
    async def test_books_balance(self, db_session: AsyncSession, registry: AccountRegistry, chart, books):
        await books()
        report = await ReportingService(db_session, registry).trial_balance(JUNE_END)

        assert report.is_balanced
        assert report.total_debit == report.total_credit == Decimal("52432.00")
        assert report.total_debit_balance == report.total_credit_balance == Decimal("51112.00")
        assert report.difference == Decimal("0.00")

        lines = {line.account_code: line for line in report.accounts}
        assert len(lines) == 13
        assert lines["1000"].total_debit == Decimal("50050.00")
        assert lines["1000"].total_credit == Decimal("1200.00")
        assert lines["1000"].debit_balance == Decimal("48850.00")
        assert lines["1000"].credit_balance == Decimal("0.00")
        assert lines["2000"].credit_balance == Decimal("580.00")
        assert lines["100001"].debit_balance == Decimal("380.00")

    @pytest.mark.asyncio
    async def test_as_of_excludes_later_rows(self, db_session: AsyncSession, registry: AccountRegistry, books):
        await books()
        report = await ReportingService(db_session, registry).trial_balance(date(2026, 5, 31))

        assert [line.account_code for line in report.accounts] == ["1000", "3000"]
        assert report.total_debit == Decimal("50000.00")
        assert report.is_balanced

    @pytest.mark.asyncio
    async def test_row_outside_the_journal_unbalances(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
    ):
        await LedgerService(db_session).post_account_row(chart["1000"].id, JUNE_START, debit=Decimal("10"))
        report = await ReportingService(db_session, registry).trial_balance(JUNE_END)

        assert not report.is_balanced
        assert report.difference == Decimal("10.00")


class TestReportPeriods:

    def test_custom_period_needs_both_dates(self):
        with pytest.raises(ValidationError):
            resolve_period(ReportPeriod.CUSTOM, start_date=JUNE_START)

    def test_custom_period_must_be_ordered(self):
        with pytest.raises(ValidationError):
            resolve_period(ReportPeriod.CUSTOM, JUNE_END, JUNE_START)

    def test_presets(self):
        today = date(2026, 2, 10)
        assert resolve_period(ReportPeriod.CURRENT_MONTH, today=today) == (date(2026, 2, 1), date(2026, 2, 28))
        assert resolve_period(ReportPeriod.LAST_MONTH, today=today) == (date(2026, 1, 1), date(2026, 1, 31))
        assert resolve_period(ReportPeriod.CURRENT_QUARTER, today=date(2026, 5, 20)) == (
            date(2026, 4, 1), date(2026, 6, 30),
        )
        assert resolve_period(ReportPeriod.CURRENT_YEAR, today=today) == (date(2026, 1, 1), date(2026, 12, 31))
