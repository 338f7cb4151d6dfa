"""
RetailOps Ledger - Sales Tests

Unit tests for invoices, credit notes and customer receipts.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import LedgerAccountCodes
from app.database import transaction_scope
from app.models.accounting import JournalEntry, JournalEntryLine
from app.models.counterparty import Client
from app.models.inventory import Product, Store, StoreInventory
from app.models.ledger import AccountLedgerRow, ClientLedgerRow, SupplierLedgerRow
from app.models.sales import CreditNoteScenario, ReceiptStatus, SalesInvoice
from app.schemas.sales import CreditNoteCreate, ReceiptCreate, SalesInvoiceCreate, SalesLineCreate
from app.services.account_registry import AccountRegistry
from app.services.ledger_service import ACCOUNT_LEDGER, CLIENT_LEDGER
from app.services.sales_service import SalesService
from app.utils.error_handling import AlreadyProcessedError, ConfigurationError, ValidationError
from conftest import count_rows


async def issue_invoice(service: SalesService, client_party: Client, product: Product, quantity: int = 2):
    return await service.issue_invoice(SalesInvoiceCreate(
        client_id=client_party.id,
        invoice_date=date(2026, 6, 1),
        items=[SalesLineCreate(product_id=product.id, quantity=quantity, unit_price=Decimal("100.00"))],
    ))


def credit_note(client_party: Client, product: Product, scenario: CreditNoteScenario, **kwargs) -> CreditNoteCreate:
    return CreditNoteCreate(
        client_id=client_party.id,
        credit_note_date=date(2026, 6, 10),
        scenario=scenario,
        items=[SalesLineCreate(product_id=product.id, quantity=1, unit_price=Decimal("116.00"))],
        **kwargs,
    )


class TestInvoices:
    """Tax is added to net invoice lines."""

    @pytest.mark.asyncio
    async def test_invoice_posts_receivable_revenue_and_tax(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        client_party: Client, product: Product,
    ):
        service = SalesService(db_session, registry)
        invoice = await issue_invoice(service, client_party, product)

        assert invoice.invoice_number == "INV-000001"
        assert invoice.subtotal == Decimal("200.00")
        assert invoice.tax_amount == Decimal("32.00")
        assert invoice.total_amount == Decimal("232.00")

        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1100"].id) == Decimal("232.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["400001"].id) == Decimal("-200.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["210006"].id) == Decimal("-32.00")
        assert await ledger.current_balance(CLIENT_LEDGER, client_party.id) == Decimal("232.00")

    @pytest.mark.asyncio
    async def test_zero_rated_invoice_has_no_tax_line(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client, product: Product,
    ):
        service = SalesService(db_session, registry)
        invoice = await service.issue_invoice(SalesInvoiceCreate(
            client_id=client_party.id,
            invoice_date=date(2026, 6, 1),
            items=[SalesLineCreate(
                product_id=product.id, quantity=1, unit_price=Decimal("80.00"), tax_type="zero_rated",
            )],
        ))
        entry = await db_session.get(JournalEntry, invoice.journal_entry_id)
        assert len(entry.lines) == 2
        assert invoice.tax_amount == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_missing_tax_account_rolls_back_everything(
        self, db_session: AsyncSession, chart, client_party: Client, product: Product,
    ):
        """A configuration error mid-posting leaves no partial writes."""
        registry = await AccountRegistry.load(
            db_session, LedgerAccountCodes(sales_tax_payable="999999"),
        )
        service = SalesService(db_session, registry)

        with pytest.raises(ConfigurationError):
            async with transaction_scope(db_session):
                await issue_invoice(service, client_party, product)

        assert await count_rows(db_session, SalesInvoice) == 0
        assert await count_rows(db_session, JournalEntry) == 0
        assert await count_rows(db_session, JournalEntryLine) == 0
        assert await count_rows(db_session, AccountLedgerRow) == 0
        assert await count_rows(db_session, ClientLedgerRow) == 0
        assert await count_rows(db_session, SupplierLedgerRow) == 0

    @pytest.mark.asyncio
    async def test_zero_value_invoice_posts_nothing(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client, product: Product,
    ):
        service = SalesService(db_session, registry)
        invoice = await service.issue_invoice(SalesInvoiceCreate(
            client_id=client_party.id,
            invoice_date=date(2026, 6, 1),
            items=[SalesLineCreate(product_id=product.id, quantity=1, unit_price=Decimal("0"))],
        ))

        assert invoice.invoice_number == "INV-000001"
        assert invoice.total_amount == Decimal("0.00")
        assert invoice.journal_entry_id is None
        assert await count_rows(db_session, JournalEntry) == 0
        assert await count_rows(db_session, ClientLedgerRow) == 0


class TestCreditNotes:
    """Tax is extracted from gross credit note lines."""

    @pytest.mark.asyncio
    async def test_return_reverses_revenue(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        client_party: Client, product: Product,
    ):
        service = SalesService(db_session, registry)
        await issue_invoice(service, client_party, product)

        note = await service.issue_credit_note(credit_note(client_party, product, CreditNoteScenario.RETURN))

        assert note.credit_note_number == "CN-000001"
        assert note.subtotal == Decimal("100.00")
        assert note.tax_amount == Decimal("16.00")
        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["400001"].id) == Decimal("-100.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["210006"].id) == Decimal("-16.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1100"].id) == Decimal("116.00")
        assert await ledger.current_balance(CLIENT_LEDGER, client_party.id) == Decimal("116.00")

    @pytest.mark.asyncio
    async def test_faulty_goods_without_stock(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        client_party: Client, product: Product,
    ):
        """The net amount goes to the damages expense account."""
        service = SalesService(db_session, registry)
        await issue_invoice(service, client_party, product)

        await service.issue_credit_note(credit_note(client_party, product, CreditNoteScenario.FAULTY_NO_STOCK))

        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["510010"].id) == Decimal("100.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["400001"].id) == Decimal("-200.00")
        assert await ledger.current_balance(CLIENT_LEDGER, client_party.id) == Decimal("116.00")
        assert await count_rows(db_session, StoreInventory) == 0

    @pytest.mark.asyncio
    async def test_faulty_goods_taken_into_damage_store(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        client_party: Client, product: Product, damage_store: Store,
    ):
        """Stock returns to the damages store at cost and the entry stays balanced."""
        service = SalesService(db_session, registry)
        await issue_invoice(service, client_party, product)

        note = await service.issue_credit_note(credit_note(
            client_party, product, CreditNoteScenario.FAULTY_WITH_STOCK, damage_store_id=damage_store.id,
        ))

        entry = await db_session.get(JournalEntry, note.journal_entry_id)
        assert entry.total_debit == entry.total_credit == Decimal("176.00")

        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["100001"].id) == Decimal("60.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["500000"].id) == Decimal("-60.00")
        stock = await db_session.scalar(
            select(StoreInventory).where(StoreInventory.store_id == damage_store.id)
        )
        assert stock.quantity == 1

    @pytest.mark.asyncio
    async def test_free_replacement_only_moves_stock_at_cost(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        client_party: Client, product: Product, damage_store: Store,
    ):
        """A zero-value note still books the returned goods; the client is untouched."""
        service = SalesService(db_session, registry)
        note = await service.issue_credit_note(CreditNoteCreate(
            client_id=client_party.id,
            credit_note_date=date(2026, 6, 10),
            scenario=CreditNoteScenario.FAULTY_WITH_STOCK,
            damage_store_id=damage_store.id,
            items=[SalesLineCreate(product_id=product.id, quantity=1, unit_price=Decimal("0"))],
        ))

        entry = await db_session.get(JournalEntry, note.journal_entry_id)
        assert len(entry.lines) == 2
        assert entry.total_debit == Decimal("60.00")
        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["100001"].id) == Decimal("60.00")
        assert await count_rows(db_session, ClientLedgerRow) == 0

    @pytest.mark.asyncio
    async def test_zero_value_return_posts_nothing(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client, product: Product,
    ):
        service = SalesService(db_session, registry)
        note = await service.issue_credit_note(CreditNoteCreate(
            client_id=client_party.id,
            items=[SalesLineCreate(product_id=product.id, quantity=1, unit_price=Decimal("0"))],
        ))

        assert note.journal_entry_id is None
        assert await count_rows(db_session, JournalEntry) == 0

    def test_faulty_with_stock_needs_damage_store(self):
        """Taking faulty goods back into stock names the damages store."""
        with pytest.raises(PydanticValidationError):
            CreditNoteCreate(
                client_id=1,
                scenario=CreditNoteScenario.FAULTY_WITH_STOCK,
                items=[SalesLineCreate(product_id=1, quantity=1, unit_price=Decimal("1"))],
            )


class TestReceipts:
    """Receipts are recorded, then confirmed exactly once."""

    @pytest.mark.asyncio
    async def test_recorded_receipt_posts_nothing(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client,
    ):
        service = SalesService(db_session, registry)
        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id, amount=Decimal("50"), receipt_date=date(2026, 6, 15),
        ))
        assert receipt.status == ReceiptStatus.IN_PAY
        assert receipt.receipt_number == "RCP-000001"
        assert await count_rows(db_session, JournalEntry) == 0

    @pytest.mark.asyncio
    async def test_confirmation_moves_balance_to_cash(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        client_party: Client, product: Product,
    ):
        """The client balance drops by A and the cash account rises by A, in one entry."""
        service = SalesService(db_session, registry)
        await issue_invoice(service, client_party, product)
        ledger = service.ledger
        client_before = await ledger.current_balance(CLIENT_LEDGER, client_party.id)
        cash_before = await ledger.current_balance(ACCOUNT_LEDGER, chart["1010"].id)
        entries_before = await count_rows(db_session, JournalEntry)

        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id,
            amount=Decimal("150.00"),
            receipt_date=date(2026, 6, 15),
            account_id=chart["1010"].id,
        ))
        await service.confirm_receipt(receipt.id)

        assert receipt.status == ReceiptStatus.CONFIRMED
        assert await ledger.current_balance(CLIENT_LEDGER, client_party.id) == client_before - Decimal("150.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1010"].id) == cash_before + Decimal("150.00")
        assert await count_rows(db_session, JournalEntry) == entries_before + 1

        entry = await db_session.get(JournalEntry, receipt.journal_entry_id)
        assert entry.total_debit == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_receipt_confirms_only_once(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client,
    ):
        service = SalesService(db_session, registry)
        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id, amount=Decimal("20"), receipt_date=date(2026, 6, 15),
        ))
        await service.confirm_receipt(receipt.id)

        with pytest.raises(AlreadyProcessedError):
            await service.confirm_receipt(receipt.id)
        assert await count_rows(db_session, ClientLedgerRow) == 1

    @pytest.mark.asyncio
    async def test_confirm_into_non_cash_account_rejected(
        self, db_session: AsyncSession, registry: AccountRegistry, chart, client_party: Client,
    ):
        service = SalesService(db_session, registry)
        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id, amount=Decimal("20"), receipt_date=date(2026, 6, 15),
        ))
        with pytest.raises(ValidationError):
            await service.confirm_receipt(receipt.id, account_id=chart["400001"].id)

    @pytest.mark.asyncio
    async def test_declined_receipt_posts_nothing(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client,
    ):
        service = SalesService(db_session, registry)
        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id, amount=Decimal("75"), receipt_date=date(2026, 6, 15),
        ))

        await service.decline_receipt(receipt.id, reason="Cheque bounced")

        assert receipt.status == ReceiptStatus.DECLINED
        assert receipt.decline_reason == "Cheque bounced"
        assert await count_rows(db_session, JournalEntry) == 0
        assert await count_rows(db_session, ClientLedgerRow) == 0

    @pytest.mark.asyncio
    async def test_declined_receipt_cannot_be_confirmed_or_declined_again(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client,
    ):
        service = SalesService(db_session, registry)
        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id, amount=Decimal("75"), receipt_date=date(2026, 6, 15),
        ))
        await service.decline_receipt(receipt.id)

        with pytest.raises(ValidationError) as exc_info:
            await service.confirm_receipt(receipt.id)
        assert exc_info.value.field == "status"
        with pytest.raises(AlreadyProcessedError):
            await service.decline_receipt(receipt.id)
        assert await count_rows(db_session, JournalEntry) == 0

    @pytest.mark.asyncio
    async def test_confirmed_receipt_cannot_be_declined(
        self, db_session: AsyncSession, registry: AccountRegistry, client_party: Client,
    ):
        service = SalesService(db_session, registry)
        receipt = await service.record_receipt(ReceiptCreate(
            client_id=client_party.id, amount=Decimal("20"), receipt_date=date(2026, 6, 15),
        ))
        await service.confirm_receipt(receipt.id)

        with pytest.raises(ValidationError) as exc_info:
            await service.decline_receipt(receipt.id)
        assert exc_info.value.field == "status"
        assert exc_info.value.details["journal_entry_id"] == receipt.journal_entry_id
        assert receipt.status == ReceiptStatus.CONFIRMED
