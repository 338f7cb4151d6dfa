"""
RetailOps Ledger - Sales Service

Transaction adapters for the selling side:
- Sales invoices (tax added to net line prices)
- Credit notes (tax extracted from gross line prices)
- Customer receipts (recorded, then confirmed exactly once or declined)
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.accounting import JournalEntryType
from app.models.sales import (
    CreditNote,
    CreditNoteItem,
    CreditNoteScenario,
    Receipt,
    ReceiptStatus,
    SalesInvoice,
    SalesInvoiceItem,
)
from app.schemas.sales import CreditNoteCreate, ReceiptCreate, SalesInvoiceCreate
from app.services.account_registry import AccountRegistry, AccountRole
from app.services.counterparty_service import CounterpartyService
from app.services.inventory_service import InventoryService
from app.services.journal_service import JournalService, PostingLine
from app.services.sequence_service import SequenceService
from app.services.tax_calculators import SalesTaxCalculator, to_money
from app.utils.error_handling import (
    AlreadyProcessedError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class SalesService:
    """Service for invoices, credit notes and receipts."""

    def __init__(self, db: AsyncSession, registry: AccountRegistry):
        self.db = db
        self.registry = registry
        self.journal = JournalService(db, registry)
        self.ledger = self.journal.ledger
        self.sequences = SequenceService(db)
        self.clients = CounterpartyService.clients(db)
        self.inventory = InventoryService(db)
        self.tax = SalesTaxCalculator()

    # =========================================================================
    # INVOICES
    # =========================================================================

    async def issue_invoice(
        self,
        data: SalesInvoiceCreate,
        created_by: Optional[str] = None,
    ) -> SalesInvoice:
        """
        Dr Accounts Receivable (gross), Cr Sales Revenue (net),
        Cr Sales Tax Payable (tax); the client ledger is debited.
        """
        receivables = self.registry.require(AccountRole.ACCOUNTS_RECEIVABLE)
        revenue = self.registry.require(AccountRole.SALES_REVENUE)
        client = await self.clients.get_active(data.client_id)
        invoice_date = data.invoice_date or date.today()

        items = []
        for item in data.items:
            await self.inventory.get_product(item.product_id)
            split = self.tax.split_exclusive(item.unit_price * item.quantity, item.tax_type)
            items.append(SalesInvoiceItem(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_type=item.tax_type,
                net_amount=split.net,
                tax_amount=split.tax,
                total_amount=split.gross,
            ))
        net = sum((i.net_amount for i in items), Decimal("0.00"))
        tax = sum((i.tax_amount for i in items), Decimal("0.00"))
        gross = net + tax

        invoice = SalesInvoice(
            invoice_number=await self.sequences.next_document_number(settings.invoice_prefix),
            client_id=client.id,
            invoice_date=invoice_date,
            due_date=data.due_date,
            notes=data.notes,
            subtotal=net,
            tax_amount=tax,
            total_amount=gross,
            created_by=created_by,
            items=items,
        )
        self.db.add(invoice)
        await self.db.flush()

        if gross == 0:
            logger.info(f"Issued zero-value invoice {invoice.invoice_number} to client {client.id}; nothing posted")
            return invoice

        description = f"Invoice {invoice.invoice_number} to {client.name}"
        lines = [
            PostingLine(receivables.id, debit=gross, description=description),
            PostingLine(revenue.id, credit=net, description=description),
        ]
        if tax > 0:
            tax_payable = self.registry.require(AccountRole.SALES_TAX_PAYABLE)
            lines.append(PostingLine(tax_payable.id, credit=tax, description=f"Sales tax: {description}"))

        entry = await self.journal.post_to_ledger(
            lines,
            invoice_date,
            description,
            JournalEntryType.SALES,
            reference=invoice.invoice_number,
            source_type="sales_invoice",
            source_id=invoice.id,
            created_by=created_by,
        )
        await self.ledger.post_client_row(
            client.id,
            invoice_date,
            debit=gross,
            description=description,
            reference_type="sales_invoice",
            reference_id=invoice.id,
            journal_entry_id=entry.id,
        )
        invoice.journal_entry_id = entry.id
        await self.db.flush()

        logger.info(f"Issued invoice {invoice.invoice_number} to client {client.id}: gross {gross}")
        return invoice

    async def get_invoice(self, invoice_id: int) -> SalesInvoice:
        invoice = await self.db.scalar(select(SalesInvoice).where(SalesInvoice.id == invoice_id))
        if invoice is None:
            raise NotFoundError("SalesInvoice", invoice_id)
        return invoice

    async def list_invoices(self, client_id: Optional[int] = None) -> List[SalesInvoice]:
        query = select(SalesInvoice)
        if client_id is not None:
            query = query.where(SalesInvoice.client_id == client_id)
        result = await self.db.execute(query.order_by(SalesInvoice.invoice_date.desc(), SalesInvoice.id.desc()))
        return list(result.scalars().all())

    # =========================================================================
    # CREDIT NOTES
    # =========================================================================

    async def issue_credit_note(
        self,
        data: CreditNoteCreate,
        created_by: Optional[str] = None,
    ) -> CreditNote:
        """
        Credit a client for returned or faulty goods.

        Item prices include tax. Every scenario credits Accounts Receivable
        (gross) and debits Sales Tax Payable (tax); the net amount is
        debited to Sales Revenue for a return and to the damages expense
        account for faulty goods. When faulty goods are taken back into a
        damages store the entry also carries Dr Inventory / Cr Cost of
        Goods Sold at product cost.
        """
        receivables = self.registry.require(AccountRole.ACCOUNTS_RECEIVABLE)
        if data.scenario == CreditNoteScenario.RETURN:
            net_account = self.registry.require(AccountRole.SALES_REVENUE)
        else:
            net_account = self.registry.require(AccountRole.DAMAGES_EXPENSE)

        client = await self.clients.get_active(data.client_id)
        if data.invoice_id is not None:
            invoice = await self.get_invoice(data.invoice_id)
            if invoice.client_id != client.id:
                raise ValidationError(
                    f"Invoice {invoice.invoice_number} does not belong to client {client.id}",
                    field="invoice_id",
                )

        damage_store = None
        if data.scenario == CreditNoteScenario.FAULTY_WITH_STOCK:
            damage_store = await self.inventory.get_active_store(data.damage_store_id, field="damage_store_id")

        credit_note_date = data.credit_note_date or date.today()

        items = []
        cost = Decimal("0.00")
        for item in data.items:
            product = await self.inventory.get_product(item.product_id)
            split = self.tax.split_inclusive(item.unit_price * item.quantity, item.tax_type)
            items.append(CreditNoteItem(
                product_id=product.id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_type=item.tax_type,
                net_amount=split.net,
                tax_amount=split.tax,
                total_amount=split.gross,
            ))
            cost += to_money(product.cost_price * item.quantity)
        net = sum((i.net_amount for i in items), Decimal("0.00"))
        tax = sum((i.tax_amount for i in items), Decimal("0.00"))
        gross = net + tax

        credit_note = CreditNote(
            credit_note_number=await self.sequences.next_document_number(settings.credit_note_prefix),
            client_id=client.id,
            invoice_id=data.invoice_id,
            credit_note_date=credit_note_date,
            scenario=data.scenario,
            damage_store_id=damage_store.id if damage_store else None,
            reason=data.reason,
            subtotal=net,
            tax_amount=tax,
            total_amount=gross,
            created_by=created_by,
            items=items,
        )
        self.db.add(credit_note)
        await self.db.flush()

        description = f"Credit note {credit_note.credit_note_number} to {client.name}"
        lines = []
        if net > 0:
            lines.append(PostingLine(net_account.id, debit=net, description=description))
        if tax > 0:
            tax_payable = self.registry.require(AccountRole.SALES_TAX_PAYABLE)
            lines.append(PostingLine(tax_payable.id, debit=tax, description=f"Sales tax return: {description}"))
        if gross > 0:
            lines.append(PostingLine(receivables.id, credit=gross, description=description))

        if damage_store is not None:
            for item in credit_note.items:
                await self.inventory.adjust_stock(damage_store.id, item.product_id, item.quantity)
            if cost > 0:
                inventory_account = self.registry.require(AccountRole.INVENTORY)
                cogs = self.registry.require(AccountRole.COST_OF_GOODS_SOLD)
                lines.append(PostingLine(
                    inventory_account.id, debit=cost,
                    description=f"Returned to {damage_store.name}: {credit_note.credit_note_number}",
                ))
                lines.append(PostingLine(
                    cogs.id, credit=cost,
                    description=f"Cost of goods reversal: {credit_note.credit_note_number}",
                ))

        if lines:
            entry = await self.journal.post_to_ledger(
                lines,
                credit_note_date,
                description,
                JournalEntryType.CREDIT_NOTE,
                reference=credit_note.credit_note_number,
                source_type="credit_note",
                source_id=credit_note.id,
                created_by=created_by,
            )
            credit_note.journal_entry_id = entry.id
            if gross > 0:
                await self.ledger.post_client_row(
                    client.id,
                    credit_note_date,
                    credit=gross,
                    description=description,
                    reference_type="credit_note",
                    reference_id=credit_note.id,
                    journal_entry_id=entry.id,
                )
            await self.db.flush()

        logger.info(
            f"Issued credit note {credit_note.credit_note_number} ({data.scenario.value}) "
            f"to client {client.id}: gross {gross}"
        )
        return credit_note

    async def list_credit_notes(self, client_id: Optional[int] = None) -> List[CreditNote]:
        query = select(CreditNote)
        if client_id is not None:
            query = query.where(CreditNote.client_id == client_id)
        result = await self.db.execute(query.order_by(CreditNote.credit_note_date.desc(), CreditNote.id.desc()))
        return list(result.scalars().all())

    # =========================================================================
    # RECEIPTS
    # =========================================================================

    async def record_receipt(
        self,
        data: ReceiptCreate,
        created_by: Optional[str] = None,
    ) -> Receipt:
        """Record a customer payment as ``in_pay``. Nothing is posted until confirmation."""
        cash_account = self.registry.get_cash_account(data.account_id)
        client = await self.clients.get_active(data.client_id)

        receipt = Receipt(
            receipt_number=await self.sequences.next_document_number(settings.receipt_prefix),
            client_id=client.id,
            receipt_date=data.receipt_date or date.today(),
            amount=to_money(data.amount),
            account_id=cash_account.id,
            payment_method=data.payment_method,
            reference=data.reference,
            notes=data.notes,
            status=ReceiptStatus.IN_PAY,
            created_by=created_by,
        )
        self.db.add(receipt)
        await self.db.flush()

        logger.info(f"Recorded receipt {receipt.receipt_number} from client {client.id}: {receipt.amount}")
        return receipt

    async def confirm_receipt(
        self,
        receipt_id: int,
        account_id: Optional[int] = None,
        created_by: Optional[str] = None,
    ) -> Receipt:
        """
        Confirm a recorded receipt.

        Posts Dr the chosen cash/bank account and Cr Accounts Receivable,
        and credits the client ledger. A receipt confirms exactly once.
        """
        receivables = self.registry.require(AccountRole.ACCOUNTS_RECEIVABLE)
        receipt = await self._get_receipt_for_update(receipt_id)
        if receipt.status == ReceiptStatus.CONFIRMED:
            raise AlreadyProcessedError("Receipt", receipt.receipt_number)
        if receipt.status == ReceiptStatus.DECLINED:
            raise ValidationError(
                f"Receipt {receipt.receipt_number} was declined and cannot be confirmed",
                field="status",
            )

        cash_account = self.registry.get_cash_account(account_id or receipt.account_id)
        client = await self.clients.get(receipt.client_id)

        description = f"Receipt {receipt.receipt_number} from {client.name}"
        entry = await self.journal.post_to_ledger(
            [
                PostingLine(cash_account.id, debit=receipt.amount, description=description),
                PostingLine(receivables.id, credit=receipt.amount, description=description),
            ],
            receipt.receipt_date,
            description,
            JournalEntryType.RECEIPT,
            reference=receipt.reference or receipt.receipt_number,
            source_type="receipt",
            source_id=receipt.id,
            created_by=created_by,
        )
        await self.ledger.post_client_row(
            client.id,
            receipt.receipt_date,
            credit=receipt.amount,
            description=description,
            reference_type="receipt",
            reference_id=receipt.id,
            journal_entry_id=entry.id,
        )

        receipt.account_id = cash_account.id
        receipt.status = ReceiptStatus.CONFIRMED
        receipt.journal_entry_id = entry.id
        await self.db.flush()

        logger.info(f"Confirmed receipt {receipt.receipt_number} into account {cash_account.account_code}")
        return receipt

    async def decline_receipt(self, receipt_id: int, reason: Optional[str] = None) -> Receipt:
        """Decline a pending receipt, for example a bounced cheque. Nothing is posted."""
        receipt = await self._get_receipt_for_update(receipt_id)
        if receipt.status == ReceiptStatus.DECLINED:
            raise AlreadyProcessedError("Receipt", receipt.receipt_number)
        if receipt.status == ReceiptStatus.CONFIRMED:
            raise ValidationError(
                f"Receipt {receipt.receipt_number} is already confirmed; reverse its journal entry instead",
                field="status",
                details={"journal_entry_id": receipt.journal_entry_id},
            )

        receipt.status = ReceiptStatus.DECLINED
        receipt.decline_reason = reason
        await self.db.flush()

        logger.info(f"Declined receipt {receipt.receipt_number} from client {receipt.client_id}")
        return receipt

    async def _get_receipt_for_update(self, receipt_id: int) -> Receipt:
        receipt = await self.db.scalar(
            select(Receipt).where(Receipt.id == receipt_id).with_for_update()
        )
        if receipt is None:
            raise NotFoundError("Receipt", receipt_id)
        return receipt

    async def list_receipts(
        self,
        client_id: Optional[int] = None,
        status: Optional[ReceiptStatus] = None,
    ) -> List[Receipt]:
        query = select(Receipt)
        if client_id is not None:
            query = query.where(Receipt.client_id == client_id)
        if status:
            query = query.where(Receipt.status == status)
        result = await self.db.execute(query.order_by(Receipt.receipt_date.desc(), Receipt.id.desc()))
        return list(result.scalars().all())
