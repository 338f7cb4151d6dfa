"""
RetailOps Ledger - Purchasing Service

Transaction adapters for the buying side:
- Stock purchase orders and goods receipts
- Asset purchase orders
- Supplier payments

Creating an order posts nothing. Receiving goods, receiving assets and
paying a supplier each post one balanced journal entry, its account-ledger
rows and one supplier-ledger row, inside the caller's transaction.
Free-of-charge receipts still move stock and order status but post no
entry.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.accounting import JournalEntry, JournalEntryType
from app.models.purchasing import (
    AssetPurchaseOrder,
    AssetPurchaseOrderItem,
    InventoryReceipt,
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
    SupplierPayment,
)
from app.schemas.purchasing import (
    AssetPurchaseOrderCreate,
    PurchaseOrderCreate,
    PurchaseOrderReceive,
    SupplierPaymentCreate,
)
from app.services.account_registry import AccountRegistry, AccountRole
from app.services.counterparty_service import CounterpartyService
from app.services.inventory_service import InventoryService
from app.services.journal_service import JournalService, PostingLine
from app.services.sequence_service import SequenceService
from app.services.tax_calculators import SalesTaxCalculator, TaxSplit, to_money
from app.utils.error_handling import (
    AlreadyProcessedError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class PurchasingService:
    """Service for purchase orders, receipts and supplier payments."""

    def __init__(self, db: AsyncSession, registry: AccountRegistry):
        self.db = db
        self.registry = registry
        self.journal = JournalService(db, registry)
        self.ledger = self.journal.ledger
        self.sequences = SequenceService(db)
        self.suppliers = CounterpartyService.suppliers(db)
        self.inventory = InventoryService(db)
        self.tax = SalesTaxCalculator()

    def _purchase_lines(self, debit_account_id: int, total: TaxSplit, description: str) -> List[PostingLine]:
        """Dr asset (net), Dr purchase tax control (tax), Cr accounts payable (gross)."""
        payables = self.registry.require(AccountRole.ACCOUNTS_PAYABLE)
        lines = [PostingLine(debit_account_id, debit=total.net, description=description)]
        if total.tax > 0:
            tax_control = self.registry.require(AccountRole.PURCHASE_TAX_CONTROL)
            lines.append(PostingLine(tax_control.id, debit=total.tax, description=f"Purchase tax: {description}"))
        lines.append(PostingLine(payables.id, credit=total.gross, description=description))
        return lines

    async def _post_purchase(
        self,
        debit_account_id: int,
        supplier_id: int,
        total: TaxSplit,
        posted_date: date,
        description: str,
        entry_type: JournalEntryType,
        reference: str,
        source_type: str,
        source_id: int,
        created_by: Optional[str],
    ) -> Optional[JournalEntry]:
        """
        Post a receipt against a supplier: the journal entry, its ledger rows
        and the supplier-ledger credit. Free-of-charge goods post nothing.
        """
        if total.gross == 0:
            logger.info(f"{description}: nothing to post for a zero-value receipt")
            return None

        entry = await self.journal.post_to_ledger(
            self._purchase_lines(debit_account_id, total, description),
            posted_date,
            description,
            entry_type,
            reference=reference,
            source_type=source_type,
            source_id=source_id,
            created_by=created_by,
        )
        await self.ledger.post_supplier_row(
            supplier_id,
            posted_date,
            credit=total.gross,
            description=description,
            reference_type=source_type,
            reference_id=source_id,
            journal_entry_id=entry.id,
        )
        return entry

    # =========================================================================
    # PURCHASE ORDERS
    # =========================================================================

    async def create_purchase_order(
        self,
        data: PurchaseOrderCreate,
        created_by: Optional[str] = None,
    ) -> PurchaseOrder:
        """Create a stock purchase order. Nothing is posted."""
        await self.suppliers.get_active(data.supplier_id)

        items = []
        splits = []
        for item in data.items:
            await self.inventory.get_product(item.product_id)
            splits.append(self.tax.split_exclusive(item.unit_cost * item.quantity, item.tax_type))
            items.append(PurchaseOrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                received_quantity=0,
                unit_cost=item.unit_cost,
                tax_type=item.tax_type,
            ))
        total = self.tax.total(splits)

        order = PurchaseOrder(
            po_number=await self.sequences.next_document_number(settings.purchase_order_prefix),
            supplier_id=data.supplier_id,
            order_date=data.order_date or date.today(),
            expected_delivery_date=data.expected_delivery_date,
            status=PurchaseOrderStatus.DRAFT,
            notes=data.notes,
            subtotal=total.net,
            tax_amount=total.tax,
            total_amount=total.gross,
            created_by=created_by,
            items=items,
        )
        self.db.add(order)
        await self.db.flush()

        logger.info(f"Created purchase order {order.po_number} for {order.total_amount}")
        return order

    async def get_purchase_order(self, order_id: int, for_update: bool = False) -> PurchaseOrder:
        query = select(PurchaseOrder).where(PurchaseOrder.id == order_id)
        if for_update:
            query = query.with_for_update()
        order = await self.db.scalar(query)
        if order is None:
            raise NotFoundError("PurchaseOrder", order_id)
        return order

    async def list_purchase_orders(
        self,
        supplier_id: Optional[int] = None,
        status: Optional[PurchaseOrderStatus] = None,
    ) -> List[PurchaseOrder]:
        query = select(PurchaseOrder)
        if supplier_id is not None:
            query = query.where(PurchaseOrder.supplier_id == supplier_id)
        if status:
            query = query.where(PurchaseOrder.status == status)
        result = await self.db.execute(query.order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc()))
        return list(result.scalars().all())

    async def receive_purchase_order(
        self,
        order_id: int,
        data: PurchaseOrderReceive,
        created_by: Optional[str] = None,
    ) -> List[InventoryReceipt]:
        """
        Receive goods against a purchase order into a store.

        Posts Dr Inventory (net), Dr Purchase Tax Control (tax) and
        Cr Accounts Payable (gross), and credits the supplier ledger with
        the gross amount.
        """
        inventory_account = self.registry.require(AccountRole.INVENTORY)
        order = await self.get_purchase_order(order_id, for_update=True)
        if order.status == PurchaseOrderStatus.RECEIVED:
            raise AlreadyProcessedError("PurchaseOrder", order.po_number)
        await self.suppliers.get_active(order.supplier_id)
        store = await self.inventory.get_active_store(data.store_id)
        received_date = data.received_date or date.today()

        quantities = self._quantities_to_receive(order, data)

        receipts = []
        splits = []
        for item in order.items:
            quantity = quantities.get(item.id)
            if not quantity:
                continue
            split = self.tax.split_exclusive(item.unit_cost * quantity, item.tax_type)
            splits.append(split)
            receipts.append(InventoryReceipt(
                purchase_order_id=order.id,
                product_id=item.product_id,
                store_id=store.id,
                received_date=received_date,
                received_quantity=quantity,
                unit_cost=item.unit_cost,
                net_amount=split.net,
                tax_amount=split.tax,
                total_amount=split.gross,
                notes=data.notes,
                created_by=created_by,
            ))
            item.received_quantity += quantity
            await self.inventory.adjust_stock(store.id, item.product_id, quantity)

        total = self.tax.total(splits)
        description = f"Goods received on {order.po_number}"
        entry = await self._post_purchase(
            inventory_account.id,
            order.supplier_id,
            total,
            received_date,
            description,
            JournalEntryType.PURCHASE,
            reference=order.po_number,
            source_type="purchase_order",
            source_id=order.id,
            created_by=created_by,
        )
        for receipt in receipts:
            receipt.journal_entry_id = entry.id if entry else None
        self.db.add_all(receipts)

        fully_received = all(item.received_quantity >= item.quantity for item in order.items)
        order.status = PurchaseOrderStatus.RECEIVED if fully_received else PurchaseOrderStatus.PARTIALLY_RECEIVED
        await self.db.flush()

        logger.info(
            f"Received {sum(r.received_quantity for r in receipts)} units on {order.po_number} "
            f"into store {store.id}: gross {total.gross}"
        )
        return receipts

    @staticmethod
    def _quantities_to_receive(order: PurchaseOrder, data: PurchaseOrderReceive) -> Dict[int, int]:
        items_by_id = {item.id: item for item in order.items}

        if data.items is None:
            quantities = {
                item.id: item.quantity - item.received_quantity
                for item in order.items
                if item.quantity > item.received_quantity
            }
        else:
            quantities = {}
            for requested in data.items:
                item = items_by_id.get(requested.item_id)
                if item is None:
                    raise ValidationError(
                        f"Item {requested.item_id} is not on purchase order {order.po_number}",
                        field="items",
                    )
                quantities[item.id] = quantities.get(item.id, 0) + requested.quantity

        for item_id, quantity in quantities.items():
            item = items_by_id[item_id]
            outstanding = item.quantity - item.received_quantity
            if quantity > outstanding:
                raise ValidationError(
                    f"Cannot receive {quantity} of item {item_id}: only {outstanding} outstanding",
                    field="items",
                    details={"item_id": item_id, "outstanding": outstanding, "requested": quantity},
                )

        if not quantities:
            raise ValidationError(f"Nothing left to receive on {order.po_number}", field="items")
        return quantities

    async def list_receipts(self, order_id: int) -> List[InventoryReceipt]:
        result = await self.db.execute(
            select(InventoryReceipt)
            .where(InventoryReceipt.purchase_order_id == order_id)
            .order_by(InventoryReceipt.id)
        )
        return list(result.scalars().all())

    # =========================================================================
    # ASSET PURCHASE ORDERS
    # =========================================================================

    async def create_asset_purchase_order(
        self,
        data: AssetPurchaseOrderCreate,
        created_by: Optional[str] = None,
    ) -> AssetPurchaseOrder:
        await self.suppliers.get_active(data.supplier_id)

        items = []
        for item in data.items:
            split = self.tax.split_exclusive(item.unit_price * item.quantity, item.tax_type)
            items.append(AssetPurchaseOrderItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_type=item.tax_type,
                net_amount=split.net,
                tax_amount=split.tax,
                total_amount=split.gross,
            ))

        order = AssetPurchaseOrder(
            apo_number=await self.sequences.next_document_number(settings.asset_purchase_order_prefix),
            supplier_id=data.supplier_id,
            order_date=data.order_date or date.today(),
            status=PurchaseOrderStatus.DRAFT,
            notes=data.notes,
            subtotal=sum((i.net_amount for i in items), Decimal("0.00")),
            tax_amount=sum((i.tax_amount for i in items), Decimal("0.00")),
            total_amount=sum((i.total_amount for i in items), Decimal("0.00")),
            created_by=created_by,
            items=items,
        )
        self.db.add(order)
        await self.db.flush()

        logger.info(f"Created asset purchase order {order.apo_number} for {order.total_amount}")
        return order

    async def get_asset_purchase_order(self, order_id: int, for_update: bool = False) -> AssetPurchaseOrder:
        query = select(AssetPurchaseOrder).where(AssetPurchaseOrder.id == order_id)
        if for_update:
            query = query.with_for_update()
        order = await self.db.scalar(query)
        if order is None:
            raise NotFoundError("AssetPurchaseOrder", order_id)
        return order

    async def list_asset_purchase_orders(self, supplier_id: Optional[int] = None) -> List[AssetPurchaseOrder]:
        query = select(AssetPurchaseOrder)
        if supplier_id is not None:
            query = query.where(AssetPurchaseOrder.supplier_id == supplier_id)
        result = await self.db.execute(query.order_by(AssetPurchaseOrder.id.desc()))
        return list(result.scalars().all())

    async def receive_asset_purchase_order(
        self,
        order_id: int,
        received_date: Optional[date] = None,
        created_by: Optional[str] = None,
    ) -> AssetPurchaseOrder:
        """
        Receive an asset purchase order in full.

        Posts Dr Fixed Assets (net), Dr Purchase Tax Control (tax) and
        Cr Accounts Payable (gross); the supplier ledger is credited.
        """
        fixed_assets = self.registry.require(AccountRole.FIXED_ASSETS)
        order = await self.get_asset_purchase_order(order_id, for_update=True)
        if order.status == PurchaseOrderStatus.RECEIVED:
            raise AlreadyProcessedError("AssetPurchaseOrder", order.apo_number)
        await self.suppliers.get_active(order.supplier_id)
        received_date = received_date or date.today()

        total = TaxSplit(order.subtotal, order.tax_amount, order.total_amount)
        description = f"Assets received on {order.apo_number}"
        entry = await self._post_purchase(
            fixed_assets.id,
            order.supplier_id,
            total,
            received_date,
            description,
            JournalEntryType.ASSET_PURCHASE,
            reference=order.apo_number,
            source_type="asset_purchase_order",
            source_id=order.id,
            created_by=created_by,
        )

        order.status = PurchaseOrderStatus.RECEIVED
        order.received_date = received_date
        order.journal_entry_id = entry.id if entry else None
        await self.db.flush()

        logger.info(f"Received asset purchase order {order.apo_number}: gross {total.gross}")
        return order

    # =========================================================================
    # SUPPLIER PAYMENTS
    # =========================================================================

    async def pay_supplier(
        self,
        data: SupplierPaymentCreate,
        created_by: Optional[str] = None,
    ) -> SupplierPayment:
        """Dr Accounts Payable, Cr the chosen cash/bank account; supplier ledger debit."""
        payables = self.registry.require(AccountRole.ACCOUNTS_PAYABLE)
        cash_account = self.registry.get_cash_account(data.account_id)
        supplier = await self.suppliers.get_active(data.supplier_id)
        payment_date = data.payment_date or date.today()
        amount = to_money(data.amount)

        payment = SupplierPayment(
            payment_number=await self.sequences.next_document_number(settings.supplier_payment_prefix),
            supplier_id=supplier.id,
            payment_date=payment_date,
            amount=amount,
            account_id=cash_account.id,
            payment_method=data.payment_method,
            reference=data.reference,
            notes=data.notes,
            created_by=created_by,
        )
        self.db.add(payment)
        await self.db.flush()

        description = f"Payment {payment.payment_number} to {supplier.name}"
        entry = await self.journal.post_to_ledger(
            [
                PostingLine(payables.id, debit=amount, description=description),
                PostingLine(cash_account.id, credit=amount, description=description),
            ],
            payment_date,
            description,
            JournalEntryType.PAYMENT,
            reference=data.reference or payment.payment_number,
            source_type="supplier_payment",
            source_id=payment.id,
            created_by=created_by,
        )
        await self.ledger.post_supplier_row(
            supplier.id,
            payment_date,
            debit=amount,
            description=description,
            reference_type="supplier_payment",
            reference_id=payment.id,
            journal_entry_id=entry.id,
        )
        payment.journal_entry_id = entry.id
        await self.db.flush()

        logger.info(f"Paid supplier {supplier.id} {amount} from account {cash_account.account_code}")
        return payment

    async def list_supplier_payments(self, supplier_id: Optional[int] = None) -> List[SupplierPayment]:
        query = select(SupplierPayment)
        if supplier_id is not None:
            query = query.where(SupplierPayment.supplier_id == supplier_id)
        result = await self.db.execute(query.order_by(SupplierPayment.payment_date.desc(), SupplierPayment.id.desc()))
        return list(result.scalars().all())
