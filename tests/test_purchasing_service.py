"""
RetailOps Ledger - Purchasing Tests

Unit tests for purchase orders, goods receipts, asset orders and
supplier payments.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.accounting import JournalEntry
from app.models.inventory import Product, Store, StoreInventory
from app.models.counterparty import Supplier
from app.models.ledger import SupplierLedgerRow
from app.models.purchasing import PurchaseOrderStatus
from app.schemas.purchasing import (
    AssetPurchaseOrderCreate,
    AssetPurchaseOrderItemCreate,
    PurchaseOrderCreate,
    PurchaseOrderItemCreate,
    PurchaseOrderReceive,
    ReceiveItem,
    SupplierPaymentCreate,
)
from app.services.account_registry import AccountRegistry
from app.services.ledger_service import ACCOUNT_LEDGER, SUPPLIER_LEDGER
from app.services.purchasing_service import PurchasingService
from app.utils.error_handling import AlreadyProcessedError, ValidationError
from conftest import count_rows


async def create_order(service: PurchasingService, supplier: Supplier, product: Product, quantity: int = 10):
    return await service.create_purchase_order(PurchaseOrderCreate(
        supplier_id=supplier.id,
        order_date=date(2026, 6, 1),
        items=[PurchaseOrderItemCreate(
            product_id=product.id,
            quantity=quantity,
            unit_cost=Decimal("50.00"),
            tax_type="16%",
        )],
    ))


class TestPurchaseOrders:
    """Creating an order posts nothing."""

    @pytest.mark.asyncio
    async def test_create_order_totals(
        self, db_session: AsyncSession, registry: AccountRegistry, supplier: Supplier, product: Product,
    ):
        service = PurchasingService(db_session, registry)
        order = await create_order(service, supplier, product)

        assert order.po_number == "PO-000001"
        assert order.status == PurchaseOrderStatus.DRAFT
        assert order.subtotal == Decimal("500.00")
        assert order.tax_amount == Decimal("80.00")
        assert order.total_amount == Decimal("580.00")
        assert await count_rows(db_session, SupplierLedgerRow) == 0

    @pytest.mark.asyncio
    async def test_unknown_tax_type_rejected(
        self, db_session: AsyncSession, registry: AccountRegistry, supplier: Supplier, product: Product,
    ):
        service = PurchasingService(db_session, registry)
        with pytest.raises(ValidationError):
            await service.create_purchase_order(PurchaseOrderCreate(
                supplier_id=supplier.id,
                items=[PurchaseOrderItemCreate(
                    product_id=product.id, quantity=1, unit_cost=Decimal("1"), tax_type="8%",
                )],
            ))


class TestGoodsReceipt:
    """Receiving stock posts the purchase entry and credits the supplier."""

    @pytest.mark.asyncio
    async def test_full_receipt_posts_entry(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        supplier: Supplier, product: Product, store: Store,
    ):
        """Dr Inventory S, Dr Purchase Tax Control 0.16S, Cr Accounts Payable S + tax."""
        service = PurchasingService(db_session, registry)
        order = await create_order(service, supplier, product)

        receipts = await service.receive_purchase_order(
            order.id, PurchaseOrderReceive(store_id=store.id, received_date=date(2026, 6, 5)),
        )

        assert len(receipts) == 1
        assert receipts[0].total_amount == Decimal("580.00")
        assert order.status == PurchaseOrderStatus.RECEIVED

        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["100001"].id) == Decimal("500.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1500"].id) == Decimal("80.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["2000"].id) == Decimal("-580.00")
        assert await ledger.current_balance(SUPPLIER_LEDGER, supplier.id) == Decimal("580.00")

        stock = await db_session.scalar(
            select(StoreInventory).where(StoreInventory.store_id == store.id)
        )
        assert stock.quantity == 10

    @pytest.mark.asyncio
    async def test_partial_receipts(
        self, db_session: AsyncSession, registry: AccountRegistry,
        supplier: Supplier, product: Product, store: Store,
    ):
        service = PurchasingService(db_session, registry)
        order = await create_order(service, supplier, product)
        item_id = order.items[0].id

        await service.receive_purchase_order(order.id, PurchaseOrderReceive(
            store_id=store.id, received_date=date(2026, 6, 5), items=[ReceiveItem(item_id=item_id, quantity=4)],
        ))
        assert order.status == PurchaseOrderStatus.PARTIALLY_RECEIVED

        await service.receive_purchase_order(order.id, PurchaseOrderReceive(
            store_id=store.id, received_date=date(2026, 6, 8),
        ))
        assert order.status == PurchaseOrderStatus.RECEIVED
        assert order.items[0].received_quantity == 10
        assert await service.ledger.current_balance(SUPPLIER_LEDGER, supplier.id) == Decimal("580.00")
        assert len(await service.list_receipts(order.id)) == 2

    @pytest.mark.asyncio
    async def test_over_receipt_rejected(
        self, db_session: AsyncSession, registry: AccountRegistry,
        supplier: Supplier, product: Product, store: Store,
    ):
        service = PurchasingService(db_session, registry)
        order = await create_order(service, supplier, product)

        with pytest.raises(ValidationError) as exc_info:
            await service.receive_purchase_order(order.id, PurchaseOrderReceive(
                store_id=store.id, items=[ReceiveItem(item_id=order.items[0].id, quantity=11)],
            ))
        assert exc_info.value.details["outstanding"] == 10

    @pytest.mark.asyncio
    async def test_received_order_cannot_be_received_again(
        self, db_session: AsyncSession, registry: AccountRegistry,
        supplier: Supplier, product: Product, store: Store,
    ):
        service = PurchasingService(db_session, registry)
        order = await create_order(service, supplier, product)
        await service.receive_purchase_order(order.id, PurchaseOrderReceive(
            store_id=store.id, received_date=date(2026, 6, 5),
        ))

        with pytest.raises(AlreadyProcessedError):
            await service.receive_purchase_order(order.id, PurchaseOrderReceive(store_id=store.id))
        assert await count_rows(db_session, SupplierLedgerRow) == 1

    @pytest.mark.asyncio
    async def test_free_of_charge_goods_received_without_posting(
        self, db_session: AsyncSession, registry: AccountRegistry,
        supplier: Supplier, product: Product, store: Store,
    ):
        """Zero-cost stock still lands and closes the order; nothing is posted."""
        service = PurchasingService(db_session, registry)
        order = await service.create_purchase_order(PurchaseOrderCreate(
            supplier_id=supplier.id,
            order_date=date(2026, 6, 1),
            items=[PurchaseOrderItemCreate(product_id=product.id, quantity=5, unit_cost=Decimal("0"))],
        ))
        assert order.total_amount == Decimal("0.00")

        receipts = await service.receive_purchase_order(
            order.id, PurchaseOrderReceive(store_id=store.id, received_date=date(2026, 6, 5)),
        )

        assert order.status == PurchaseOrderStatus.RECEIVED
        assert receipts[0].received_quantity == 5
        assert receipts[0].journal_entry_id is None
        stock = await db_session.scalar(
            select(StoreInventory).where(StoreInventory.store_id == store.id)
        )
        assert stock.quantity == 5
        assert await count_rows(db_session, JournalEntry) == 0
        assert await count_rows(db_session, SupplierLedgerRow) == 0
        assert await service.ledger.current_balance(SUPPLIER_LEDGER, supplier.id) == Decimal("0.00")


class TestAssetPurchases:

    @pytest.mark.asyncio
    async def test_asset_order_receipt(
        self, db_session: AsyncSession, registry: AccountRegistry, chart, supplier: Supplier,
    ):
        """Dr Fixed Assets, Dr Purchase Tax Control, Cr Accounts Payable."""
        service = PurchasingService(db_session, registry)
        order = await service.create_asset_purchase_order(AssetPurchaseOrderCreate(
            supplier_id=supplier.id,
            order_date=date(2026, 6, 1),
            items=[AssetPurchaseOrderItemCreate(description="Delivery van", quantity=1, unit_price=Decimal("20000"))],
        ))
        assert order.apo_number == "APO-000001"

        await service.receive_asset_purchase_order(order.id, received_date=date(2026, 6, 3))

        assert order.status == PurchaseOrderStatus.RECEIVED
        assert order.journal_entry_id is not None
        ledger = service.ledger
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1400"].id) == Decimal("20000.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1500"].id) == Decimal("3200.00")
        assert await ledger.current_balance(SUPPLIER_LEDGER, supplier.id) == Decimal("23200.00")

        with pytest.raises(AlreadyProcessedError):
            await service.receive_asset_purchase_order(order.id)

    @pytest.mark.asyncio
    async def test_donated_asset_received_without_posting(
        self, db_session: AsyncSession, registry: AccountRegistry, supplier: Supplier,
    ):
        service = PurchasingService(db_session, registry)
        order = await service.create_asset_purchase_order(AssetPurchaseOrderCreate(
            supplier_id=supplier.id,
            items=[AssetPurchaseOrderItemCreate(description="Display fridge", quantity=1, unit_price=Decimal("0"))],
        ))

        await service.receive_asset_purchase_order(order.id, received_date=date(2026, 6, 3))

        assert order.status == PurchaseOrderStatus.RECEIVED
        assert order.journal_entry_id is None
        assert await count_rows(db_session, JournalEntry) == 0


class TestSupplierPayments:

    @pytest.mark.asyncio
    async def test_payment_reduces_supplier_balance(
        self, db_session: AsyncSession, registry: AccountRegistry, chart,
        supplier: Supplier, product: Product, store: Store,
    ):
        """Dr Accounts Payable, Cr cash; the supplier ledger is debited."""
        service = PurchasingService(db_session, registry)
        order = await create_order(service, supplier, product)
        await service.receive_purchase_order(order.id, PurchaseOrderReceive(
            store_id=store.id, received_date=date(2026, 6, 5),
        ))

        payment = await service.pay_supplier(SupplierPaymentCreate(
            supplier_id=supplier.id,
            amount=Decimal("300.00"),
            payment_date=date(2026, 6, 20),
            account_id=chart["1000"].id,
        ))

        assert payment.payment_number == "PAY-000001"
        ledger = service.ledger
        assert await ledger.current_balance(SUPPLIER_LEDGER, supplier.id) == Decimal("280.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["2000"].id) == Decimal("-280.00")
        assert await ledger.current_balance(ACCOUNT_LEDGER, chart["1000"].id) == Decimal("-300.00")

        await db_session.refresh(supplier)
        assert supplier.balance == Decimal("280.00")

    @pytest.mark.asyncio
    async def test_payment_amount_matches_its_postings(
        self, db_session: AsyncSession, registry: AccountRegistry, chart, supplier: Supplier,
    ):
        """Sub-cent amounts are rounded once, on the document and the entry alike."""
        service = PurchasingService(db_session, registry)
        payment = await service.pay_supplier(SupplierPaymentCreate(
            supplier_id=supplier.id,
            amount=Decimal("100.005"),
            payment_date=date(2026, 6, 20),
            account_id=chart["1000"].id,
        ))

        assert payment.amount == Decimal("100.01")
        entry = await db_session.get(JournalEntry, payment.journal_entry_id)
        assert entry.total_debit == payment.amount
        assert await service.ledger.current_balance(SUPPLIER_LEDGER, supplier.id) == Decimal("-100.01")

    @pytest.mark.asyncio
    async def test_payment_from_non_cash_account_rejected(
        self, db_session: AsyncSession, registry: AccountRegistry, chart, supplier: Supplier,
    ):
        service = PurchasingService(db_session, registry)
        with pytest.raises(ValidationError):
            await service.pay_supplier(SupplierPaymentCreate(
                supplier_id=supplier.id, amount=Decimal("1"), account_id=chart["510001"].id,
            ))
