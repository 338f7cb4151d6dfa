"""Ledger engine schema

Revision ID: 20261017_0900_ledger_engine
Revises:
Create Date: 2026-10-17 09:00:00.000000

Creates every table of the ledger engine:
- chart_of_accounts, journal_entries, journal_entry_lines, document_sequences
- account_ledger, client_ledger, supplier_ledger (running-balance rows)
- clients, suppliers, products, stores, store_inventory
- purchase_orders, purchase_order_items, inventory_receipts
- asset_purchase_orders, asset_purchase_order_items, supplier_payments
- sales_invoices, sales_invoice_items, credit_notes, credit_note_items, receipts
- assets (off-ledger register)

Enum columns store member names, matching SQLAlchemy's Enum default.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '20261017_0900_ledger_engine'
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.Numeric(18, 2)

ACCOUNT_TYPE = sa.Enum('ASSET', 'LIABILITY', 'EQUITY', 'REVENUE', 'EXPENSE', name='accounttype')
ACCOUNT_SUB_TYPE = sa.Enum(
    'CASH', 'BANK', 'ACCOUNTS_RECEIVABLE', 'INVENTORY', 'PREPAYMENT', 'FIXED_ASSET',
    'INTANGIBLE_ASSET', 'ACCUMULATED_DEPRECIATION', 'PURCHASE_TAX_CONTROL', 'OTHER_ASSET',
    'ACCOUNTS_PAYABLE', 'ACCRUED_EXPENSE', 'SALES_TAX_PAYABLE', 'CREDIT_CARD', 'OTHER_LIABILITY',
    'SHARE_CAPITAL', 'RETAINED_EARNINGS',
    'SALES_REVENUE', 'OTHER_INCOME',
    'COST_OF_GOODS_SOLD', 'OPERATING_EXPENSE', 'DEPRECIATION_EXPENSE', 'DAMAGES_EXPENSE',
    name='accountsubtype',
)
NORMAL_BALANCE = sa.Enum('DEBIT', 'CREDIT', name='normalbalance')
CASH_FLOW_CATEGORY = sa.Enum('OPERATING', 'INVESTING', 'FINANCING', name='cashflowcategory')
JOURNAL_ENTRY_STATUS = sa.Enum('POSTED', name='journalentrystatus')
JOURNAL_ENTRY_TYPE = sa.Enum(
    'MANUAL', 'PURCHASE', 'ASSET_PURCHASE', 'SALES', 'CREDIT_NOTE', 'RECEIPT',
    'PAYMENT', 'EXPENSE', 'DEPRECIATION', 'EQUITY', 'REVERSAL',
    name='journalentrytype',
)
LEDGER_ROW_STATUS = sa.Enum('CONFIRMED', name='ledgerrowstatus')
PURCHASE_ORDER_STATUS = sa.Enum('DRAFT', 'PARTIALLY_RECEIVED', 'RECEIVED', name='purchaseorderstatus')
# Second use of the same type; it already exists by then
PURCHASE_ORDER_STATUS_EXISTING = postgresql.ENUM(
    'DRAFT', 'PARTIALLY_RECEIVED', 'RECEIVED', name='purchaseorderstatus', create_type=False,
)
CREDIT_NOTE_SCENARIO = sa.Enum('RETURN', 'FAULTY_NO_STOCK', 'FAULTY_WITH_STOCK', name='creditnotescenario')
RECEIPT_STATUS = sa.Enum('IN_PAY', 'CONFIRMED', 'DECLINED', name='receiptstatus')


def _base_columns():
    return [
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _ledger_columns():
    return [
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', sa.Integer, nullable=True),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True, index=True),
        sa.Column('debit', MONEY, server_default='0', nullable=False),
        sa.Column('credit', MONEY, server_default='0', nullable=False),
        sa.Column('running_balance', MONEY, server_default='0', nullable=False),
    ]


def _counterparty_columns():
    return [
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('tax_pin', sa.String(50), nullable=True),
        sa.Column('balance', MONEY, server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
    ]


def _line_columns():
    return [
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('unit_price', MONEY, nullable=False),
        sa.Column('tax_type', sa.String(20), server_default='16%', nullable=False),
        sa.Column('net_amount', MONEY, server_default='0', nullable=False),
        sa.Column('tax_amount', MONEY, server_default='0', nullable=False),
        sa.Column('total_amount', MONEY, server_default='0', nullable=False),
    ]


def _document_totals():
    return [
        sa.Column('subtotal', MONEY, server_default='0', nullable=False),
        sa.Column('tax_amount', MONEY, server_default='0', nullable=False),
        sa.Column('total_amount', MONEY, server_default='0', nullable=False),
    ]


def upgrade() -> None:
    """Create ledger engine tables."""

    # ===========================================
    # CHART OF ACCOUNTS & JOURNAL
    # ===========================================
    op.create_table(
        'chart_of_accounts',
        *_base_columns(),
        sa.Column('account_code', sa.String(20), nullable=False, unique=True),
        sa.Column('account_name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('type_code', sa.Integer, nullable=True),
        sa.Column('account_type', ACCOUNT_TYPE, nullable=False),
        sa.Column('account_sub_type', ACCOUNT_SUB_TYPE, nullable=True),
        sa.Column('normal_balance', NORMAL_BALANCE, nullable=False),
        sa.Column('cash_flow_category', CASH_FLOW_CATEGORY, nullable=True),
        sa.Column('parent_id', sa.Integer, sa.ForeignKey('chart_of_accounts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
    )

    op.create_table(
        'journal_entries',
        *_base_columns(),
        sa.Column('entry_number', sa.String(50), nullable=False, unique=True, index=True),
        sa.Column('entry_date', sa.Date, nullable=False, index=True),
        sa.Column('entry_type', JOURNAL_ENTRY_TYPE, nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('source_type', sa.String(50), nullable=True),
        sa.Column('source_id', sa.Integer, nullable=True),
        sa.Column('total_debit', MONEY, server_default='0', nullable=False),
        sa.Column('total_credit', MONEY, server_default='0', nullable=False),
        sa.Column('status', JOURNAL_ENTRY_STATUS, nullable=False),
        sa.Column('reversal_of_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True, unique=True),
        sa.Column('created_by', sa.String(100), nullable=True),
        sa.CheckConstraint('total_debit = total_credit', name='ck_journal_entries_balanced_entry'),
    )

    op.create_table(
        'journal_entry_lines',
        *_base_columns(),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('line_number', sa.Integer, nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('chart_of_accounts.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('debit_amount', MONEY, server_default='0', nullable=False),
        sa.Column('credit_amount', MONEY, server_default='0', nullable=False),
        sa.CheckConstraint(
            '(debit_amount > 0 AND credit_amount = 0) OR (debit_amount = 0 AND credit_amount > 0)',
            name='ck_journal_entry_lines_one_sided_line',
        ),
    )

    op.create_table(
        'document_sequences',
        sa.Column('name', sa.String(50), primary_key=True),
        sa.Column('last_value', sa.Integer, server_default='0', nullable=False),
    )

    # ===========================================
    # COUNTERPARTIES & CATALOG
    # ===========================================
    op.create_table('clients', *_base_columns(), *_counterparty_columns())
    op.create_table('suppliers', *_base_columns(), *_counterparty_columns())

    op.create_table(
        'products',
        *_base_columns(),
        sa.Column('sku', sa.String(50), nullable=True, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('cost_price', MONEY, server_default='0', nullable=False),
        sa.Column('selling_price', MONEY, server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
    )

    op.create_table(
        'stores',
        *_base_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('is_damage_store', sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=False),
    )

    op.create_table(
        'store_inventory',
        *_base_columns(),
        sa.Column('store_id', sa.Integer, sa.ForeignKey('stores.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity', sa.Integer, server_default='0', nullable=False),
        sa.UniqueConstraint('store_id', 'product_id', name='uq_store_inventory_store_product'),
    )

    # ===========================================
    # RUNNING-BALANCE LEDGERS
    # ===========================================
    op.create_table(
        'account_ledger',
        *_base_columns(),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('chart_of_accounts.id', ondelete='RESTRICT'), nullable=False),
        *_ledger_columns(),
        sa.Column('status', LEDGER_ROW_STATUS, nullable=False),
    )
    op.create_index('ix_account_ledger_account_date_id', 'account_ledger', ['account_id', 'date', 'id'])

    op.create_table(
        'client_ledger',
        *_base_columns(),
        sa.Column('client_id', sa.Integer, sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        *_ledger_columns(),
    )
    op.create_index('ix_client_ledger_client_date_id', 'client_ledger', ['client_id', 'date', 'id'])

    op.create_table(
        'supplier_ledger',
        *_base_columns(),
        sa.Column('supplier_id', sa.Integer, sa.ForeignKey('suppliers.id', ondelete='RESTRICT'), nullable=False),
        *_ledger_columns(),
    )
    op.create_index('ix_supplier_ledger_supplier_date_id', 'supplier_ledger', ['supplier_id', 'date', 'id'])

    # ===========================================
    # PURCHASING
    # ===========================================
    op.create_table(
        'purchase_orders',
        *_base_columns(),
        sa.Column('po_number', sa.String(50), nullable=False, unique=True),
        sa.Column('supplier_id', sa.Integer, sa.ForeignKey('suppliers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('order_date', sa.Date, nullable=False),
        sa.Column('expected_delivery_date', sa.Date, nullable=True),
        sa.Column('status', PURCHASE_ORDER_STATUS, nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        *_document_totals(),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    op.create_table(
        'purchase_order_items',
        *_base_columns(),
        sa.Column('purchase_order_id', sa.Integer, sa.ForeignKey('purchase_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('received_quantity', sa.Integer, server_default='0', nullable=False),
        sa.Column('unit_cost', MONEY, nullable=False),
        sa.Column('tax_type', sa.String(20), server_default='16%', nullable=False),
    )

    op.create_table(
        'inventory_receipts',
        *_base_columns(),
        sa.Column('purchase_order_id', sa.Integer, sa.ForeignKey('purchase_orders.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('store_id', sa.Integer, sa.ForeignKey('stores.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('received_date', sa.Date, nullable=False),
        sa.Column('received_quantity', sa.Integer, nullable=False),
        sa.Column('unit_cost', MONEY, nullable=False),
        sa.Column('net_amount', MONEY, nullable=False),
        sa.Column('tax_amount', MONEY, nullable=False),
        sa.Column('total_amount', MONEY, nullable=False),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    op.create_table(
        'asset_purchase_orders',
        *_base_columns(),
        sa.Column('apo_number', sa.String(50), nullable=False, unique=True),
        sa.Column('supplier_id', sa.Integer, sa.ForeignKey('suppliers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('order_date', sa.Date, nullable=False),
        sa.Column('status', PURCHASE_ORDER_STATUS_EXISTING, nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        *_document_totals(),
        sa.Column('received_date', sa.Date, nullable=True),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    op.create_table(
        'asset_purchase_order_items',
        *_base_columns(),
        sa.Column('asset_purchase_order_id', sa.Integer, sa.ForeignKey('asset_purchase_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('description', sa.String(255), nullable=False),
        *_line_columns(),
    )

    op.create_table(
        'supplier_payments',
        *_base_columns(),
        sa.Column('payment_number', sa.String(50), nullable=False, unique=True),
        sa.Column('supplier_id', sa.Integer, sa.ForeignKey('suppliers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('payment_date', sa.Date, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('chart_of_accounts.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    # ===========================================
    # SALES
    # ===========================================
    op.create_table(
        'sales_invoices',
        *_base_columns(),
        sa.Column('invoice_number', sa.String(50), nullable=False, unique=True),
        sa.Column('client_id', sa.Integer, sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('invoice_date', sa.Date, nullable=False),
        sa.Column('due_date', sa.Date, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *_document_totals(),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    op.create_table(
        'sales_invoice_items',
        *_base_columns(),
        sa.Column('sales_invoice_id', sa.Integer, sa.ForeignKey('sales_invoices.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        *_line_columns(),
    )

    op.create_table(
        'credit_notes',
        *_base_columns(),
        sa.Column('credit_note_number', sa.String(50), nullable=False, unique=True),
        sa.Column('client_id', sa.Integer, sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('invoice_id', sa.Integer, sa.ForeignKey('sales_invoices.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('credit_note_date', sa.Date, nullable=False),
        sa.Column('scenario', CREDIT_NOTE_SCENARIO, nullable=False),
        sa.Column('damage_store_id', sa.Integer, sa.ForeignKey('stores.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('reason', sa.Text, nullable=True),
        *_document_totals(),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    op.create_table(
        'credit_note_items',
        *_base_columns(),
        sa.Column('credit_note_id', sa.Integer, sa.ForeignKey('credit_notes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        *_line_columns(),
    )

    op.create_table(
        'receipts',
        *_base_columns(),
        sa.Column('receipt_number', sa.String(50), nullable=False, unique=True),
        sa.Column('client_id', sa.Integer, sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('receipt_date', sa.Date, nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('chart_of_accounts.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', RECEIPT_STATUS, nullable=False),
        sa.Column('decline_reason', sa.Text, nullable=True),
        sa.Column('journal_entry_id', sa.Integer, sa.ForeignKey('journal_entries.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
    )

    # ===========================================
    # ASSET REGISTER
    # ===========================================
    op.create_table(
        'assets',
        *_base_columns(),
        sa.Column('account_id', sa.Integer, sa.ForeignKey('chart_of_accounts.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('purchase_date', sa.Date, nullable=False),
        sa.Column('purchase_value', MONEY, nullable=False),
        sa.Column('created_by', sa.String(100), nullable=True),
    )


def downgrade() -> None:
    """Drop ledger engine tables."""
    for table in (
        'assets',
        'receipts', 'credit_note_items', 'credit_notes', 'sales_invoice_items', 'sales_invoices',
        'supplier_payments', 'asset_purchase_order_items', 'asset_purchase_orders',
        'inventory_receipts', 'purchase_order_items', 'purchase_orders',
        'supplier_ledger', 'client_ledger', 'account_ledger',
        'store_inventory', 'stores', 'products', 'suppliers', 'clients',
        'document_sequences', 'journal_entry_lines', 'journal_entries', 'chart_of_accounts',
    ):
        op.drop_table(table)

    # Drop enums
    for enum in (
        RECEIPT_STATUS, CREDIT_NOTE_SCENARIO, PURCHASE_ORDER_STATUS, LEDGER_ROW_STATUS,
        JOURNAL_ENTRY_TYPE, JOURNAL_ENTRY_STATUS, CASH_FLOW_CATEGORY, NORMAL_BALANCE,
        ACCOUNT_SUB_TYPE, ACCOUNT_TYPE,
    ):
        enum.drop(op.get_bind(), checkfirst=True)
