"""initial bakery schema

Revision ID: a1c3e5b7d901
Revises:
Create Date: 2026-10-12 10:04:51.318220

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c3e5b7d901'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    user_role = sa.Enum('CUSTOMER', 'STAFF', 'ADMIN', name='userrole')
    order_status = sa.Enum('PENDING', 'CONFIRMED', 'PREPARING', 'READY', 'OUT_FOR_DELIVERY', 'DELIVERED',
                           'PICKED_UP', 'CANCELLED', 'REFUNDED', name='orderstatus')
    account_type = sa.Enum('ASSET', 'LIABILITY', 'EQUITY', 'REVENUE', 'EXPENSE', name='accounttype')

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True, unique=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_categories_id', 'categories', ['id'])
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('slug', sa.String(170), nullable=False),
        sa.Column('sku', sa.String(50), nullable=True, unique=True),
        sa.Column('short_description', sa.String(300), nullable=True),
        sa.Column('long_description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('cost', sa.Numeric(10, 2), nullable=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('media', sa.JSON(), nullable=True),
        sa.Column('badges', sa.JSON(), nullable=True),
        sa.Column('allergens', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('inventory_tracking_enabled', sa.Boolean(), nullable=False),
        sa.Column('stock_qty', sa.Integer(), nullable=True),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
    )
    op.create_index('ix_products_id', 'products', ['id'])
    op.create_index('ix_products_slug', 'products', ['slug'], unique=True)

    op.create_table(
        'addresses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('label', sa.String(50), nullable=False),
        sa.Column('line1', sa.String(200), nullable=False),
        sa.Column('line2', sa.String(200), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('area', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_addresses_id', 'addresses', ['id'])
    op.create_index('ix_addresses_customer_id', 'addresses', ['customer_id'])

    op.create_table(
        'carts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index('ix_carts_id', 'carts', ['id'])

    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cart_id', sa.Integer(), sa.ForeignKey('carts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('name_snapshot', sa.String(150), nullable=False),
        sa.Column('price_snapshot', sa.Numeric(10, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('cart_id', 'product_id', name='_cart_product_uc'),
    )
    op.create_index('ix_cart_items_id', 'cart_items', ['id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_number', sa.String(30), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('placed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('fulfillment_type', sa.Enum('DELIVERY', 'PICKUP', name='fulfillmenttype'), nullable=False),
        sa.Column('delivery_address_id', sa.Integer(), sa.ForeignKey('addresses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('delivery_address_snapshot', sa.JSON(), nullable=True),
        sa.Column('status', order_status, nullable=False),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('preparing_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ready_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shipped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('payment_method', sa.Enum('COD', 'CARD', name='paymentmethod'), nullable=False),
        sa.Column('payment_status', sa.Enum('UNPAID', 'PAID', 'REFUNDED', name='paymentstatus'), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('sub_total', sa.Numeric(10, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('requested_delivery_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_delivery_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_delivery_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivery_window', sa.String(20), nullable=True),
        sa.Column('tracking_number', sa.String(100), nullable=True),
        sa.Column('notes_customer', sa.Text(), nullable=True),
        sa.Column('notes_admin', sa.Text(), nullable=True),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('source', sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('name_snapshot', sa.String(150), nullable=False),
        sa.Column('price_snapshot', sa.Numeric(10, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('line_total', sa.Numeric(10, 2), nullable=False),
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'order_status_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', order_status, nullable=False),
        sa.Column('changed_by', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_order_status_history_id', 'order_status_history', ['id'])
    op.create_index('ix_order_status_history_order_id', 'order_status_history', ['order_id'])

    op.create_table(
        'chart_of_accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', account_type, nullable=False),
        sa.Column('category', sa.Enum(
            'CASH', 'ACCOUNTS_RECEIVABLE', 'INVENTORY', 'PREPAID_EXPENSES', 'FIXED_ASSETS', 'ACCOUNTS_PAYABLE',
            'COD_OUTSTANDING', 'ACCRUED_EXPENSES', 'OWNERS_EQUITY', 'RETAINED_EARNINGS', 'PRODUCT_SALES',
            'DELIVERY_FEES', 'SERVICE_REVENUE', 'COST_OF_GOODS_SOLD', 'DELIVERY_EXPENSES', 'OPERATING_EXPENSES',
            'ADMINISTRATIVE_EXPENSES', name='accountcategory'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_chart_of_accounts_id', 'chart_of_accounts', ['id'])
    op.create_index('ix_chart_of_accounts_code', 'chart_of_accounts', ['code'], unique=True)

    op.create_table(
        'ledger_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('transaction_id', sa.String(40), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('chart_of_accounts.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('direction', sa.Enum('DEBIT', 'CREDIT', name='ledgerdirection'), nullable=False),
        sa.Column('description', sa.String(255), nullable=False),
        sa.Column('reference_type', sa.Enum('ORDER', 'PAYMENT', 'INVENTORY', 'ADJUSTMENT', name='ledgerreferencetype'),
                  nullable=True),
        sa.Column('reference_id', sa.String(50), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount >= 0', name='check_ledger_amount_non_negative'),
    )
    op.create_index('ix_ledger_entries_id', 'ledger_entries', ['id'])
    op.create_index('ix_ledger_entries_transaction_id', 'ledger_entries', ['transaction_id'])
    op.create_index('ix_ledger_entries_order_id', 'ledger_entries', ['order_id'])
    op.create_index('ix_ledger_entries_account_id', 'ledger_entries', ['account_id'])
    op.create_index('ix_ledger_entries_created_at', 'ledger_entries', ['created_at'])

    op.create_table(
        'cod_tracking',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False, unique=True),
        sa.Column('amount_due', sa.Numeric(12, 2), nullable=False),
        sa.Column('amount_collected', sa.Numeric(12, 2), nullable=False),
        sa.Column('collected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('collected_by', sa.String(), nullable=True),
        sa.Column('variance', sa.Numeric(12, 2), nullable=False),
        sa.Column('variance_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_reconciled', sa.Boolean(), nullable=False),
        sa.Column('reconciled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reconciled_by', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_cod_tracking_id', 'cod_tracking', ['id'])

    op.create_table(
        'financial_adjustments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('type', sa.Enum('REFUND_ADJUSTMENT', 'COD_SHORTAGE', 'COD_OVERAGE', 'DELIVERY_FEE_WAIVER',
                                  'PRODUCT_DISCOUNT', 'INVENTORY_ADJUSTMENT', 'OTHER', name='adjustmenttype'),
                  nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('debit_account_code', sa.String(20), nullable=False),
        sa.Column('credit_account_code', sa.String(20), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'CANCELLED', name='adjustmentstatus'),
                  nullable=False),
        sa.Column('requested_by', sa.String(), nullable=False),
        sa.Column('approved_by', sa.String(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('transaction_id', sa.String(40), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_financial_adjustments_id', 'financial_adjustments', ['id'])
    op.create_index('ix_financial_adjustments_status', 'financial_adjustments', ['status'])

    op.create_table(
        'site_configuration',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('category', sa.Enum('GENERAL', 'SEO', 'SOCIAL', 'BUSINESS', 'FEATURES', 'APPEARANCE', 'ANALYTICS',
                                      name='configcategory'), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_site_configuration_id', 'site_configuration', ['id'])
    op.create_index('ix_site_configuration_key', 'site_configuration', ['key'], unique=True)

    op.create_table(
        'pages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.String(500), nullable=True),
        sa.Column('status', sa.Enum('DRAFT', 'PUBLISHED', 'ARCHIVED', name='pagestatus'), nullable=False),
        sa.Column('meta_title', sa.String(200), nullable=True),
        sa.Column('meta_description', sa.String(500), nullable=True),
        sa.Column('show_in_navigation', sa.Boolean(), nullable=False),
        sa.Column('navigation_order', sa.Integer(), nullable=True),
        sa.Column('featured_image', sa.String(500), nullable=True),
        sa.Column('sections', sa.JSON(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_pages_id', 'pages', ['id'])
    op.create_index('ix_pages_slug', 'pages', ['slug'], unique=True)

    op.create_table(
        'banners',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('subtitle', sa.String(300), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('button_text', sa.String(100), nullable=True),
        sa.Column('button_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('target_pages', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_banners_id', 'banners', ['id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.String(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])


def downgrade() -> None:
    for table in [
        'audit_log', 'banners', 'pages', 'site_configuration', 'financial_adjustments', 'cod_tracking',
        'ledger_entries', 'chart_of_accounts', 'order_status_history', 'order_items', 'orders', 'cart_items',
        'carts', 'addresses', 'products', 'categories', 'users',
    ]:
        op.drop_table(table)

    bind = op.get_bind()
    for enum_name in [
        'configcategory', 'pagestatus', 'adjustmentstatus', 'adjustmenttype', 'ledgerreferencetype',
        'ledgerdirection', 'accountcategory', 'accounttype', 'paymentstatus', 'paymentmethod',
        'orderstatus', 'fulfillmenttype', 'userrole',
    ]:
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
