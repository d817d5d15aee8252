"""initial metrics schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-16 00:00:00.000000

Creates the franchise network schema read by the metrics engine:
- franchises, vehicles, maintenances: network and fleet
- sales_records, invoices: royalty ledger (amounts in cents, rates in bps)
- orders: supply orders with forward-only lifecycle
- products, warehouses, stock_levels: inventory valuation
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'franchises',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('owner_name', sa.String(length=255), nullable=True),
        sa.Column('royalty_rate_bps', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_franchises_is_active', 'franchises', ['is_active'])

    op.create_table(
        'vehicles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('franchise_id', sa.Integer(), nullable=True),
        sa.Column('license_plate', sa.String(length=32), nullable=False),
        sa.Column('next_revision_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('next_inspection_date', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['franchise_id'], ['franchises.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('license_plate'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_vehicles_franchise_id', 'vehicles', ['franchise_id'])

    op.create_table(
        'maintenances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vehicle_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_maintenances_vehicle_id', 'maintenances', ['vehicle_id'])
    op.create_index('ix_maintenances_status', 'maintenances', ['status'])

    # ============================================================================
    # sales_records: one per franchise per day; royalty stored at write time
    # ============================================================================
    op.create_table(
        'sales_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('franchise_id', sa.Integer(), nullable=False),
        sa.Column('report_date', sa.Date(), nullable=False),
        sa.Column('gross_sales_cents', sa.Integer(), nullable=False),
        sa.Column('transaction_count', sa.Integer(), nullable=False),
        sa.Column('royalty_amount_cents', sa.Integer(), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['franchise_id'], ['franchises.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('franchise_id', 'report_date', name='uq_sales_records_franchise_day'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sales_records_franchise_id', 'sales_records', ['franchise_id'])
    op.create_index('ix_sales_records_day_franchise', 'sales_records', ['report_date', 'franchise_id'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('franchise_id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(length=64), nullable=False),
        sa.Column('issue_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.ForeignKeyConstraint(['franchise_id'], ['franchises.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_invoices_franchise_id', 'invoices', ['franchise_id'])
    op.create_index('ix_invoices_issue_date', 'invoices', ['issue_date'])
    op.create_index('ix_invoices_paid_date', 'invoices', ['paid_date'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])
    op.create_index('ix_invoices_franchise_issue', 'invoices', ['franchise_id', 'issue_date'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('franchise_id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=64), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('total_amount_cents', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['franchise_id'], ['franchises.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_orders_franchise_id', 'orders', ['franchise_id'])
    op.create_index('ix_orders_order_date', 'orders', ['order_date'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_franchise_date', 'orders', ['franchise_id', 'order_date'])

    # ============================================================================
    # inventory: stock per product per warehouse
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('min_stock', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sku'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'warehouses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=120), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'stock_levels',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('warehouse_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reserved_qty', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['warehouse_id'], ['warehouses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_id', 'warehouse_id', name='uq_stock_levels_product_warehouse'),
        sa.CheckConstraint('reserved_qty <= quantity', name='ck_stock_levels_reserved_le_quantity'),
        sa.CheckConstraint('reserved_qty >= 0', name='ck_stock_levels_reserved_nonneg'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stock_levels_product_id', 'stock_levels', ['product_id'])
    op.create_index('ix_stock_levels_warehouse_id', 'stock_levels', ['warehouse_id'])


def downgrade():
    op.drop_table('stock_levels')
    op.drop_table('warehouses')
    op.drop_table('products')
    op.drop_table('orders')
    op.drop_table('invoices')
    op.drop_table('sales_records')
    op.drop_table('maintenances')
    op.drop_table('vehicles')
    op.drop_table('franchises')
