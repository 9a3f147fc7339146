"""initial ledger schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the ledger schema from scratch:
- products: catalog with authoritative on-hand quantity
- customers: people a credit sale can be attributed to
- sales: one product line each; the unit of debt
- payments: money applied to exactly one sale
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # products: Catalog and stock level
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sku', name='uq_products_sku'),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sa.CheckConstraint('price_cents >= 0', name='ck_products_price_non_negative'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_name', 'products', ['name'], unique=False)

    # ============================================================================
    # customers: Debtors
    # ============================================================================
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_name_phone', 'customers', ['name', 'phone'], unique=False)

    # ============================================================================
    # sales: Stock movement and debt, one product per row
    # ============================================================================
    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=True),
        sa.Column('salesperson_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        sa.Column('amount_paid_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], name='fk_sales_product_id_products'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], name='fk_sales_customer_id_customers'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity > 0', name='ck_sales_quantity_positive'),
        sa.CheckConstraint('amount_paid_cents >= 0', name='ck_sales_paid_non_negative'),
        sa.CheckConstraint('amount_paid_cents <= total_price_cents', name='ck_sales_paid_within_total'),
        sa.CheckConstraint("status IN ('pending', 'paid')", name='ck_sales_status'),
        sa.CheckConstraint("status = 'paid' OR customer_id IS NOT NULL", name='ck_sales_pending_has_customer'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sales_product_id', 'sales', ['product_id'], unique=False)
    op.create_index('ix_sales_customer_id', 'sales', ['customer_id'], unique=False)
    op.create_index('ix_sales_status', 'sales', ['status'], unique=False)
    op.create_index('ix_sales_created_at', 'sales', ['created_at'], unique=False)
    op.create_index('ix_sales_customer_status_created', 'sales',
                    ['customer_id', 'status', 'created_at'], unique=False)
    op.create_index('ix_sales_salesperson_created', 'sales',
                    ['salesperson_id', 'created_at'], unique=False)

    # ============================================================================
    # payments: Money applied to one sale
    # ============================================================================
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('received_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], name='fk_payments_sale_id_sales', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount_cents > 0', name='ck_payments_amount_positive'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_payments_sale_id', 'payments', ['sale_id'], unique=False)
    op.create_index('ix_payments_created_at', 'payments', ['created_at'], unique=False)
    op.create_index('ix_payments_sale_created', 'payments', ['sale_id', 'created_at'], unique=False)


def downgrade():
    op.drop_index('ix_payments_sale_created', table_name='payments')
    op.drop_index('ix_payments_created_at', table_name='payments')
    op.drop_index('ix_payments_sale_id', table_name='payments')
    op.drop_table('payments')

    op.drop_index('ix_sales_salesperson_created', table_name='sales')
    op.drop_index('ix_sales_customer_status_created', table_name='sales')
    op.drop_index('ix_sales_created_at', table_name='sales')
    op.drop_index('ix_sales_status', table_name='sales')
    op.drop_index('ix_sales_customer_id', table_name='sales')
    op.drop_index('ix_sales_product_id', table_name='sales')
    op.drop_table('sales')

    op.drop_index('ix_customers_name_phone', table_name='customers')
    op.drop_table('customers')

    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
