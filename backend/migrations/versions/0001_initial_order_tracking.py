"""initial order tracking schema

Revision ID: 0001_initial_order_tracking
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete schema:
- stores: tenant locations (password-only login, bcrypt hash)
- complaints / in_house_presets: intake catalogs
- order_groups / group_expenses: shared-expense buckets
- orders: repair orders, unique serial per store
- order_complaints: complaint snapshots owned by the order (no FK to catalog)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_order_tracking'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_stores_name'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'complaints',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('default_price', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('default_price >= 0', name='ck_complaints_price_nonneg'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'in_house_presets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('default_price', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('default_price >= 0', name='ck_in_house_presets_price_nonneg'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'order_groups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'group_expenses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['order_groups.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount >= 0', name='ck_group_expenses_amount_nonneg'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_group_expenses_group_id', 'group_expenses', ['group_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('serial_number', sa.String(length=32), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('whatsapp_number', sa.String(length=32), nullable=False),
        sa.Column('shoe_model', sa.String(length=255), nullable=False),
        sa.Column('shoe_size', sa.String(length=32), nullable=True),
        sa.Column('shoe_color', sa.String(length=64), nullable=True),
        sa.Column('custom_complaint', sa.Text(), nullable=True),
        sa.Column('is_price_unknown', sa.Boolean(), nullable=False),
        sa.Column('is_free', sa.Boolean(), nullable=False),
        sa.Column('expected_return_date', sa.Date(), nullable=True),
        sa.Column('total_price', sa.Float(), nullable=False),
        sa.Column('hub_price', sa.Float(), nullable=True),
        sa.Column('expense', sa.Float(), nullable=True),
        sa.Column('advance_amount', sa.Float(), nullable=False),
        sa.Column('payment_method', sa.String(length=32), nullable=True),
        sa.Column('balance_paid', sa.Float(), nullable=False),
        sa.Column('balance_payment_method', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('is_in_house', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['group_id'], ['order_groups.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'serial_number', name='uq_orders_store_serial'),
        sa.CheckConstraint('total_price >= 0', name='ck_orders_total_price_nonneg'),
        sa.CheckConstraint('hub_price IS NULL OR hub_price >= 0', name='ck_orders_hub_price_nonneg'),
        sa.CheckConstraint('expense IS NULL OR expense >= 0', name='ck_orders_expense_nonneg'),
        sa.CheckConstraint('advance_amount >= 0', name='ck_orders_advance_nonneg'),
        sa.CheckConstraint('balance_paid >= 0', name='ck_orders_balance_paid_nonneg'),
    )
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])
    op.create_index('ix_orders_group_id', 'orders', ['group_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_is_completed', 'orders', ['is_completed'])
    op.create_index('ix_orders_store_created', 'orders', ['store_id', 'created_at'])

    op.create_table(
        'order_complaints',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.String(length=36), nullable=False),
        sa.Column('complaint_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_order_complaints_order_id', 'order_complaints', ['order_id'])


def downgrade():
    op.drop_index('ix_order_complaints_order_id', table_name='order_complaints')
    op.drop_table('order_complaints')
    op.drop_index('ix_orders_store_created', table_name='orders')
    op.drop_index('ix_orders_is_completed', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_group_id', table_name='orders')
    op.drop_index('ix_orders_store_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_group_expenses_group_id', table_name='group_expenses')
    op.drop_table('group_expenses')
    op.drop_table('order_groups')
    op.drop_table('in_house_presets')
    op.drop_table('complaints')
    op.drop_table('stores')
