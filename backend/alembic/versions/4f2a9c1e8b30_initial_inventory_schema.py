"""Initial inventory schema

Revision ID: 4f2a9c1e8b30
Revises: 
Create Date: 2026-10-17 09:12:44.118305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '4f2a9c1e8b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')
SERIAL_STATUSES = ('available', 'allocated', 'sold', 'returned', 'damaged')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('resource', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    for col in ('id', 'ts', 'user_id', 'action', 'resource', 'status'):
        op.create_index(f'ix_logs_{col}', 'logs', [col])

    op.create_table(
        'app_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=True),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=True),
        sa.Column('default_category', sa.String(), nullable=True),
        sa.Column('auto_generate_sku', sa.Boolean(), nullable=True),
        sa.Column('items_per_page', sa.Integer(), nullable=True),
    )
    op.create_index('ix_app_settings_id', 'app_settings', ['id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('cost_price', sa.Float(), sa.CheckConstraint('cost_price >= 0'), nullable=False),
        sa.Column('selling_price', sa.Float(), sa.CheckConstraint('selling_price >= 0'), nullable=False),
        sa.Column('stock', sa.Integer(), sa.CheckConstraint('stock >= 0'), nullable=False),
        sa.Column('reorder_level', sa.Integer(), sa.CheckConstraint('reorder_level >= 0'), nullable=False),
        sa.Column('is_serialized', sa.Boolean(), nullable=False),
        sa.Column('custom_icon', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_products_id', 'products', ['id'])
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_index('ix_products_created_at', 'products', ['created_at'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer', sa.String(), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='orderstatus'), nullable=False),
        sa.Column('total_items', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    for col in ('id', 'customer', 'status', 'created_at'):
        op.create_index(f'ix_orders_{col}', 'orders', [col])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('quantity', sa.Integer(), sa.CheckConstraint('quantity > 0'), nullable=False),
        sa.Column('price', sa.Float(), sa.CheckConstraint('price >= 0'), nullable=False),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('product_description', sa.String(), nullable=True),
        sa.Column('product_category', sa.String(), nullable=True),
        sa.Column('product_location', sa.String(), nullable=True),
        sa.Column('product_sku', sa.String(), nullable=True),
        sa.Column('product_unit', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    for col in ('id', 'order_id', 'product_id'):
        op.create_index(f'ix_order_items_{col}', 'order_items', [col])

    op.create_table(
        'stock_adjustments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('quantity', sa.Integer(), sa.CheckConstraint('quantity > 0'), nullable=False),
        sa.Column('adjustment_type', sa.String(3),
                  sa.CheckConstraint("adjustment_type IN ('in', 'out')"), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('previous_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), sa.CheckConstraint('new_quantity >= 0'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    for col in ('id', 'product_id', 'adjustment_type', 'created_at'):
        op.create_index(f'ix_stock_adjustments_{col}', 'stock_adjustments', [col])

    op.create_table(
        'serial_numbers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('serial_number', sa.String(), nullable=False),
        sa.Column('status', sa.Enum(*SERIAL_STATUSES, name='serialstatus'), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('order_item_id', sa.Integer(), sa.ForeignKey('order_items.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('product_id', 'serial_number', name='uq_serial_product_number'),
    )
    for col in ('id', 'product_id', 'serial_number', 'status', 'order_id', 'order_item_id', 'created_at'):
        op.create_index(f'ix_serial_numbers_{col}', 'serial_numbers', [col])

    op.create_table(
        'serial_number_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('serial_id', sa.Integer(), sa.ForeignKey('serial_numbers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    for col in ('id', 'serial_id', 'timestamp'):
        op.create_index(f'ix_serial_number_history_{col}', 'serial_number_history', [col])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('serial_number_history')
    op.drop_table('serial_numbers')
    op.drop_table('stock_adjustments')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('app_settings')
    op.drop_table('logs')
    op.drop_table('users')
    sa.Enum(name='serialstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='orderstatus').drop(op.get_bind(), checkfirst=True)
