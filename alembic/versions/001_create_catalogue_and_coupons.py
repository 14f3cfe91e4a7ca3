"""Create catalogue and coupon tables

Revision ID: 001_catalogue_coupons
Revises:
Create Date: 2025-06-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_catalogue_coupons'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create categories, products, coupons and coupon restriction tables"""

    # ====================
    # CATEGORY
    # ====================
    op.create_table(
        'category',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('parent_id', sa.Integer, sa.ForeignKey('category.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(100), unique=True, nullable=False),
        sa.Column('slug', sa.String, unique=True, nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('image_url', sa.String, nullable=True),
        sa.Column('icon', sa.String, nullable=True),
        sa.Column('protection_type', sa.String, nullable=False),
        sa.Column('industry', sa.String, nullable=False, server_default='All'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('is_featured', sa.Boolean, server_default=sa.false()),
        sa.Column('sort_order', sa.Integer, server_default='0'),
        sa.Column('product_count', sa.Integer, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_category_id', 'category', ['id'])
    op.create_index('ix_category_slug', 'category', ['slug'], unique=True)
    op.create_index('ix_category_protection_type', 'category', ['protection_type'])

    # ====================
    # PRODUCT
    # ====================
    op.create_table(
        'product',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('sku', sa.String, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('short_description', sa.String(300), nullable=True),
        sa.Column('brand', sa.String, nullable=False),
        sa.Column('model', sa.String, nullable=True),
        sa.Column('image_url', sa.String, nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('compare_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='KES'),
        sa.Column('protection_type', sa.String, nullable=False),
        sa.Column('industry', sa.String, nullable=False),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('category.id'), nullable=False),
        sa.Column('stock', sa.Integer, nullable=False, server_default='0'),
        sa.Column('low_stock_threshold', sa.Integer, nullable=False, server_default='10'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        sa.Column('is_featured', sa.Boolean, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_product_id', 'product', ['id'])
    op.create_index('ix_product_sku', 'product', ['sku'], unique=True)
    op.create_index('ix_product_brand', 'product', ['brand'])
    op.create_index('ix_product_protection_type', 'product', ['protection_type'])
    op.create_index('ix_product_industry', 'product', ['industry'])
    op.create_index('ix_product_category_id', 'product', ['category_id'])
    op.create_index('ix_product_is_active', 'product', ['is_active'])
    op.create_index('ix_product_created_at', 'product', ['created_at'])

    # ====================
    # COUPON
    # ====================
    op.create_table(
        'coupon',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('description', sa.String(200), nullable=True),
        sa.Column('discount_type', sa.String, nullable=False),
        sa.Column('value', sa.Numeric(10, 2), nullable=False),
        sa.Column('minimum_order_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('maximum_discount_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='KES'),
        sa.Column('usage_limit', sa.Integer, nullable=True),
        sa.Column('used_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('user_usage_limit', sa.Integer, nullable=False, server_default='1'),
        sa.Column('protection_types', sa.JSON, nullable=False),
        sa.Column('industries', sa.JSON, nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('is_public', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.String, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_coupon_id', 'coupon', ['id'])
    op.create_index('ix_coupon_code', 'coupon', ['code'], unique=True)
    op.create_index('ix_coupon_end_date', 'coupon', ['end_date'])
    op.create_index('ix_coupon_is_active', 'coupon', ['is_active'])

    # ====================
    # RESTRICTIONS
    # ====================
    op.create_table(
        'coupon_product',
        sa.Column('coupon_id', sa.Integer, sa.ForeignKey('coupon.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('product.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'coupon_category',
        sa.Column('coupon_id', sa.Integer, sa.ForeignKey('coupon.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('category.id', ondelete='CASCADE'), primary_key=True),
    )


def downgrade():
    op.drop_table('coupon_category')
    op.drop_table('coupon_product')
    op.drop_table('coupon')
    op.drop_table('product')
    op.drop_table('category')
