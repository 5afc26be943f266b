"""initial_furniture_schema

Revision ID: 3f2a9c1d7e01
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e01'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

FURNITURE_CATEGORIES = (
    'Sofas & Couches',
    'Chairs & Stools',
    'Beds & Mattresses',
    'Desks & Tables',
    'Storage & Cabinets',
    'Shelving & Units',
    'Outdoor Furniture',
    'Bedroom Furniture',
    'Dining Furniture',
    'Office Furniture',
)


def upgrade() -> None:
    """Upgrade schema - identity, catalog and booking tables."""

    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', JSONType, nullable=True),
        sa.Column('role', sa.String(length=20), server_default='customer', nullable=False),
        sa.Column('is_verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('profile_image', sa.Text(), nullable=True),
        sa.Column('google_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('phone'),
        sa.UniqueConstraint('google_id'),
    )

    op.create_table(
        'admins',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column(
            'role',
            sa.Enum('admin', 'superadmin', name='admin_role_enum'),
            server_default='admin',
            nullable=False,
        ),
        sa.Column('is_verified', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('login_otp', sa.String(length=6), nullable=True),
        sa.Column('login_otp_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'couriers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('login_otp', sa.String(length=6), nullable=True),
        sa.Column('login_otp_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column(
            'category',
            sa.Enum(*FURNITURE_CATEGORIES, name='furniture_category_enum'),
            nullable=False,
        ),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount_percentage', sa.Float(), server_default='0', nullable=False),
        sa.Column('final_price', sa.Numeric(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('image', sa.Text(), server_default='', nullable=False),
        sa.Column('images', JSONType, nullable=False),
        sa.Column('stock', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_visible', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('rating', sa.Float(), server_default='0', nullable=False),
        sa.Column('specifications', JSONType, nullable=False),
        sa.Column('brand', sa.String(length=100), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('weight', sa.String(length=50), nullable=True),
        sa.Column('dimensions', sa.String(length=100), nullable=True),
        sa.Column('material', sa.String(length=100), nullable=True),
        sa.Column('warranty', sa.String(length=100), nullable=True),
        sa.Column('return_policy', sa.Text(), nullable=True),
        sa.Column('colors', JSONType, nullable=False),
        sa.Column('finishes', JSONType, nullable=False),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='ck_products_discount_range',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_slug', 'products', ['slug'], unique=True)

    op.create_table(
        'product_reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('user_name', sa.String(length=100), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'customer_favorites',
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('customer_id', 'product_id'),
    )

    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_code', sa.String(length=12), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'status',
            sa.Enum(
                'pending', 'confirmed', 'processing', 'shipped',
                'ready_for_delivery', 'delivered', 'cancelled',
                name='booking_status_enum',
            ),
            server_default='pending',
            nullable=False,
        ),
        sa.Column(
            'payment_status',
            sa.Enum('pending', 'completed', 'failed', 'refunded', name='payment_status_enum'),
            server_default='pending',
            nullable=False,
        ),
        sa.Column(
            'payment_method',
            sa.Enum('cod', 'upi', 'card', 'netbanking', 'wallet', name='payment_method_enum'),
            server_default='cod',
            nullable=False,
        ),
        sa.Column('shipping_address', JSONType, nullable=True),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('delivery_otp', sa.String(length=4), nullable=True),
        sa.Column('otp_verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('courier_id', sa.Uuid(), nullable=True),
        sa.Column('courier_name', sa.String(length=100), nullable=True),
        sa.Column('courier_phone', sa.String(length=20), nullable=True),
        sa.Column('gateway_order_id', sa.String(length=64), nullable=True),
        sa.Column('gateway_payment_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_bookings_quantity_positive'),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['courier_id'], ['couriers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bookings_booking_code', 'bookings', ['booking_code'], unique=True)
    op.create_index('ix_bookings_status', 'bookings', ['status'], unique=False)
    op.create_index(
        'ix_bookings_customer_created', 'bookings', ['customer_id', 'created_at'], unique=False
    )


def downgrade() -> None:
    """Downgrade schema - drop every table and enum type."""
    op.drop_index('ix_bookings_customer_created', table_name='bookings')
    op.drop_index('ix_bookings_status', table_name='bookings')
    op.drop_index('ix_bookings_booking_code', table_name='bookings')
    op.drop_table('bookings')
    op.drop_table('customer_favorites')
    op.drop_table('product_reviews')
    op.drop_index('ix_products_slug', table_name='products')
    op.drop_table('products')
    op.drop_table('couriers')
    op.drop_table('admins')
    op.drop_table('customers')

    for enum_name in (
        'payment_method_enum',
        'payment_status_enum',
        'booking_status_enum',
        'furniture_category_enum',
        'admin_role_enum',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
