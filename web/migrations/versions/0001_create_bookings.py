"""Create bookings table

Revision ID: 0001
Revises:
Create Date: 2025-01-15 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_id', sa.String(length=50), nullable=False),
        sa.Column('tour_id', sa.String(length=50), nullable=False),
        sa.Column('tour_name', sa.String(length=255), nullable=False),
        sa.Column('tour_slug', sa.String(length=255), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=False),
        sa.Column('departure_date', sa.DateTime(), nullable=False),
        sa.Column('adults', sa.Integer(), nullable=False),
        sa.Column('children_with_bed', sa.Integer(), nullable=True),
        sa.Column('children_without_bed', sa.Integer(), nullable=True),
        sa.Column('room_configuration', sa.JSON(), nullable=True),
        sa.Column('addons', sa.JSON(), nullable=True),
        sa.Column('base_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('children_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('room_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('addons_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=True),
        sa.Column('payment_id', sa.String(length=255), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('payment_details', sa.JSON(), nullable=True),
        sa.Column('booking_status', sa.String(length=20), nullable=True),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('booking_date', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('confirmation_email_sent', sa.Boolean(), nullable=True),
        sa.Column('confirmation_email_sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("payment_status IN ('pending', 'confirmed', 'failed', 'refunded')", name='ck_bookings_payment_status'),
        sa.CheckConstraint("payment_method IN ('razorpay', 'hdfc', 'bank_transfer', 'other')", name='ck_bookings_payment_method'),
        sa.CheckConstraint("booking_status IN ('pending', 'confirmed', 'cancelled', 'completed')", name='ck_bookings_booking_status'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_id')
    )
    op.create_index('idx_bookings_customer_email', 'bookings', ['customer_email'], unique=False)
    op.create_index('idx_bookings_booking_date', 'bookings', ['booking_date'], unique=False)
    op.create_index('idx_bookings_departure_date', 'bookings', ['departure_date'], unique=False)
    op.create_index('idx_bookings_payment_status', 'bookings', ['payment_status'], unique=False)
    op.create_index('idx_bookings_booking_status', 'bookings', ['booking_status'], unique=False)
    op.create_index('idx_bookings_tour_id', 'bookings', ['tour_id'], unique=False)


def downgrade():
    op.drop_index('idx_bookings_tour_id', table_name='bookings')
    op.drop_index('idx_bookings_booking_status', table_name='bookings')
    op.drop_index('idx_bookings_payment_status', table_name='bookings')
    op.drop_index('idx_bookings_departure_date', table_name='bookings')
    op.drop_index('idx_bookings_booking_date', table_name='bookings')
    op.drop_index('idx_bookings_customer_email', table_name='bookings')
    op.drop_table('bookings')
