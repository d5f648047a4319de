"""create_store_order_tables

Revision ID: d9a4e6b27c83
Revises:
Create Date: 2026-10-18 09:10:00.000000
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "d9a4e6b27c83"
down_revision = None
branch_labels = None
depends_on = None


award_base_enum = sa.Enum(
    "order_total", "subtotal", name="store_loyalty_award_base_enum"
)
payment_method_enum = sa.Enum("cod", "razorpay", name="store_payment_method_enum")
payment_status_enum = sa.Enum("pending", "success", name="store_payment_status_enum")
order_status_enum = sa.Enum(
    "placed",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
    name="store_order_status_enum",
)


def upgrade() -> None:
    op.create_table(
        "store_orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("order_number", sa.String(length=40), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=50), nullable=True),
        sa.Column("shipping_address", sa.JSON(), nullable=True),
        sa.Column("gstin", sa.String(length=15), nullable=True),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
        sa.Column("coupon_code", sa.String(length=50), nullable=True),
        sa.Column("coupon_discount", sa.Numeric(12, 2), nullable=False),
        sa.Column("loyalty_points_redeemed", sa.Integer(), nullable=False),
        sa.Column("loyalty_discount", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_savings", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("loyalty_award_base", award_base_enum, nullable=False),
        sa.Column("loyalty_award_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("loyalty_points_earned", sa.Integer(), nullable=False),
        sa.Column("payment_method", payment_method_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("payment_reference", sa.String(length=100), nullable=True),
        sa.Column("status", order_status_enum, nullable=False),
        sa.Column("is_guest", sa.Boolean(), nullable=False),
        sa.Column("customer_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_store_orders_order_number", "store_orders", ["order_number"], unique=True
    )
    op.create_index("ix_store_orders_user_id", "store_orders", ["user_id"])
    op.create_index(
        "ix_store_orders_payment_reference", "store_orders", ["payment_reference"]
    )

    op.create_table(
        "store_order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Uuid(),
            sa.ForeignKey("store_orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.String(length=128), nullable=True),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("store_order_items")
    op.drop_index("ix_store_orders_payment_reference", "store_orders")
    op.drop_index("ix_store_orders_user_id", "store_orders")
    op.drop_index("ix_store_orders_order_number", "store_orders")
    op.drop_table("store_orders")
    order_status_enum.drop(op.get_bind(), checkfirst=True)
    payment_status_enum.drop(op.get_bind(), checkfirst=True)
    payment_method_enum.drop(op.get_bind(), checkfirst=True)
    award_base_enum.drop(op.get_bind(), checkfirst=True)
