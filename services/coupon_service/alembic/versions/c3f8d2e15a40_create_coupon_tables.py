"""create_coupon_tables

Revision ID: c3f8d2e15a40
Revises:
Create Date: 2026-10-18 09:05:00.000000
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "c3f8d2e15a40"
down_revision = None
branch_labels = None
depends_on = None


discount_type_enum = sa.Enum(
    "percentage", "fixed", "free_shipping", name="coupon_discount_type_enum"
)


def upgrade() -> None:
    op.create_table(
        "coupons",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("discount_type", discount_type_enum, nullable=False),
        sa.Column("discount_value", sa.Numeric(12, 2), nullable=False),
        sa.Column("max_discount", sa.Numeric(12, 2), nullable=True),
        sa.Column("min_order_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("max_order_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("applicable_categories", sa.JSON(), nullable=True),
        sa.Column("excluded_categories", sa.JSON(), nullable=True),
        sa.Column("specific_users", sa.JSON(), nullable=True),
        sa.Column("usage_limit", sa.Integer(), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("user_usage_limit", sa.Integer(), nullable=True),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_coupons_code", "coupons", ["code"], unique=True)

    op.create_table(
        "user_coupon_usage",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column(
            "coupon_id",
            sa.Uuid(),
            sa.ForeignKey("coupons.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=True),
        sa.Column("order_numbers", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "coupon_id", name="uq_user_coupon_usage"),
    )
    op.create_index(
        "ix_user_coupon_usage_user_id", "user_coupon_usage", ["user_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_user_coupon_usage_user_id", "user_coupon_usage")
    op.drop_table("user_coupon_usage")
    op.drop_index("ix_coupons_code", "coupons")
    op.drop_table("coupons")
    discount_type_enum.drop(op.get_bind(), checkfirst=True)
