"""create_loyalty_tables

Revision ID: b7e1c4a90d21
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "b7e1c4a90d21"
down_revision = None
branch_labels = None
depends_on = None


tier_enum = sa.Enum(
    "Standard", "Premium", "Elite", "EXCLUDED", name="loyalty_tier_enum"
)
transaction_type_enum = sa.Enum(
    "EARNED", "REDEEMED", "EXPIRED", name="loyalty_transaction_type_enum"
)
transaction_status_enum = sa.Enum(
    "ACTIVE", "USED", "EXPIRED", name="loyalty_transaction_status_enum"
)


def upgrade() -> None:
    op.create_table(
        "loyalty_balances",
        sa.Column("user_id", sa.String(length=128), primary_key=True),
        sa.Column("current_balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_redeemed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_expired", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lifetime_balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tier", tier_enum, nullable=False, server_default="Standard"),
        sa.Column("last_earned_amount", sa.Integer(), nullable=True),
        sa.Column("last_earned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_redeemed_amount", sa.Integer(), nullable=True),
        sa.Column("last_redeemed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "current_balance >= 0", name="ck_loyalty_balance_non_negative"
        ),
    )

    op.create_table(
        "loyalty_transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("transaction_id", sa.String(length=160), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("order_id", sa.String(length=64), nullable=True),
        sa.Column("type", transaction_type_enum, nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("order_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("reward_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("tier", sa.String(length=32), nullable=True),
        sa.Column("discount_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("categories", sa.JSON(), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", transaction_status_enum, nullable=False),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_loyalty_transactions_transaction_id",
        "loyalty_transactions",
        ["transaction_id"],
        unique=True,
    )
    op.create_index(
        "ix_loyalty_transactions_user_id", "loyalty_transactions", ["user_id"]
    )
    op.create_index(
        "ix_loyalty_transactions_user_created",
        "loyalty_transactions",
        ["user_id", "created_at"],
    )
    op.create_index(
        "ix_loyalty_transactions_expiry_sweep",
        "loyalty_transactions",
        ["type", "status", "expiry_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_loyalty_transactions_expiry_sweep", "loyalty_transactions")
    op.drop_index("ix_loyalty_transactions_user_created", "loyalty_transactions")
    op.drop_index("ix_loyalty_transactions_user_id", "loyalty_transactions")
    op.drop_index("ix_loyalty_transactions_transaction_id", "loyalty_transactions")
    op.drop_table("loyalty_transactions")
    op.drop_table("loyalty_balances")
    transaction_status_enum.drop(op.get_bind(), checkfirst=True)
    transaction_type_enum.drop(op.get_bind(), checkfirst=True)
    tier_enum.drop(op.get_bind(), checkfirst=True)
