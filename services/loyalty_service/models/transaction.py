"""LoyaltyTransaction model: append-only BBM Bucks ledger."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.loyalty_service.models.enums import (
    LoyaltyTransactionStatus,
    LoyaltyTransactionType,
    enum_values,
)
from sqlalchemy import JSON, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class LoyaltyTransaction(Base):
    """One earn, redeem or expiry event.

    Rows are never updated except for the ACTIVE -> EXPIRED status transition
    performed by the expiry sweep.
    """

    __tablename__ = "loyalty_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Deterministic per (order, type): bbm-earned-<order_id>
    transaction_id: Mapped[str] = mapped_column(
        String(160), unique=True, index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    type: Mapped[LoyaltyTransactionType] = mapped_column(
        SAEnum(
            LoyaltyTransactionType,
            name="loyalty_transaction_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    # Signed: positive for EARNED, negative for REDEEMED / EXPIRED
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    order_value: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    reward_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    tier: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    discount_value: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    categories: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    expiry_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[LoyaltyTransactionStatus] = mapped_column(
        SAEnum(
            LoyaltyTransactionStatus,
            name="loyalty_transaction_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=LoyaltyTransactionStatus.ACTIVE,
        nullable=False,
    )
    expired_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_loyalty_transactions_user_created", "user_id", "created_at"),
        Index(
            "ix_loyalty_transactions_expiry_sweep", "type", "status", "expiry_date"
        ),
    )

    def __repr__(self) -> str:
        return f"<LoyaltyTransaction {self.transaction_id} {self.type.value} {self.amount}>"
