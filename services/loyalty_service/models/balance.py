"""UserBalance model: one BBM Bucks account per shopper."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.loyalty_service.models.enums import RewardTierName, enum_values
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class UserBalance(Base):
    """Running totals for a shopper's BBM Bucks. Keyed by auth user ID."""

    __tablename__ = "loyalty_balances"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    current_balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_redeemed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_expired: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lifetime_balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tier: Mapped[RewardTierName] = mapped_column(
        SAEnum(
            RewardTierName,
            name="loyalty_tier_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RewardTierName.STANDARD,
        nullable=False,
    )
    last_earned_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    last_earned_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_redeemed_amount: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    last_redeemed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "current_balance >= 0", name="ck_loyalty_balance_non_negative"
        ),
    )

    def __repr__(self) -> str:
        return f"<UserBalance {self.user_id} balance={self.current_balance}>"
