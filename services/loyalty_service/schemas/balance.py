"""Balance schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BalanceResponse(BaseModel):
    """A shopper's BBM Bucks totals. All counters are zero for new shoppers."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    current_balance: int = 0
    total_earned: int = 0
    total_redeemed: int = 0
    total_expired: int = 0
    lifetime_balance: int = 0
    tier: str = "Standard"
    discount_value: Decimal = Decimal("0.00")
    last_earned_at: Optional[datetime] = None
    last_redeemed_at: Optional[datetime] = None


class ExpirySummary(BaseModel):
    expired_transactions: int
    total_expired: int
