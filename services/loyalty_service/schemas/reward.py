"""Reward calculation schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class RewardCalculation(BaseModel):
    """Outcome of applying the tier table to an order amount."""

    points: int
    percentage: Decimal
    discount_value: Decimal
    tier: str
    conversion_rate: int
    reason: Optional[str] = None


class RewardQuoteRequest(BaseModel):
    order_amount: Decimal = Field(..., ge=0)
    categories: list[str] = Field(default_factory=list)


class RewardQuoteResponse(BaseModel):
    reward: RewardCalculation
    current_balance: int
    max_redeemable: int
    max_redeemable_value: Decimal
    can_redeem: bool
