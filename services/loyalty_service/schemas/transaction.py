"""Ledger transaction schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from services.loyalty_service.models.enums import (
    LoyaltyTransactionStatus,
    LoyaltyTransactionType,
)


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    transaction_id: str
    order_id: Optional[str] = None
    type: LoyaltyTransactionType
    amount: int
    order_value: Optional[Decimal] = None
    reward_percentage: Optional[Decimal] = None
    tier: Optional[str] = None
    discount_value: Optional[Decimal] = None
    description: str
    expiry_date: Optional[datetime] = None
    status: LoyaltyTransactionStatus
    created_at: datetime


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: int
