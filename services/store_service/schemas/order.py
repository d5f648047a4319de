"""Order read schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from services.store_service.models.enums import (
    AwardBase,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)


class OrderItemResponse(BaseModel):
    id: uuid.UUID
    product_id: Optional[str] = None
    product_name: str
    category: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: uuid.UUID
    order_number: str
    user_id: Optional[str] = None
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    shipping_address: Optional[dict] = None
    subtotal: Decimal
    coupon_code: Optional[str] = None
    coupon_discount: Decimal
    loyalty_points_redeemed: int
    loyalty_discount: Decimal
    shipping_fee: Decimal
    shipping_savings: Decimal
    tax: Decimal
    total: Decimal
    loyalty_award_base: AwardBase
    loyalty_award_amount: Decimal
    loyalty_points_earned: int
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_reference: Optional[str] = None
    status: OrderStatus
    is_guest: bool
    created_at: datetime
    items: list[OrderItemResponse] = []

    model_config = ConfigDict(from_attributes=True)
