"""Coupon validation request and result schemas."""

import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from services.coupon_service.models.enums import DiscountType
from services.coupon_service.schemas.order import CartItemIn


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    items: list[CartItemIn] = Field(..., min_length=1)
    subtotal: Optional[Decimal] = Field(default=None, ge=0)


class CouponApplication(BaseModel):
    """Typed result of validating a coupon. Never raised, always returned.

    ``free_shipping`` is a separate waiver flag: it never contributes to
    ``discount_amount``. ``retryable`` marks store failures so the caller
    can offer a retry instead of a correction.
    """

    is_valid: bool
    code: str
    coupon_id: Optional[uuid.UUID] = None
    discount_type: Optional[DiscountType] = None
    description: Optional[str] = None
    discount_amount: Decimal = Decimal("0.00")
    discount_base: Decimal = Decimal("0.00")
    free_shipping: bool = False
    shipping_savings: Decimal = Decimal("0.00")
    error: Optional[str] = None
    error_code: Optional[str] = None
    retryable: bool = False

    @classmethod
    def failure(
        cls, code: str, error: str, error_code: str, retryable: bool = False
    ) -> "CouponApplication":
        return cls(
            is_valid=False,
            code=code,
            error=error,
            error_code=error_code,
            retryable=retryable,
        )
