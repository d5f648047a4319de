"""Checkout request and result schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field
from services.coupon_service.schemas import CartItemIn, CouponApplication
from services.store_service.models.enums import AwardBase, PaymentMethod
from services.store_service.schemas.order import OrderResponse


class AddressIn(BaseModel):
    line1: str = Field(..., min_length=1, max_length=255)
    line2: Optional[str] = None
    city: str
    state: str
    zip: str = Field(..., min_length=3, max_length=12)

    def one_line(self) -> str:
        line2 = f"{self.line2}, " if self.line2 else ""
        return f"{self.line1}, {line2}{self.city}, {self.state} - {self.zip}"


class CustomerIn(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class CheckoutRequest(BaseModel):
    items: list[CartItemIn] = Field(default_factory=list)
    coupon_code: Optional[str] = None
    redeem_points: int = Field(0, ge=0)
    payment_method: PaymentMethod = PaymentMethod.COD
    payment_reference: Optional[str] = None
    customer: CustomerIn = Field(default_factory=CustomerIn)
    shipping_address: Optional[AddressIn] = None
    gstin: Optional[str] = Field(default=None, max_length=15)
    notes: Optional[str] = None


class CheckoutTotals(BaseModel):
    """Bill for one checkout. All amounts in rupees, 2 dp."""

    subtotal: Decimal
    coupon_discount: Decimal = Decimal("0.00")
    loyalty_points_redeemed: int = 0
    loyalty_discount: Decimal = Decimal("0.00")
    shipping: Decimal
    shipping_savings: Decimal = Decimal("0.00")
    tax: Decimal
    total: Decimal


class LoyaltyOutcome(BaseModel):
    points_redeemed: int = 0
    points_earned: int = 0
    tier: Optional[str] = None
    award_base: AwardBase
    award_amount: Decimal
    missed_reward: bool = False


class NotificationResult(BaseModel):
    success: bool
    channel: str = "email"
    error: Optional[str] = None
    confirmation_message: str


class CheckoutResult(BaseModel):
    """Outcome of a checkout.

    ``success`` reflects order placement only. Side effects that failed after
    the order was stored are reported through ``coupon_usage_recorded``,
    ``loyalty`` and ``notification`` instead.
    """

    success: bool
    order_number: Optional[str] = None
    order: Optional[OrderResponse] = None
    totals: Optional[CheckoutTotals] = None
    coupon: Optional[CouponApplication] = None
    coupon_usage_recorded: bool = False
    loyalty: Optional[LoyaltyOutcome] = None
    notification: Optional[NotificationResult] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    retryable: bool = False
