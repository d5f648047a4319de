"""Coupon admin and listing schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from services.coupon_service.models.enums import DiscountType


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal = Field(Decimal("0"), ge=0)
    max_discount: Optional[Decimal] = Field(default=None, gt=0)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_order_amount: Optional[Decimal] = Field(default=None, gt=0)
    applicable_categories: list[str] = Field(default_factory=list)
    excluded_categories: list[str] = Field(default_factory=list)
    specific_users: list[str] = Field(default_factory=list)
    usage_limit: Optional[int] = Field(default=None, ge=1)
    user_usage_limit: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def check_discount(self):
        if (
            self.discount_type == DiscountType.PERCENTAGE
            and self.discount_value > 100
        ):
            raise ValueError("Percentage discount cannot exceed 100")
        if self.discount_type != DiscountType.FREE_SHIPPING and self.discount_value <= 0:
            raise ValueError("discount_value must be positive")
        if self.valid_from and self.valid_until and self.valid_until < self.valid_from:
            raise ValueError("valid_until must be after valid_from")
        return self


class CouponUpdate(BaseModel):
    description: Optional[str] = None
    discount_value: Optional[Decimal] = Field(default=None, ge=0)
    max_discount: Optional[Decimal] = Field(default=None, gt=0)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_order_amount: Optional[Decimal] = Field(default=None, gt=0)
    applicable_categories: Optional[list[str]] = None
    excluded_categories: Optional[list[str]] = None
    specific_users: Optional[list[str]] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    user_usage_limit: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None


class CouponResponse(BaseModel):
    id: uuid.UUID
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal
    max_discount: Optional[Decimal] = None
    min_order_amount: Optional[Decimal] = None
    max_order_amount: Optional[Decimal] = None
    applicable_categories: Optional[list[str]] = None
    excluded_categories: Optional[list[str]] = None
    usage_limit: Optional[int] = None
    usage_count: int
    user_usage_limit: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminCouponResponse(CouponResponse):
    """Includes the allow-list, which is never shown to shoppers."""

    specific_users: Optional[list[str]] = None


class CouponListResponse(BaseModel):
    coupons: list[CouponResponse]
    total: int
