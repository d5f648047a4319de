"""Coupon Service business logic."""

from services.coupon_service.services.engine import CouponEngine  # noqa: F401
from services.coupon_service.services.rules import (  # noqa: F401
    STANDARD_SHIPPING_COST,
    category_matches,
    compute_discount,
    discount_base,
    normalize_code,
)

__all__ = [
    "CouponEngine",
    "STANDARD_SHIPPING_COST",
    "category_matches",
    "compute_discount",
    "discount_base",
    "normalize_code",
]
