"""Coupon Service models package.

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.coupon_service.models.coupon import (  # noqa: F401
    Coupon,
    UserCouponUsage,
)
from services.coupon_service.models.enums import DiscountType  # noqa: F401

__all__ = [
    # Enums
    "DiscountType",
    # Models
    "Coupon",
    "UserCouponUsage",
]
