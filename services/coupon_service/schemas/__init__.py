"""Coupon Service schemas package.

IMPORTANT: Every schema class must be listed here.
"""

from services.coupon_service.schemas.application import (  # noqa: F401
    CouponApplication,
    CouponValidateRequest,
)
from services.coupon_service.schemas.coupon import (  # noqa: F401
    AdminCouponResponse,
    CouponCreate,
    CouponListResponse,
    CouponResponse,
    CouponUpdate,
)
from services.coupon_service.schemas.order import (  # noqa: F401
    CartItemIn,
    OrderContext,
)

__all__ = [
    # Application
    "CouponApplication",
    "CouponValidateRequest",
    # Coupon
    "AdminCouponResponse",
    "CouponCreate",
    "CouponListResponse",
    "CouponResponse",
    "CouponUpdate",
    # Order
    "CartItemIn",
    "OrderContext",
]
