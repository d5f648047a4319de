"""Coupon service routers."""

from services.coupon_service.routers.admin import router as admin_router
from services.coupon_service.routers.member import router as coupons_router

__all__ = [
    "admin_router",
    "coupons_router",
]
