"""Loyalty service routers."""

from services.loyalty_service.routers.admin import router as admin_router
from services.loyalty_service.routers.member import router as loyalty_router

__all__ = [
    "admin_router",
    "loyalty_router",
]
