"""Store service routers."""

from services.store_service.routers.checkout import router as checkout_router

__all__ = [
    "checkout_router",
]
