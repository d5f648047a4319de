"""FastAPI application for the Coupon Service."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.coupon_service.routers.admin import router as admin_router
from services.coupon_service.routers.member import router as coupons_router


def create_app() -> FastAPI:
    """Create and configure the Coupon Service FastAPI app."""
    app = FastAPI(
        title="BBM Coupon Service",
        version="0.1.0",
        description="Coupon validation and discount engine for Build Bharat Mart.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "coupons"}

    # Shopper routes
    # Gateway: /api/v1/coupons/{path} → /coupons/{path}
    app.include_router(coupons_router)

    # Admin routes
    # Gateway: /api/v1/admin/coupons/{path} → /admin/coupons/{path}
    app.include_router(admin_router)

    return app


app = create_app()
