"""FastAPI application for the Loyalty Service."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.loyalty_service.routers.admin import router as admin_router
from services.loyalty_service.routers.member import router as loyalty_router


def create_app() -> FastAPI:
    """Create and configure the Loyalty Service FastAPI app."""
    app = FastAPI(
        title="BBM Loyalty Service",
        version="0.1.0",
        description="BBM Bucks rewards ledger for Build Bharat Mart.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "loyalty"}

    # Member-facing routes
    # Gateway: /api/v1/loyalty/{path} → /loyalty/{path}
    app.include_router(loyalty_router)

    # Admin routes
    # Gateway: /api/v1/admin/loyalty/{path} → /admin/loyalty/{path}
    app.include_router(admin_router)

    return app


app = create_app()
