"""FastAPI application for the Store Service."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.store_service.routers import checkout_router


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="BBM Store Service",
        version="0.1.0",
        description="Checkout and orders for Build Bharat Mart.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Public store routes (checkout, order lookup)
    app.include_router(checkout_router, prefix="/store")

    return app


app = create_app()
