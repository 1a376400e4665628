"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.store_service.routers import inventory_router, orders_router
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="BM Audio Store Service",
        version="0.1.0",
        description="Order placement, stock reservation and inventory for BM Audio.",
    )

    add_observability_middleware(app)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Buyer checkout/history and admin order management
    app.include_router(orders_router)

    # Admin stock management
    app.include_router(inventory_router)

    return app


app = create_app()
