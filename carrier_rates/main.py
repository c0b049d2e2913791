"""
Carrier Rates
FastAPI application entry point

- Settings are validated before the app is built (missing UPS credentials
  stop startup)
- The shipping service is built in the lifespan and closed on shutdown
- Run with: uvicorn carrier_rates.main:create_app --factory
"""
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI

from carrier_rates.api.routes import shipping
from carrier_rates.core.config import Settings, get_settings
from carrier_rates.core.error_handler import register_error_handlers
from carrier_rates.services.shipping_service import ShippingService, create_shipping_service

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and quiet chatty HTTP libraries."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    shipping_service: Optional[ShippingService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Validated settings (defaults to get_settings())
        shipping_service: Prebuilt service (defaults to one built from settings)
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.shipping_service is None:
            app.state.shipping_service = create_shipping_service(settings)
        logger.info(
            f"{settings.APP_NAME} started ({settings.ENVIRONMENT}), carriers: "
            f"{', '.join(app.state.shipping_service.registry.codes())}"
        )

        yield

        # Close HTTP clients to prevent connection leaks
        await app.state.shipping_service.close()
        logger.info("Carrier HTTP clients closed")

    app = FastAPI(
        lifespan=lifespan,
        title=settings.APP_NAME,
        description="Normalized shipping rate quotes across carriers.",
        version="0.1.0",
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoints"},
            {"name": "shipping", "description": "Carrier listing and rate quotes"},
        ],
    )
    app.state.settings = settings
    app.state.shipping_service = shipping_service

    register_error_handlers(app, debug=settings.DEBUG)
    app.include_router(shipping.router)

    @app.get("/health", tags=["Health"])
    async def health_check():
        service = app.state.shipping_service
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "carriers": service.registry.codes() if service else [],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def _read_port() -> int:
    """Fetch and validate the PORT environment variable."""
    value = os.environ.get("PORT", "8000")
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid PORT '{value}': {exc}") from exc


def run() -> None:
    """Console entry point."""
    uvicorn.run("carrier_rates.main:create_app", factory=True, host="0.0.0.0", port=_read_port())
