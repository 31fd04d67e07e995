"""Products API: FastAPI application factory and ASGI entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ProductsApiError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Exactly one ProductGateway per app, stored on app.state.product_gateway
    - A gateway built by the lifespan is closed by it; an injected one is not

Design Decisions:
    - Lifespan over @app.on_event: cleaner cleanup
    - create_app(gateway=...) is the injection seam used by tests
    - mongodb_connect_on_startup=True pings at startup and aborts on failure;
      False defers all connection errors to the first request (500)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from products_api.api.error_handlers import register_error_handlers
from products_api.api.routes import health, products
from products_api.config import Settings, get_settings
from products_api.infrastructure.observability import (
    access_log_middleware, setup_logging,
)
from products_api.infrastructure.product_gateway import ProductGateway

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PATCH", "DELETE", "PUT", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "X-Requested-With"]


def create_app(
    gateway: ProductGateway | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application. Pass a gateway to skip building one from settings."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        owned = None
        if app.state.product_gateway is None:
            owned = ProductGateway.from_settings(settings)
            if settings.mongodb_connect_on_startup:
                try:
                    await owned.ping()
                except Exception:
                    owned.close()
                    logger.critical("Document store unreachable at startup")
                    raise
                logger.info("Connected to MongoDB")
            app.state.product_gateway = owned
        logger.info("Products API started")
        yield
        logger.info("Products API shutting down")
        if owned is not None:
            owned.close()
            app.state.product_gateway = None

    app = FastAPI(title="Products API", version="1.0.0", lifespan=lifespan)
    app.state.product_gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )
    app.middleware("http")(access_log_middleware)

    # Routes: explicit registration
    app.include_router(health.router)
    app.include_router(products.router)

    register_error_handlers(app)
    return app


app = create_app()
