"""Main FastAPI application."""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import health, orders
from app.api.responses import error_response
from app.core.config import Settings, get_settings
from app.core.logging import setup_logging
from app.services.orders.client import OrderServiceClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings: Settings = app.state.settings
    setup_logging(settings)
    if getattr(app.state, "order_client", None) is None:
        app.state.order_client = OrderServiceClient.from_settings(settings)
    logger.info(
        f"[STARTUP] Order service client ready - base URL: {settings.order_api_base_url}, "
        f"environment: {settings.environment}"
    )
    yield
    # Shutdown
    await app.state.order_client.aclose()
    app.state.order_client = None


def register_exception_handlers(app: FastAPI) -> None:
    """Render framework errors with the API failure envelope."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"[VALIDATION] Rejected {request.method} {request.url.path} - {exc.errors()}")
        fields = sorted({".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()})
        return error_response(
            400, "VALIDATION_ERROR", f"Invalid request: {', '.join(fields) or 'body'}"
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "NOT_FOUND", "Endpoint not found")
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            f"[UNHANDLED] {request.method} {request.url.path} - {type(exc).__name__}: {exc}",
            exc_info=exc,
        )
        settings: Settings = request.app.state.settings
        message = "Internal server error" if settings.is_production else str(exc)
        return error_response(500, "INTERNAL_ERROR", message)


def create_app(
    settings: Optional[Settings] = None,
    order_client: Optional[OrderServiceClient] = None,
) -> FastAPI:
    """Build the application with explicit settings."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Driver Orders BFF",
        description="Order queries and actions for delivery drivers",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.order_client = order_client
    app.state.started_at = time.monotonic()

    register_exception_handlers(app)
    app.include_router(health.router, tags=["health"])
    app.include_router(orders.router, tags=["orders"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
