"""Health check endpoint."""
import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.responses import utc_now_iso
from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_order_client
from app.services.orders.client import OrderServiceClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    request: Request,
    client: OrderServiceClient = Depends(get_order_client),
    settings: Settings = Depends(get_app_settings),
):
    """Health check endpoint; degraded when the order service is down."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    order_api_healthy = await client.health_check()

    return JSONResponse(
        status_code=200 if order_api_healthy else 503,
        content={
            "status": "ok" if order_api_healthy else "degraded",
            "timestamp": utc_now_iso(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": settings.environment,
            "version": settings.app_version,
            "services": {"orderApi": "ok" if order_api_healthy else "down"},
        },
    )
