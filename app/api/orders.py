"""Driver order API endpoints."""
import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from app.api.responses import error_response, success_envelope
from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_order_client, get_order_formatter
from app.services.messaging.formatter import OrderFormatter
from app.services.orders.aggregator import build_daily_summary, sort_by_delivery_window
from app.services.orders.client import OrderServiceClient
from app.services.orders.errors import ApiErrorKind, OrderApiError
from app.services.orders.models import ACTIVE_STATUSES, CamelModel, Order, OrderStatus


router = APIRouter()
logger = logging.getLogger(__name__)


class ConfirmDeliveryRequest(CamelModel):
    """Delivery confirmation request body."""
    order_id: str = Field(min_length=1)
    notes: Optional[str] = None
    photo: Optional[str] = None  # base64-encoded image
    driver_id: Optional[str] = None  # enables the next-delivery teaser


class IssueReportRequest(CamelModel):
    """Issue report request body."""
    order_id: str = Field(min_length=1)
    issue_type: str = Field(min_length=1)
    description: str = Field(min_length=1)


class StatusUpdateRequest(CamelModel):
    """Order status update request body."""
    status: OrderStatus
    notes: Optional[str] = None


def today_in(settings: Settings) -> date:
    return datetime.now(ZoneInfo(settings.timezone)).date()


def order_error_response(
    e: OrderApiError,
    order_id: str,
    formatter: OrderFormatter,
    fallback_code: str,
    fallback_message: str,
):
    """Map a client failure on a single-order operation to a response."""
    if e.kind == ApiErrorKind.NOT_FOUND:
        return error_response(404, "ORDER_NOT_FOUND", formatter.format_not_found(order_id))
    return error_response(500, fallback_code, fallback_message)


def pick_next_order(orders: List[Order], delivered_id: str) -> Optional[Order]:
    """Earliest remaining active order other than the one just delivered."""
    remaining = [
        o for o in orders if o.id != delivered_id and o.status in ACTIVE_STATUSES
    ]
    ordered = sort_by_delivery_window(remaining)
    return ordered[0] if ordered else None


@router.get("/api/orders/daily-summary/{driver_id}")
async def get_daily_summary(
    driver_id: str,
    day: Optional[date] = Query(None, alias="date"),
    client: OrderServiceClient = Depends(get_order_client),
    formatter: OrderFormatter = Depends(get_order_formatter),
    settings: Settings = Depends(get_app_settings),
):
    """Get a driver's daily summary."""
    day = day or today_in(settings)
    logger.info(f"[DAILY SUMMARY] Request received - driver: {driver_id}, date: {day}")

    try:
        orders = await client.get_driver_orders(driver_id, day)
        driver = await client.get_driver_info(driver_id)
    except OrderApiError as e:
        logger.error(
            f"[DAILY SUMMARY] Failed - driver: {driver_id}, kind: {e.kind}, Error: {e}"
        )
        return error_response(500, "DAILY_SUMMARY_ERROR", "Failed to fetch daily summary")

    summary = build_daily_summary(driver, orders, day)
    logger.info(
        f"[DAILY SUMMARY] Built summary - driver: {driver_id}, "
        f"total: {summary.total_orders}, urgent: {summary.urgent_orders}"
    )
    return success_envelope(
        {"summary": summary, "formattedMessage": formatter.format_daily_summary(summary)}
    )


@router.get("/api/drivers/{driver_id}/orders")
async def get_driver_orders(
    driver_id: str,
    day: Optional[date] = Query(None, alias="date"),
    client: OrderServiceClient = Depends(get_order_client),
    formatter: OrderFormatter = Depends(get_order_formatter),
    settings: Settings = Depends(get_app_settings),
):
    """Get a driver's active orders grouped by priority."""
    day = day or today_in(settings)
    logger.info(f"[ORDER LIST] Request received - driver: {driver_id}, date: {day}")

    try:
        orders = await client.get_driver_orders(driver_id, day)
    except OrderApiError as e:
        logger.error(f"[ORDER LIST] Failed - driver: {driver_id}, kind: {e.kind}, Error: {e}")
        return error_response(500, "ORDER_LIST_ERROR", "Failed to fetch orders")

    return success_envelope(
        {"orders": orders, "formattedMessage": formatter.format_order_list(orders)}
    )


@router.post("/api/orders/confirm")
async def confirm_delivery(
    body: ConfirmDeliveryRequest,
    client: OrderServiceClient = Depends(get_order_client),
    formatter: OrderFormatter = Depends(get_order_formatter),
    settings: Settings = Depends(get_app_settings),
):
    """Confirm a delivery."""
    logger.info(f"[CONFIRM] Confirming delivery - order: {body.order_id}")

    try:
        order = await client.confirm_delivery(body.order_id, body.notes, body.photo)
    except OrderApiError as e:
        logger.error(f"[CONFIRM] Failed - order: {body.order_id}, kind: {e.kind}, Error: {e}")
        return error_response(500, "CONFIRMATION_ERROR", "Failed to confirm delivery")

    next_order = None
    if body.driver_id:
        # The delivery is already confirmed; a failed lookup only drops the teaser.
        try:
            orders = await client.get_driver_orders(body.driver_id, today_in(settings))
            next_order = pick_next_order(orders, order.id)
        except OrderApiError as e:
            logger.warning(
                f"[CONFIRM] Next delivery lookup failed - driver: {body.driver_id}, "
                f"kind: {e.kind}, Error: {e}"
            )

    return success_envelope(
        {"order": order, "formattedMessage": formatter.format_confirmation(order, next_order)}
    )


@router.post("/api/orders/issue")
async def report_issue(
    body: IssueReportRequest,
    client: OrderServiceClient = Depends(get_order_client),
):
    """Report a delivery issue."""
    logger.info(f"[ISSUE] Reporting issue - order: {body.order_id}, type: {body.issue_type}")

    try:
        await client.report_issue(body.order_id, body.issue_type, body.description)
    except OrderApiError as e:
        logger.error(f"[ISSUE] Failed - order: {body.order_id}, kind: {e.kind}, Error: {e}")
        return error_response(500, "ISSUE_REPORT_ERROR", "Failed to report issue")

    return success_envelope({"message": "Issue reported successfully"})


@router.get("/api/help")
async def get_help(formatter: OrderFormatter = Depends(get_order_formatter)):
    """Get the command help message."""
    return success_envelope({"formattedMessage": formatter.format_help()})


@router.get("/api/orders/{order_id}")
async def get_order_details(
    order_id: str,
    client: OrderServiceClient = Depends(get_order_client),
    formatter: OrderFormatter = Depends(get_order_formatter),
):
    """Get the details of one order."""
    logger.info(f"[ORDER DETAILS] Request received - order: {order_id}")

    try:
        order = await client.get_order_details(order_id)
    except OrderApiError as e:
        logger.error(f"[ORDER DETAILS] Failed - order: {order_id}, kind: {e.kind}, Error: {e}")
        return order_error_response(
            e, order_id, formatter, "ORDER_FETCH_ERROR", "Failed to fetch order details"
        )

    return success_envelope(
        {"order": order, "formattedMessage": formatter.format_order_details(order)}
    )


@router.get("/api/orders/{order_id}/alert")
async def get_order_alert(
    order_id: str,
    client: OrderServiceClient = Depends(get_order_client),
    formatter: OrderFormatter = Depends(get_order_formatter),
):
    """Render the urgent alert for an order."""
    logger.info(f"[ORDER ALERT] Request received - order: {order_id}")

    try:
        order = await client.get_order_details(order_id)
    except OrderApiError as e:
        logger.error(f"[ORDER ALERT] Failed - order: {order_id}, kind: {e.kind}, Error: {e}")
        return order_error_response(
            e, order_id, formatter, "ORDER_FETCH_ERROR", "Failed to fetch order details"
        )

    return success_envelope(
        {"order": order, "formattedMessage": formatter.format_emergency_alert(order)}
    )


@router.patch("/api/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: StatusUpdateRequest,
    client: OrderServiceClient = Depends(get_order_client),
    formatter: OrderFormatter = Depends(get_order_formatter),
):
    """Move an order to a new status."""
    logger.info(f"[STATUS UPDATE] Request received - order: {order_id}, status: {body.status}")

    try:
        order = await client.update_order_status(order_id, body.status, body.notes)
    except OrderApiError as e:
        logger.error(f"[STATUS UPDATE] Failed - order: {order_id}, kind: {e.kind}, Error: {e}")
        return order_error_response(
            e, order_id, formatter, "STATUS_UPDATE_ERROR", "Failed to update order status"
        )

    return success_envelope(
        {"order": order, "formattedMessage": formatter.format_order_details(order)}
    )
