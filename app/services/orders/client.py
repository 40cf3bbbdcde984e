"""Order service API client."""
import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from app.core.config import Settings
from app.services.orders.errors import (
    ApiErrorKind,
    OrderApiError,
    error_from_status,
    unreachable_error,
)
from app.services.orders.models import ACTIVE_STATUSES, DriverInfo, Order, OrderStatus
from app.services.retry import retry_with_backoff

M = TypeVar("M", bound=BaseModel)

_ORDER_LIST = TypeAdapter(List[Order])


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _segment(value: str) -> str:
    """Quote an identifier for use as a single path segment."""
    return quote(value, safe="")


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optional fields from a request body."""
    return {key: value for key, value in payload.items() if value is not None}


class OrderServiceClient:
    """
    Client for the backend order service.

    Reads are idempotent and retried with exponential backoff on transient
    failures. Writes are sent exactly once. Every failure leaves this class
    as an OrderApiError.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            transport=transport,
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "OrderServiceClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.order_api_base_url,
            api_key=settings.order_api_key,
            timeout=settings.order_api_timeout,
            max_retries=settings.retry_max_attempts,
            initial_delay=settings.retry_initial_delay,
            **kwargs,
        )

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def _log_request(self, request: httpx.Request) -> None:
        self.logger.debug(f"[ORDER API] Request - {request.method} {request.url.path}")

    async def _log_response(self, response: httpx.Response) -> None:
        self.logger.debug(
            f"[ORDER API] Response - {response.status_code} "
            f"{response.request.method} {response.request.url.path}"
        )

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request. Network failures and HTTP errors raise OrderApiError."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            self.logger.warning(
                f"[ORDER API] No response - {method} {path}, Error: {type(e).__name__}: {e}"
            )
            raise unreachable_error() from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            raise error_from_status(response.status_code, body)
        return response

    def _json(self, response: httpx.Response) -> Any:
        """Decode a successful response body for operations that return data."""
        try:
            return response.json()
        except ValueError as e:
            raise OrderApiError(
                ApiErrorKind.UNKNOWN,
                "Invalid response from order service",
                response.status_code,
            ) from e

    async def _read(self, path: str, **kwargs: Any) -> Any:
        """GET with retry on transient failures. Returns the decoded body."""

        async def attempt() -> Any:
            return self._json(await self._send("GET", path, **kwargs))

        return await retry_with_backoff(
            attempt,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            should_retry=lambda e: isinstance(e, OrderApiError) and e.is_transient,
            sleep=self._sleep,
        )

    def _parse(self, model: Type[M], body: Any, key: str) -> M:
        try:
            return model.model_validate(body[key])
        except (KeyError, TypeError, ValidationError) as e:
            raise OrderApiError(
                ApiErrorKind.UNKNOWN, f"Invalid response from order service: missing or malformed '{key}'"
            ) from e

    def _parse_order(self, body: Any) -> Order:
        order = self._parse(Order, body, "order")
        self._check_total(order)
        return order

    def _check_total(self, order: Order) -> None:
        # The order service owns totals; a mismatch is reported, not corrected.
        if order.items and abs(order.items_total - order.total_value) > 0.01:
            self.logger.warning(
                f"[ORDER API] Order {order.id} total {order.total_value:.2f} "
                f"differs from item sum {order.items_total:.2f}"
            )

    async def get_driver_orders(
        self, driver_id: str, day: Optional[date] = None
    ) -> List[Order]:
        """
        Get the active orders of a driver for one day.

        Args:
            driver_id: Driver identifier
            day: Calendar day to query, today when omitted

        Returns:
            Orders in pending, confirmed or in_transit status
        """
        day = day or date.today()
        try:
            body = await self._read(
                f"/drivers/{_segment(driver_id)}/orders",
                params={
                    "date": day.isoformat(),
                    "status": ",".join(status.value for status in ACTIVE_STATUSES),
                },
            )
            try:
                orders = _ORDER_LIST.validate_python(body["orders"])
            except (KeyError, TypeError, ValidationError) as e:
                raise OrderApiError(
                    ApiErrorKind.UNKNOWN,
                    "Invalid response from order service: missing or malformed 'orders'",
                ) from e
            for order in orders:
                self._check_total(order)

            self.logger.info(f"Fetched {len(orders)} orders for driver {driver_id}")
            return orders
        except OrderApiError as e:
            self.logger.error(f"Failed to fetch orders for driver {driver_id} - {e.kind}: {e}")
            raise

    async def get_order_details(self, order_id: str) -> Order:
        """Get a single order."""
        try:
            body = await self._read(f"/orders/{_segment(order_id)}")
            order = self._parse_order(body)
            self.logger.info(f"Fetched details for order {order_id}")
            return order
        except OrderApiError as e:
            self.logger.error(f"Failed to fetch order {order_id} - {e.kind}: {e}")
            raise

    async def get_driver_info(self, driver_id: str) -> DriverInfo:
        """Get the driver's profile."""
        try:
            body = await self._read(f"/drivers/{_segment(driver_id)}")
            driver = self._parse(DriverInfo, body, "driver")
            self.logger.info(f"Fetched info for driver {driver_id}")
            return driver
        except OrderApiError as e:
            self.logger.error(f"Failed to fetch driver {driver_id} info - {e.kind}: {e}")
            raise

    async def update_order_status(
        self, order_id: str, status: OrderStatus, notes: Optional[str] = None
    ) -> Order:
        """Move an order to a new status. Sent once, never retried."""
        try:
            response = await self._send(
                "PATCH",
                f"/orders/{_segment(order_id)}/status",
                json=_compact(
                    {
                        "status": OrderStatus(status).value,
                        "notes": notes,
                        "timestamp": _utc_timestamp(),
                    }
                ),
            )
            order = self._parse_order(self._json(response))
            self.logger.info(f"Updated order {order_id} status to {status}")
            return order
        except OrderApiError as e:
            self.logger.error(f"Failed to update order {order_id} - {e.kind}: {e}")
            raise

    async def confirm_delivery(
        self,
        order_id: str,
        notes: Optional[str] = None,
        photo: Optional[str] = None,
    ) -> Order:
        """
        Mark an order as delivered. Sent once, never retried.

        Args:
            order_id: Order identifier
            notes: Free-text delivery notes
            photo: Base64-encoded proof-of-delivery image

        Returns:
            The order as updated by the order service
        """
        try:
            response = await self._send(
                "POST",
                f"/orders/{_segment(order_id)}/confirm",
                json=_compact(
                    {
                        "status": OrderStatus.DELIVERED.value,
                        "notes": notes,
                        "photo": photo,
                        "timestamp": _utc_timestamp(),
                    }
                ),
            )
            order = self._parse_order(self._json(response))
            self.logger.info(f"Confirmed delivery for order {order_id}")
            return order
        except OrderApiError as e:
            self.logger.error(f"Failed to confirm delivery for order {order_id} - {e.kind}: {e}")
            raise

    async def report_issue(self, order_id: str, issue_type: str, description: str) -> None:
        """Report a delivery problem. Sent once, never retried."""
        try:
            await self._send(
                "POST",
                f"/orders/{_segment(order_id)}/issues",
                json={
                    "issueType": issue_type,
                    "description": description,
                    "timestamp": _utc_timestamp(),
                },
            )
            self.logger.info(f"Reported issue for order {order_id} - type: {issue_type}")
        except OrderApiError as e:
            self.logger.error(f"Failed to report issue for order {order_id} - {e.kind}: {e}")
            raise

    async def health_check(self) -> bool:
        """Check the order service. Never raises."""
        try:
            await self._send("GET", "/health")
            return True
        except OrderApiError as e:
            self.logger.warning(f"Order service health check failed - {e.kind}: {e}")
            return False
        except Exception as e:
            self.logger.warning(
                f"Order service health check failed - {type(e).__name__}: {e}", exc_info=True
            )
            return False
