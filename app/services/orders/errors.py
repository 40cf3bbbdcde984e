"""Order service error taxonomy."""
from enum import Enum
from typing import Optional


class ApiErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by the order service client."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNREACHABLE = "unreachable"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


# Kinds worth repeating an idempotent read for
TRANSIENT_KINDS = frozenset(
    {
        ApiErrorKind.SERVICE_UNAVAILABLE,
        ApiErrorKind.UNREACHABLE,
        ApiErrorKind.UNKNOWN,
    }
)


class OrderApiError(Exception):
    """Failure talking to the order service."""

    def __init__(
        self,
        kind: ApiErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        return self.kind in TRANSIENT_KINDS

    def __repr__(self) -> str:
        return (
            f"OrderApiError(kind={self.kind.value!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


def error_from_status(status_code: int, body: object) -> OrderApiError:
    """Map an HTTP error response from the order service to an OrderApiError."""
    detail = "API request failed"
    if isinstance(body, dict):
        detail = body.get("message") or body.get("error") or detail

    if status_code == 400:
        return OrderApiError(ApiErrorKind.BAD_REQUEST, f"Bad Request: {detail}", status_code)
    if status_code == 401:
        return OrderApiError(
            ApiErrorKind.UNAUTHORIZED, "Unauthorized: Invalid API credentials", status_code
        )
    if status_code == 404:
        return OrderApiError(ApiErrorKind.NOT_FOUND, f"Not Found: {detail}", status_code)
    if status_code == 429:
        return OrderApiError(
            ApiErrorKind.RATE_LIMITED,
            "Rate limit exceeded. Please try again later.",
            status_code,
        )
    if status_code in (500, 502, 503):
        return OrderApiError(
            ApiErrorKind.SERVICE_UNAVAILABLE,
            "Order service is temporarily unavailable. Please try again later.",
            status_code,
        )
    return OrderApiError(
        ApiErrorKind.UNKNOWN, f"API Error ({status_code}): {detail}", status_code
    )


def unreachable_error() -> OrderApiError:
    """Error for a request that never got a response."""
    return OrderApiError(
        ApiErrorKind.UNREACHABLE,
        "No response from order service. Please check your connection.",
    )
