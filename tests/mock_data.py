"""Order service payloads and test doubles shared across tests."""
import copy
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

import httpx


TEST_BASE_URL = "http://orders.test/api"

# Fixed clock for rendered messages: 2025-11-06 09:30 UTC
FIXED_NOW = datetime(2025, 11, 6, 9, 30, tzinfo=timezone.utc)


MOCK_DRIVER = {
    "id": "driver-123",
    "name": "João Silva",
    "phone": "+5511987654321",
    "vehicleType": "van",
}

MOCK_ORDER: Dict[str, Any] = {
    "id": "order-1234",
    "driverId": "driver-123",
    "status": "pending",
    "priority": "urgent",
    "customer": {
        "id": "customer-456",
        "name": "Maria Santos",
        "phone": "+5511912345678",
    },
    "address": {
        "street": "Rua das Flores",
        "number": "123",
        "complement": "Apto 45",
        "neighborhood": "Jardim Paulista",
        "city": "São Paulo",
        "state": "SP",
        "zipcode": "01234-567",
        "coordinates": {"latitude": -23.5505, "longitude": -46.6333},
    },
    "items": [
        {"id": "item-1", "name": "Notebook Dell", "quantity": 2, "price": 3500.0},
        {"id": "item-2", "name": "Mouse Logitech", "quantity": 1, "price": 150.0},
    ],
    "totalValue": 7150.0,
    "deliveryWindow": {
        "start": "2025-11-06T14:00:00.000Z",
        "end": "2025-11-06T17:00:00.000Z",
    },
    "notes": "Entregar na portaria, avisar por interfone.",
    "createdAt": "2025-11-06T08:00:00.000Z",
    "updatedAt": "2025-11-06T08:00:00.000Z",
}


def make_order_payload(**overrides: Any) -> Dict[str, Any]:
    """Copy of MOCK_ORDER with top-level fields replaced."""
    payload = copy.deepcopy(MOCK_ORDER)
    payload.update(overrides)
    return payload


def make_orders_payload() -> List[Dict[str, Any]]:
    """One urgent, one high and one delivered normal order."""
    return [
        make_order_payload(),
        make_order_payload(
            id="order-1235",
            priority="high",
            customer={"id": "customer-457", "name": "Pedro Costa", "phone": "+5511923456789"},
            address={
                "street": "Av. Paulista",
                "number": "1000",
                "neighborhood": "Bela Vista",
                "city": "São Paulo",
                "state": "SP",
                "zipcode": "01310-100",
            },
            items=[{"id": "item-3", "name": "Teclado Mecânico", "quantity": 1, "price": 500.0}],
            totalValue=500.0,
            deliveryWindow={
                "start": "2025-11-06T12:00:00.000Z",
                "end": "2025-11-06T13:00:00.000Z",
            },
        ),
        make_order_payload(
            id="order-1236",
            priority="normal",
            status="delivered",
            customer={"id": "customer-458", "name": "Ana Lima", "phone": "+5511934567890"},
            items=[{"id": "item-4", "name": "Cabo HDMI", "quantity": 5, "price": 50.0}],
            totalValue=250.0,
            deliveryWindow={
                "start": "2025-11-06T18:00:00.000Z",
                "end": "2025-11-06T19:00:00.000Z",
            },
        ),
    ]


class FakeOrderService:
    """
    In-process stand-in for the backend order service.

    Routes map (method, path) to a list of responses that are served in
    sequence; the last one repeats. A response is either a (status, body)
    tuple, where a str body is sent as plain text and anything else as
    JSON, or an exception instance to raise.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes[(method, "/api" + path)] = list(responses)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests if r.method == method and r.url.path == "/api" + path
        ]

    def json_body(self, request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responses = self.routes.get((request.method, request.url.path))
        if not responses:
            return httpx.Response(404, json={"error": "Not Found"})
        response = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(response, Exception):
            raise response
        status, body = response
        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

