"""Shared test fixtures and configuration."""
import os

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ.setdefault("ORDER_API_BASE_URL", "http://orders.test/api")
os.environ.setdefault("ORDER_API_KEY", "test-api-key")
os.environ.setdefault("ENVIRONMENT", "test")

from app.main import create_app
from app.core.config import Settings
from app.core.dependencies import get_order_formatter
from app.services.messaging.formatter import OrderFormatter
from app.services.orders.client import OrderServiceClient
from app.services.orders.models import DailySummary, Order
from tests.mock_data import (
    FIXED_NOW,
    MOCK_DRIVER,
    TEST_BASE_URL,
    FakeOrderService,
    RecordingSleep,
    make_order_payload,
    make_orders_payload,
)


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        environment="test",
        order_api_base_url=TEST_BASE_URL,
        order_api_key="test-api-key",
        order_api_timeout=5.0,
        retry_max_attempts=3,
        retry_initial_delay_ms=1000,
        timezone="UTC",
    )


@pytest.fixture
def fake_service():
    return FakeOrderService()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
async def order_client(test_settings, fake_service, recording_sleep):
    """Order service client wired to the fake backend."""
    client = OrderServiceClient.from_settings(
        test_settings,
        transport=fake_service.transport,
        sleep=recording_sleep,
    )
    yield client
    await client.aclose()


@pytest.fixture
def formatter():
    """Formatter in UTC with a fixed clock."""
    return OrderFormatter(timezone="UTC", clock=lambda: FIXED_NOW)


@pytest.fixture
def mock_order():
    return Order.model_validate(make_order_payload())


@pytest.fixture
def mock_orders():
    return [Order.model_validate(p) for p in make_orders_payload()]


@pytest.fixture
def mock_daily_summary(mock_orders):
    return DailySummary(
        date="2025-11-06",
        driver_id=MOCK_DRIVER["id"],
        driver_name=MOCK_DRIVER["name"],
        total_orders=3,
        completed_orders=1,
        pending_orders=2,
        urgent_orders=1,
        orders=mock_orders,
    )


@pytest.fixture
def test_client(test_settings, fake_service, recording_sleep, formatter):
    """Create FastAPI test client wired to the fake backend.

    The lifespan runs on enter and closes the order client on exit.
    """
    order_client = OrderServiceClient.from_settings(
        test_settings,
        transport=fake_service.transport,
        sleep=recording_sleep,
    )
    app = create_app(test_settings, order_client=order_client)

    # Override dependencies
    app.dependency_overrides[get_order_formatter] = lambda: formatter

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()
