"""FastAPI dependencies."""
from fastapi import Request

from app.core.config import Settings
from app.services.orders.client import OrderServiceClient
from app.services.messaging.formatter import OrderFormatter


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was built with."""
    return request.app.state.settings


def get_order_client(request: Request) -> OrderServiceClient:
    """Get the shared order service client."""
    return request.app.state.order_client


def get_order_formatter(request: Request) -> OrderFormatter:
    """Get a message formatter for the configured timezone."""
    return OrderFormatter(timezone=request.app.state.settings.timezone)
