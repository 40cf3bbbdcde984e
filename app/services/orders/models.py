"""Order domain models.

The order service speaks camelCase JSON. Models accept both the wire
alias and the Python attribute name, and serialize with the alias.
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model mapping snake_case attributes to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderStatus(str, Enum):
    """Lifecycle states owned by the order service."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    def __str__(self) -> str:
        return self.value


class OrderPriority(str, Enum):
    """Delivery priority buckets."""

    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    def __str__(self) -> str:
        return self.value


# Statuses a driver still has to act on
ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.IN_TRANSIT)


class Coordinates(CamelModel):
    latitude: float
    longitude: float


class Address(CamelModel):
    """Delivery address."""

    street: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    city: str
    state: str = Field(min_length=2, max_length=2)
    zipcode: str
    coordinates: Optional[Coordinates] = None


class Customer(CamelModel):
    """Order recipient."""

    id: str
    name: str
    phone: str
    email: Optional[str] = None
    notes: Optional[str] = None


class OrderItem(CamelModel):
    """Line item of an order."""

    id: str
    name: str
    quantity: int = Field(gt=0)
    price: float = Field(gt=0)
    sku: Optional[str] = None

    @property
    def subtotal(self) -> float:
        return self.quantity * self.price


class DeliveryWindow(CamelModel):
    """Time range the customer expects the delivery in."""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self) -> "DeliveryWindow":
        if self.start > self.end:
            raise ValueError("delivery window start must not be after its end")
        return self


class Order(CamelModel):
    """Order as returned by the order service."""

    id: str
    driver_id: str
    customer: Customer
    address: Address
    items: List[OrderItem] = []
    status: OrderStatus
    priority: OrderPriority
    total_value: float = Field(gt=0)
    delivery_window: DeliveryWindow
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def items_total(self) -> float:
        """Sum of item subtotals."""
        return sum(item.subtotal for item in self.items)


class DriverInfo(CamelModel):
    """Driver profile fields used by the messages."""

    id: str
    name: str
    phone: str


class DailySummary(CamelModel):
    """Aggregate view of one driver's orders for one calendar date."""

    date: date
    driver_id: str
    driver_name: str
    total_orders: int = Field(ge=0)
    completed_orders: int = Field(ge=0)
    pending_orders: int = Field(ge=0)
    urgent_orders: int = Field(ge=0)
    orders: List[Order] = []

    @model_validator(mode="after")
    def check_counts(self) -> "DailySummary":
        if self.completed_orders + self.pending_orders > self.total_orders:
            raise ValueError("completed and pending orders exceed total orders")
        return self
