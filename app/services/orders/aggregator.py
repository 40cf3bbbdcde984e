"""Daily summary aggregation over a driver's orders."""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from app.services.orders.models import (
    DailySummary,
    DriverInfo,
    Order,
    OrderPriority,
    OrderStatus,
)


@dataclass(frozen=True)
class OrderCounts:
    """Order counts for one driver/day."""

    total: int
    urgent: int
    completed: int
    pending: int


def count_orders(orders: Sequence[Order]) -> OrderCounts:
    """
    Count orders by priority and status.

    Only delivered orders are completed and only pending orders are
    pending; every other status counts toward the total alone.
    """
    return OrderCounts(
        total=len(orders),
        urgent=sum(1 for o in orders if o.priority == OrderPriority.URGENT),
        completed=sum(1 for o in orders if o.status == OrderStatus.DELIVERED),
        pending=sum(1 for o in orders if o.status == OrderStatus.PENDING),
    )


def region_counts(orders: Sequence[Order]) -> Dict[str, int]:
    """Orders per neighborhood, in order of first appearance."""
    counts: Dict[str, int] = {}
    for order in orders:
        region = order.address.neighborhood
        counts[region] = counts.get(region, 0) + 1
    return counts


def top_regions(orders: Sequence[Order], limit: int = 5) -> List[Tuple[str, int]]:
    """Busiest neighborhoods first; ties keep first-appearance order."""
    ranked = sorted(region_counts(orders).items(), key=lambda item: -item[1])
    return ranked[:limit]


def sort_by_delivery_window(orders: Sequence[Order]) -> List[Order]:
    return sorted(orders, key=lambda o: o.delivery_window.start)


def delivery_window_bounds(orders: Sequence[Order]) -> Optional[Tuple[Order, Order]]:
    """Orders with the earliest and latest delivery window start."""
    if not orders:
        return None
    ordered = sort_by_delivery_window(orders)
    return ordered[0], ordered[-1]


def build_daily_summary(
    driver: DriverInfo, orders: Sequence[Order], day: date
) -> DailySummary:
    """Build the daily summary for a driver from their orders."""
    counts = count_orders(orders)
    return DailySummary(
        date=day,
        driver_id=driver.id,
        driver_name=driver.name,
        total_orders=counts.total,
        completed_orders=counts.completed,
        pending_orders=counts.pending,
        urgent_orders=counts.urgent,
        orders=list(orders),
    )
