"""Driver-facing message rendering."""
from datetime import datetime
from typing import Callable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from app.services.orders.aggregator import delivery_window_bounds, top_regions
from app.services.orders.models import DailySummary, Order, OrderPriority
from app.services.messaging.formatting import (
    format_address_short,
    format_cep,
    format_currency_br,
    format_date_br,
    format_phone_br,
    format_time_br,
    get_greeting,
    plural,
    priority_emoji,
    priority_label,
    status_emoji,
    translate_status,
)

DIVIDER = "━━━━━━━━━━━━━━━━━━"
MAX_REGIONS = 5
MAX_NORMAL_ORDERS = 10


class OrderFormatter:
    """
    Renders orders and summaries as chat messages.

    Output depends only on the arguments, except for the clock, which
    drives the greeting and the confirmation time.
    """

    def __init__(
        self,
        timezone: str = "America/Sao_Paulo",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.tz = ZoneInfo(timezone)
        self._clock = clock or (lambda: datetime.now(self.tz))

    def now(self) -> datetime:
        return self._clock().astimezone(self.tz)

    def greeting(self) -> str:
        return get_greeting(self.now().hour)

    def time(self, value: datetime) -> str:
        return format_time_br(value, self.tz)

    def format_daily_summary(self, summary: DailySummary) -> str:
        """Morning summary of a driver's day."""
        greeting = self.greeting()
        if summary.total_orders == 0 or not summary.orders:
            return (
                f"{greeting}, {summary.driver_name}! 😊\n\n"
                f"📅 No deliveries scheduled for today.\n\n"
                f"Enjoy your day! 🎉"
            )

        first, last = delivery_window_bounds(summary.orders)
        total = summary.total_orders
        urgent = summary.urgent_orders

        lines = [
            f"{greeting}, {summary.driver_name}! 🌅",
            "",
            f"📦 *Today's Summary* ({format_date_br(summary.date)}):",
            DIVIDER,
            "",
            f"Total: *{plural(total, 'delivery', 'deliveries')}*",
            "",
        ]
        if urgent > 0:
            lines += [f"🚨 *ATTENTION*: {urgent} urgent {'delivery' if urgent == 1 else 'deliveries'}!", ""]

        lines.append("📍 *By region*:")
        for region, count in top_regions(summary.orders, MAX_REGIONS):
            lines.append(f"• {region}: {plural(count, 'delivery', 'deliveries')}")

        lines += [
            "",
            "⏰ *Schedule*:",
            f"First: {self.time(first.delivery_window.start)} - {format_address_short(first.address)}",
            f"Last: {self.time(last.delivery_window.start)} - {format_address_short(last.address)}",
            "",
            DIVIDER,
            "💪 Good luck with your deliveries!",
            "",
            '💬 Type *"List"* to see all orders',
            '💬 Type *"Order #123"* for details',
        ]
        return "\n".join(lines)

    def _order_lines(self, orders: Sequence[Order]) -> List[str]:
        lines = []
        for order in orders:
            lines.append(f"• #{order.id} - {format_address_short(order.address)}")
            lines.append(f"  ⏰ {self.time(order.delivery_window.start)}")
        return lines

    def format_order_list(self, orders: Sequence[Order]) -> str:
        """All orders grouped by priority, most urgent first."""
        if not orders:
            return "📋 You have no pending orders at the moment."

        urgent = [o for o in orders if o.priority == OrderPriority.URGENT]
        high = [o for o in orders if o.priority == OrderPriority.HIGH]
        normal = [o for o in orders if o.priority == OrderPriority.NORMAL]

        lines = [f"📋 *YOUR ORDERS* ({len(orders)} total)", ""]

        if urgent:
            lines.append("🔴 *URGENT* (deliver as soon as possible)")
            lines += self._order_lines(urgent)
            lines.append("")

        if high:
            lines.append("🟡 *HIGH PRIORITY*")
            lines += self._order_lines(high)
            lines.append("")

        if normal:
            lines.append("🟢 *NORMAL*")
            lines += self._order_lines(normal[:MAX_NORMAL_ORDERS])
            if len(normal) > MAX_NORMAL_ORDERS:
                lines += ["", f"... and {len(normal) - MAX_NORMAL_ORDERS} more orders"]
            lines.append("")

        lines += [DIVIDER, '💬 Type *"Order #123"* for details']
        return "\n".join(lines)

    def format_order_details(self, order: Order) -> str:
        """Full details of one order."""
        address = order.address
        customer = order.customer

        street_line = f"{address.street}, {address.number}"
        if address.complement:
            street_line += f" - {address.complement}"

        lines = [
            f"📦 *Order #{order.id}*",
            f"{priority_emoji(order.priority)} {priority_label(order.priority)}",
            DIVIDER,
            "",
            "🏠 *ADDRESS*",
            street_line,
            f"{address.neighborhood}, {address.city} - {address.state}",
            f"ZIP: {format_cep(address.zipcode)}",
            "",
            "👤 *CUSTOMER*",
            f"Name: {customer.name}",
            f"Phone: {format_phone_br(customer.phone)}",
        ]
        if customer.notes:
            lines.append(f"⚠️ Notes: {customer.notes}")
        lines.append("")

        lines.append("📋 *ITEMS*")
        lines += [f"• {item.quantity}x {item.name}" for item in order.items]
        lines += [
            "",
            f"*Total:* {format_currency_br(order.total_value)}",
            "",
            "⏰ *SCHEDULE*",
            f"Window: {self.time(order.delivery_window.start)} - {self.time(order.delivery_window.end)}",
            f"Status: {status_emoji(order.status)} {translate_status(order.status)}",
            "",
        ]

        if order.notes:
            lines += ["📝 *NOTES*", order.notes, ""]

        lines += [
            DIVIDER,
            '✅ Confirm: Type *"Confirm"* once delivered',
            '⚠️ Issue: Type *"Issue"* to report a problem',
        ]
        return "\n".join(lines)

    def format_confirmation(self, order: Order, next_order: Optional[Order] = None) -> str:
        """Delivery confirmation, with a teaser for the next stop if any."""
        lines = [
            "✅ *CONFIRMED!*",
            "",
            f"Order #{order.id} marked as delivered",
            "",
            "📝 *Details*:",
            f"• Customer: {order.customer.name}",
            f"• Time: {self.time(self.now())}",
            "• Status: ✓ Delivered",
            "",
            DIVIDER,
            "",
        ]

        if next_order is not None:
            lines += [
                "📦 *Next delivery*:",
                f"#{next_order.id} - {format_address_short(next_order.address)}",
                f"⏰ {self.time(next_order.delivery_window.start)}",
                "",
                f'Type *"Order #{next_order.id}"* for details',
            ]
        else:
            lines += [
                "🎉 *All deliveries completed!*",
                "Great job today! 💪",
            ]
        return "\n".join(lines)

    def format_emergency_alert(self, order: Order) -> str:
        """Push alert for a newly assigned urgent order."""
        lines = [
            "🚨 *URGENT ALERT* 🚨",
            "",
            "New priority order!",
            "",
            DIVIDER,
            "",
            f"📦 *Order #{order.id}*",
            "",
            f"🏠 {format_address_short(order.address)}",
            f"{order.address.city} - {order.address.state}",
            "",
            f"👤 Customer: {order.customer.name}",
            f"📱 {format_phone_br(order.customer.phone)}",
            "",
            f"⏰ Deliver by: {self.time(order.delivery_window.end)}",
            f"💰 Amount: {format_currency_br(order.total_value)}",
            "",
        ]
        if order.notes:
            lines += [f"⚠️ *ATTENTION*: {order.notes}", ""]

        lines += [
            DIVIDER,
            "",
            f'Type *"Order #{order.id}"* for complete details',
        ]
        return "\n".join(lines)

    def format_help(self) -> str:
        return "\n".join(
            [
                "📱 *AVAILABLE COMMANDS*",
                "",
                "📊 *QUERIES*",
                '• "Summary" - Your daily summary',
                '• "List" - All orders',
                '• "Order #123" - Order details',
                "",
                "✅ *ACTIONS*",
                '• "Confirm #123" - Mark as delivered',
                '• "Issue #123" - Report a problem',
                "",
                "💡 *TIPS*",
                "• Use # before the number: #1234",
                "• You can ask naturally",
                '• Ex: "What\'s the address for order 1234?"',
                "",
                DIVIDER,
                "",
                "🤖 I'm here to help!",
                "Any questions, just ask.",
            ]
        )

    def format_error(self, message: str) -> str:
        return f"❌ *Error*\n\n{message}\n\nIf the problem persists, contact support."

    def format_not_found(self, order_id: str) -> str:
        return (
            "⚠️ *Order not found*\n\n"
            f"Order #{order_id} was not found.\n\n"
            "Check the number and try again.\n"
            'Type *"List"* to see your orders.'
        )
