"""Locale helpers for driver-facing messages (Brazilian conventions)."""
import re
from datetime import date, datetime, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from app.services.orders.models import Address

_NON_DIGITS = re.compile(r"\D")

STATUS_LABELS = {
    "pending": "Pending",
    "confirmed": "Confirmed",
    "in_transit": "In Transit",
    "delivered": "Delivered",
    "failed": "Failed",
    "cancelled": "Cancelled",
    "returned": "Returned",
}

STATUS_EMOJIS = {
    "pending": "⏳",
    "confirmed": "✅",
    "in_transit": "🚚",
    "delivered": "📦",
    "failed": "❌",
    "cancelled": "🚫",
    "returned": "↩️",
}

PRIORITY_EMOJIS = {
    "normal": "🟢",
    "high": "🟡",
    "urgent": "🔴",
}

PRIORITY_LABELS = {
    "normal": "NORMAL",
    "high": "HIGH PRIORITY",
    "urgent": "URGENT",
}


def only_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def get_greeting(hour: int) -> str:
    """Greeting for a local hour of day."""
    if 5 <= hour < 12:
        return "Good Morning"
    elif 12 <= hour < 18:
        return "Good Afternoon"
    return "Good Evening"


def format_currency_br(value: float) -> str:
    """Format a value as Brazilian reais, e.g. R$ 7.150,00."""
    # Half-up on the decimal text, so 0.125 renders as 0,13
    cents = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    grouped = f"{cents:,.2f}"
    # Swap the separators: 7,150.00 -> 7.150,00
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {localized}"


def format_phone_br(phone: str) -> str:
    """Format a 10 or 11 digit phone as (DD) DDDD-DDDD / (DD) DDDDD-DDDD."""
    cleaned = only_digits(phone)
    if len(cleaned) == 11:
        return f"({cleaned[:2]}) {cleaned[2:7]}-{cleaned[7:]}"
    if len(cleaned) == 10:
        return f"({cleaned[:2]}) {cleaned[2:6]}-{cleaned[6:]}"
    return phone


def format_cep(cep: str) -> str:
    """Format an 8 digit postal code as DDDDD-DDD."""
    cleaned = only_digits(cep)
    if len(cleaned) == 8:
        return f"{cleaned[:5]}-{cleaned[5:]}"
    return cep


def format_date_br(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_time_br(value: datetime, tz: tzinfo) -> str:
    """24-hour HH:MM in the given zone. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).strftime("%H:%M")


def format_address_short(address: Address) -> str:
    return f"{address.street}, {address.number} - {address.neighborhood}"


def translate_status(status: str) -> str:
    """Human label for a status; unknown values are returned as-is."""
    return STATUS_LABELS.get(str(status), str(status))


def status_emoji(status: str) -> str:
    return STATUS_EMOJIS.get(str(status), "❓")


def priority_emoji(priority: str) -> str:
    return PRIORITY_EMOJIS.get(str(priority), "⚪")


def priority_label(priority: str) -> str:
    return PRIORITY_LABELS.get(str(priority), "NORMAL")


def plural(count: int, singular: str, many: str) -> str:
    return f"{count} {singular if count == 1 else many}"
