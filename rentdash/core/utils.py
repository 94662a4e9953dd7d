"""Shared utilities used across the app."""
from datetime import date, datetime, timezone
from decimal import Decimal


def utc_now() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns of the notification log."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def format_amount(amount: Decimal | float | int) -> str:
    """Render a money amount without trailing zeros or exponent: 250.00 -> "250", 250.50 -> "250.5"."""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return format(value.normalize(), "f")


def format_date(value: date) -> str:
    """Day-first date used in SMS bodies: 2025-06-01 -> "01.06.2025"."""
    return value.strftime("%d.%m.%Y")


def yyyymmdd(value: date) -> str:
    return value.strftime("%Y%m%d")
