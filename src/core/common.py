"""Clock and quantity helpers shared by entities and services."""

from collections.abc import Callable
from datetime import UTC, datetime

from src.config import get_settings

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def round_quantity(value: float) -> float:
    """Round a quantity to the configured precision.

    Applied after every addition, subtraction and multiplication so that
    ledger sums compare exactly against their parts.
    """
    return round(float(value), get_settings().kitchen.quantity_precision)
