"""Column codecs shared by the SQLite stores."""

from datetime import datetime

from src.core.common import ensure_utc


def to_db(value: datetime | None) -> str | None:
    """Serialize to a fixed-width UTC ISO string.

    Fixed width keeps ``ORDER BY`` and ``<``/``>`` on the text column in
    chronological order.
    """
    if value is None:
        return None
    return ensure_utc(value).isoformat(timespec="microseconds")


def from_db(value: str | None) -> datetime | None:
    """Parse a stored timestamp, tolerating legacy or malformed values."""
    if not value:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except (ValueError, TypeError):
        return None


def from_db_required(value: str | None, fallback: datetime) -> datetime:
    parsed = from_db(value)
    return parsed if parsed is not None else fallback
