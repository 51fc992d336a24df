"""UTC timestamps. Every stored column is TIMESTAMPTZ; naive datetimes never enter the app."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_or_none(value: datetime | None) -> str | None:
    """ISO-8601 for API payloads; processed_at and friends stay null until set."""
    return value.isoformat() if value is not None else None
