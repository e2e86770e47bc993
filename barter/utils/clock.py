from datetime import datetime, UTC
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC 'now' as stored in TIMESTAMP columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a client-supplied cursor to the stored representation."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
