"""Clock helpers."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now, matching how pipeline timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
