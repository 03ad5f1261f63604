"""
Wall-clock time helpers.

Pending operations, reconciliation staleness and request cache-busting all
read the clock through these functions so tests can patch a single place.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def epoch_millis(ts: Optional[datetime] = None) -> int:
    """
    Convert a datetime to epoch milliseconds.

    Args:
        ts: Timestamp to convert, defaults to now

    Returns:
        Milliseconds since the Unix epoch
    """
    if ts is None:
        ts = utc_now()
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(ts.timestamp() * 1000)


def seconds_since(ts: Optional[datetime], now: Optional[datetime] = None) -> Optional[float]:
    """
    Seconds elapsed since ``ts``.

    Returns:
        Elapsed seconds, or None when ``ts`` is None
    """
    if ts is None:
        return None
    if now is None:
        now = utc_now()
    return (now - ts).total_seconds()
