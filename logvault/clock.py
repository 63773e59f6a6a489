"""Clock providers — injectable "now" functions for record timestamps."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime):
    """Return a clock that always reports `moment`. Used by tests and replays."""
    return lambda: moment
