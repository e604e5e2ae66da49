"""Time utilities for consistent timezone handling."""

from datetime import UTC, datetime


def utcnow_naive() -> datetime:
    """
    Get current UTC time as a naive datetime (no timezone info).

    Used as the default for DateTime columns declared without
    timezone=True, replacing the deprecated datetime.utcnow().

    Example:
        >>> now = utcnow_naive()
        >>> now.tzinfo is None
        True
    """
    return datetime.now(UTC).replace(tzinfo=None)
