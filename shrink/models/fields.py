"""Column helpers shared by the table models."""

from datetime import datetime, timezone

# Column limits for request-derived click data
IP_MAX_LENGTH = 45  # Support both IPv4 and IPv6 addresses
USER_AGENT_MAX_LENGTH = 1024
REFERRER_MAX_LENGTH = 2048
LABEL_MAX_LENGTH = 255


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values read back from stores without offsets (SQLite)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
