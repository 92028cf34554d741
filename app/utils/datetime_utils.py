"""
Timezone helpers shared by models and services.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    SQLite returns naive values for timezone-aware columns, so comparisons
    against utc_now() go through this first.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 string for an optional datetime, normalized to UTC."""
    aware = ensure_aware(value)
    return aware.isoformat() if aware else None
