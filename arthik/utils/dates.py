import math
from datetime import datetime, timezone
from typing import Optional

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ceil_days(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up and floored at 0."""
    delta = (as_utc(end) - as_utc(start)).total_seconds()
    return max(0, math.ceil(delta / SECONDS_PER_DAY))
