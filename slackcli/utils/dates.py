"""Schedule time parsing and validation."""

import re
import time
from datetime import datetime, timezone
from typing import Optional

from .const import MAX_SCHEDULE_DAYS, MAX_SCHEDULE_SECONDS
from .errors import ValidationError


def parse_post_at(value: str) -> int:
    """
    Parse a schedule time into unix seconds.

    Supported formats:
    - Unix timestamp: 1767815267
    - ISO 8601: 2025-01-20T14:30:00 (local time), 2025-01-20T14:30:00Z,
      2025-01-20T14:30:00+02:00
    """
    value = value.strip()
    if re.match(r"^\d+$", value):
        return int(value)

    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            f"Invalid date format: '{value}'. "
            'Use ISO 8601 (e.g., "2025-01-20T14:30:00") or a Unix timestamp.'
        )
    # Naive datetimes are local time; timestamp() handles that
    return int(dt.timestamp())


def validate_post_at(post_at: int, now: Optional[int] = None) -> int:
    """Ensure ``post_at`` lies in (now, now + 120 days]."""
    if now is None:
        now = int(time.time())
    if post_at <= now:
        raise ValidationError("Scheduled time must be in the future.")
    if post_at > now + MAX_SCHEDULE_SECONDS:
        raise ValidationError(
            f"Cannot schedule messages more than {MAX_SCHEDULE_DAYS} days in the future."
        )
    return post_at


def timestamp_to_datetime(ts) -> datetime:
    """Convert a Slack timestamp (or unix seconds) to a UTC datetime."""
    try:
        return datetime.fromtimestamp(float(ts), tz=timezone.utc)
    except (TypeError, ValueError):
        return datetime.min.replace(tzinfo=timezone.utc)


def ts_key(ts) -> float:
    """Numeric sort key for Slack timestamps ("1767815267.099869")."""
    try:
        return float(ts)
    except (TypeError, ValueError):
        return 0.0


def now_ts() -> str:
    """Current time as a Slack timestamp."""
    return f"{time.time():.6f}"
