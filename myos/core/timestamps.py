"""
Timestamp helpers.

Every persisted timestamp is an ISO-8601 UTC string with millisecond
precision and a ``Z`` suffix, so values written by any device compare
correctly once parsed.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Optional

from myos.core.exceptions import ValidationError

Clock = Callable[[], datetime]

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Render an aware (or naive, assumed UTC) datetime as ``...T..:..:..sssZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Raises:
        ValueError: if the value is not a datetime or ISO-8601 string
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not a timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_timestamp_or_none(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        return None


def stamp(previous: Any = None, clock: Clock = utcnow) -> str:
    """
    Produce a new ``updated_at`` value.

    The result never sorts before ``previous`` so ``updated_at`` stays
    non-decreasing for a record even if the wall clock steps backwards.
    """
    now = clock()
    earlier = parse_timestamp_or_none(previous)
    if earlier is None:
        return to_iso(now)
    now = max(now, earlier)
    # Rendering truncates to milliseconds; round up past a finer-grained previous value
    if parse_timestamp(to_iso(now)) < earlier:
        now = now.replace(microsecond=now.microsecond - now.microsecond % 1000) + timedelta(milliseconds=1)
    return to_iso(now)


def local_date(now: Optional[datetime] = None) -> str:
    """Calendar date (``YYYY-MM-DD``) in the device's local timezone."""
    current = now.astimezone() if now is not None else datetime.now().astimezone()
    return current.date().isoformat()


def parse_local_date(value: Any, field: str = "date") -> date:
    """Validate a ``YYYY-MM-DD`` string and return it as a date."""
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValidationError("Date must be in YYYY-MM-DD format", field=field)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid calendar date: {value}", field=field)
