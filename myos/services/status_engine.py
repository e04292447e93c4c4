"""
Status / due-date engine for recurring check-ins.

Pure, deterministic functions: given a check-in's fields and the current
time they derive the next due date and a three-level severity. No I/O.

Calendar arithmetic is field based, not fixed-duration: adding one month
moves the month field and lets an out-of-range day roll forward into the
following month (Jan 31 + 1 month is Mar 3 in a common year). Because of
that, ``month`` offsets do not round-trip at month ends; ``day`` and
``week`` always do, and ``year`` does except from Feb 29.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable, List, Optional

from myos.core.exceptions import ValidationError
from myos.core.timestamps import parse_timestamp_or_none, utcnow


class DurationUnit(str, Enum):
    """Closed set of calendar units for frequencies and thresholds."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: Any, field: str = "unit") -> "DurationUnit":
        """Boundary validation: anything outside the four units is rejected."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(u.value for u in cls)
            raise ValidationError(f"Unit must be one of: {allowed}", field=field)


class Severity(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.RED: 0, Severity.YELLOW: 1, Severity.GREEN: 2}

DEFAULT_FREQUENCY_VALUE = 1
DEFAULT_FREQUENCY_UNIT = DurationUnit.DAY


@dataclass(frozen=True)
class CheckinStatus:
    """Everything the UI needs to render a check-in's state."""
    severity: Severity
    anchor: datetime
    due_at: datetime
    yellow_at: datetime
    red_at: datetime


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _roll_forward(when: datetime, year: int, month: int) -> datetime:
    first_of_month = when.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=when.day - 1)


def add_calendar_offset(when: datetime, value: int, unit: DurationUnit) -> datetime:
    """Add ``value`` calendar units to ``when``. Negative values go back in time."""
    if unit is DurationUnit.DAY:
        return when + timedelta(days=value)
    if unit is DurationUnit.WEEK:
        return when + timedelta(days=value * 7)
    if unit is DurationUnit.MONTH:
        months = when.month - 1 + value
        return _roll_forward(when, when.year + months // 12, months % 12 + 1)
    # DurationUnit.YEAR
    return _roll_forward(when, when.year + value, when.month)


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _unit_or_default(value: Any, default: DurationUnit) -> DurationUnit:
    try:
        return DurationUnit.parse(value)
    except ValidationError:
        return default


def frequency_of(item: Any) -> tuple:
    """Frequency of a stored check-in, falling back to one day when absent."""
    value = _int_or_none(_field(item, "frequency_value"))
    if value is None or value < 1:
        value = DEFAULT_FREQUENCY_VALUE
    unit = _unit_or_default(_field(item, "frequency_unit"), DEFAULT_FREQUENCY_UNIT)
    return value, unit


def _threshold_of(item: Any, prefix: str) -> tuple:
    value = _int_or_none(_field(item, f"{prefix}_value"))
    unit = _unit_or_default(_field(item, f"{prefix}_unit"), DurationUnit.DAY)
    return (value if value is not None else 0), unit


def anchor_of(item: Any) -> datetime:
    """Most recent check-in, else the first due date, else the creation time."""
    for name in ("last_checkin_at", "first_due_at", "created_at"):
        parsed = parse_timestamp_or_none(_field(item, name))
        if parsed is not None:
            return parsed
    raise ValidationError("Check-in has no anchor timestamp", field="created_at")


def next_due(item: Any) -> datetime:
    value, unit = frequency_of(item)
    return add_calendar_offset(anchor_of(item), value, unit)


def evaluate(item: Any, now: Optional[datetime] = None) -> CheckinStatus:
    now = now or utcnow()
    anchor = anchor_of(item)
    freq_value, freq_unit = frequency_of(item)
    due_at = add_calendar_offset(anchor, freq_value, freq_unit)

    yellow_value, yellow_unit = _threshold_of(item, "yellow")
    red_value, red_unit = _threshold_of(item, "red")
    yellow_at = add_calendar_offset(due_at, yellow_value, yellow_unit)
    red_at = add_calendar_offset(due_at, red_value, red_unit)

    if now >= red_at:
        level = Severity.RED
    elif now >= yellow_at:
        level = Severity.YELLOW
    else:
        level = Severity.GREEN

    return CheckinStatus(
        severity=level,
        anchor=anchor,
        due_at=due_at,
        yellow_at=yellow_at,
        red_at=red_at,
    )


def severity(item: Any, now: Optional[datetime] = None) -> Severity:
    return evaluate(item, now).severity


def sort_checkins(
    items: Iterable[Any],
    now: Optional[datetime] = None,
    newest_anchor_first: bool = False,
) -> List[Any]:
    """
    Order check-ins by severity band (RED, YELLOW, GREEN), then by anchor.

    List views keep the oldest anchor first inside a band; the today
    dashboard passes ``newest_anchor_first=True``.
    """
    now = now or utcnow()

    def sort_key(item: Any):
        status = evaluate(item, now)
        stamp = status.anchor.timestamp()
        return status.severity.rank, (-stamp if newest_anchor_first else stamp)

    return sorted(items, key=sort_key)


def days_since_anchor(item: Any, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    return math.floor((now - anchor_of(item)).total_seconds() / 86400)


# ===========================
# Tasks
# ===========================

def days_open(task: Any, now: Optional[datetime] = None) -> int:
    """Whole days a task has been open; completed tasks report 0."""
    if _field(task, "status") == "DONE":
        return 0
    created = parse_timestamp_or_none(_field(task, "created_at"))
    if created is None:
        return 0
    now = now or utcnow()
    return max(0, math.floor((now - created).total_seconds() / 86400))


def is_overdue(task: Any, now: Optional[datetime] = None) -> bool:
    if _field(task, "status") == "DONE":
        return False
    due = parse_timestamp_or_none(_field(task, "due_at"))
    if due is None:
        return False
    return due < (now or utcnow())
