import pytest
from datetime import datetime, timedelta, timezone

from myos.core.exceptions import ValidationError
from myos.core.timestamps import to_iso
from myos.services import status_engine
from myos.services.status_engine import DurationUnit, Severity, add_calendar_offset

from conftest import NOW


def make_checkin(**fields):
    checkin = {
        "id": "c1",
        "title": "Call mum",
        "frequency_value": 1,
        "frequency_unit": "week",
        "yellow_value": 1,
        "yellow_unit": "day",
        "red_value": 3,
        "red_unit": "day",
        "created_at": to_iso(NOW - timedelta(days=30)),
        "first_due_at": None,
        "last_checkin_at": None,
    }
    checkin.update(fields)
    return checkin


class TestCalendarOffsets:
    @pytest.mark.parametrize("unit", [DurationUnit.DAY, DurationUnit.WEEK, DurationUnit.YEAR])
    def test_round_trip(self, unit):
        start = datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc)
        for value in (1, 2, 5):
            forward = add_calendar_offset(start, value, unit)
            assert add_calendar_offset(forward, -value, unit) == start

    def test_week_is_seven_days(self):
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert add_calendar_offset(start, 2, DurationUnit.WEEK) == start + timedelta(days=14)

    def test_month_keeps_day_of_month(self):
        start = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)
        assert add_calendar_offset(start, 1, DurationUnit.MONTH) == datetime(2024, 2, 15, 8, 0, tzinfo=timezone.utc)
        assert add_calendar_offset(start, 12, DurationUnit.MONTH) == datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)

    def test_month_end_rolls_forward(self):
        # Feb 31 does not exist: the extra days spill into March.
        start = datetime(2023, 1, 31, tzinfo=timezone.utc)
        assert add_calendar_offset(start, 1, DurationUnit.MONTH) == datetime(2023, 3, 3, tzinfo=timezone.utc)

    def test_month_end_does_not_round_trip(self):
        start = datetime(2023, 1, 31, tzinfo=timezone.utc)
        back = add_calendar_offset(add_calendar_offset(start, 1, DurationUnit.MONTH), -1, DurationUnit.MONTH)
        assert back == datetime(2023, 2, 3, tzinfo=timezone.utc)

    def test_leap_day_plus_one_year(self):
        start = datetime(2024, 2, 29, tzinfo=timezone.utc)
        assert add_calendar_offset(start, 1, DurationUnit.YEAR) == datetime(2025, 3, 1, tzinfo=timezone.utc)

    def test_negative_months_cross_year(self):
        start = datetime(2024, 2, 10, tzinfo=timezone.utc)
        assert add_calendar_offset(start, -3, DurationUnit.MONTH) == datetime(2023, 11, 10, tzinfo=timezone.utc)


class TestDurationUnit:
    def test_parse_is_case_insensitive(self):
        assert DurationUnit.parse("WEEK") is DurationUnit.WEEK

    def test_parse_rejects_unknown_unit(self):
        with pytest.raises(ValidationError):
            DurationUnit.parse("fortnight")


class TestSeverity:
    def test_checked_in_ten_days_ago_is_red(self):
        checkin = make_checkin(last_checkin_at=to_iso(NOW - timedelta(days=10)))
        state = status_engine.evaluate(checkin, NOW)
        assert state.due_at == NOW - timedelta(days=3)
        assert state.red_at == NOW
        assert state.severity == Severity.RED

    def test_never_checked_in_first_due_ten_days_ago_is_red(self):
        checkin = make_checkin(first_due_at=to_iso(NOW - timedelta(days=10)), last_checkin_at=None)
        state = status_engine.evaluate(checkin, NOW)
        assert state.due_at == NOW - timedelta(days=3)
        assert state.yellow_at == NOW - timedelta(days=2)
        assert state.red_at == NOW
        assert state.severity == Severity.RED

    def test_bands(self):
        anchor = NOW - timedelta(days=7)
        checkin = make_checkin(last_checkin_at=to_iso(anchor))
        # due exactly now: past due but not yet yellow
        assert status_engine.severity(checkin, NOW) == Severity.GREEN
        assert status_engine.severity(checkin, NOW + timedelta(days=1)) == Severity.YELLOW
        assert status_engine.severity(checkin, NOW + timedelta(days=2, hours=23)) == Severity.YELLOW
        assert status_engine.severity(checkin, NOW + timedelta(days=3)) == Severity.RED

    def test_sweep_is_monotonic(self):
        checkin = make_checkin(last_checkin_at=to_iso(NOW))
        previous_rank = Severity.GREEN.rank
        for hours in range(0, 24 * 21, 5):
            rank = status_engine.severity(checkin, NOW + timedelta(hours=hours)).rank
            assert rank <= previous_rank
            previous_rank = rank
        assert previous_rank == Severity.RED.rank

    def test_missing_frequency_defaults_to_one_day(self):
        checkin = make_checkin(last_checkin_at=to_iso(NOW))
        del checkin["frequency_value"], checkin["frequency_unit"]
        assert status_engine.next_due(checkin) == NOW + timedelta(days=1)

    def test_missing_thresholds_turn_red_at_due(self):
        checkin = make_checkin(last_checkin_at=to_iso(NOW))
        for key in ("yellow_value", "yellow_unit", "red_value", "red_unit"):
            del checkin[key]
        due = NOW + timedelta(weeks=1)
        assert status_engine.severity(checkin, due - timedelta(seconds=1)) == Severity.GREEN
        assert status_engine.severity(checkin, due) == Severity.RED

    def test_anchor_precedence(self):
        checkin = make_checkin(
            first_due_at=to_iso(NOW - timedelta(days=2)),
            created_at=to_iso(NOW - timedelta(days=20)),
        )
        assert status_engine.anchor_of(checkin) == NOW - timedelta(days=2)
        checkin["last_checkin_at"] = to_iso(NOW - timedelta(days=1))
        assert status_engine.anchor_of(checkin) == NOW - timedelta(days=1)

    def test_no_anchor_is_rejected(self):
        with pytest.raises(ValidationError):
            status_engine.anchor_of({"id": "x"})


class TestOrdering:
    def test_sorted_by_band_then_anchor(self):
        red_old = make_checkin(id="red-old", last_checkin_at=to_iso(NOW - timedelta(days=20)))
        red_new = make_checkin(id="red-new", last_checkin_at=to_iso(NOW - timedelta(days=11)))
        yellow = make_checkin(id="yellow", last_checkin_at=to_iso(NOW - timedelta(days=8, hours=12)))
        green = make_checkin(id="green", last_checkin_at=to_iso(NOW))

        ordered = status_engine.sort_checkins([green, red_new, yellow, red_old], NOW)
        assert [c["id"] for c in ordered] == ["red-old", "red-new", "yellow", "green"]

        ordered = status_engine.sort_checkins([green, red_old, yellow, red_new], NOW, newest_anchor_first=True)
        assert [c["id"] for c in ordered] == ["red-new", "red-old", "yellow", "green"]

    def test_days_since_anchor(self):
        checkin = make_checkin(last_checkin_at=to_iso(NOW - timedelta(days=4, hours=3)))
        assert status_engine.days_since_anchor(checkin, NOW) == 4


class TestTaskHelpers:
    def test_days_open(self):
        task = {"status": "OPEN", "created_at": to_iso(NOW - timedelta(days=3, hours=1))}
        assert status_engine.days_open(task, NOW) == 3
        task["status"] = "DONE"
        assert status_engine.days_open(task, NOW) == 0

    def test_is_overdue(self):
        task = {"status": "OPEN", "due_at": to_iso(NOW - timedelta(minutes=1))}
        assert status_engine.is_overdue(task, NOW)
        task["status"] = "DONE"
        assert not status_engine.is_overdue(task, NOW)
        assert not status_engine.is_overdue({"status": "OPEN", "due_at": None}, NOW)
