from datetime import datetime, timedelta, timezone

from myos.core.timestamps import parse_timestamp, stamp

from conftest import NOW, FrozenClock


class TestStamp:
    def test_uses_clock(self):
        assert stamp("2024-06-15T11:00:00.000Z", FrozenClock()) == "2024-06-15T12:00:00.000Z"

    def test_clock_behind_previous_keeps_previous(self):
        clock = FrozenClock(NOW - timedelta(hours=1))
        assert stamp("2024-06-15T12:00:00.000Z", clock) == "2024-06-15T12:00:00.000Z"

    def test_microsecond_previous_is_not_undercut(self):
        previous = "2024-06-15T12:00:00.999700+00:00"
        clock = FrozenClock(datetime(2024, 6, 15, 11, 0, tzinfo=timezone.utc))
        result = stamp(previous, clock)
        assert result == "2024-06-15T12:00:01.000Z"
        assert parse_timestamp(result) >= parse_timestamp(previous)

    def test_clock_within_same_millisecond_rounds_up(self):
        previous = "2024-06-15T12:00:00.999700Z"
        clock = FrozenClock(datetime(2024, 6, 15, 12, 0, 0, 999800, tzinfo=timezone.utc))
        assert stamp(previous, clock) == "2024-06-15T12:00:01.000Z"

    def test_unparseable_previous_ignored(self):
        assert stamp("garbage", FrozenClock()) == "2024-06-15T12:00:00.000Z"
