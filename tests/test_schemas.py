import pytest
from pydantic import ValidationError as PydanticValidationError

from myos.core.exceptions import ValidationError
from myos.schemas.checkin import Checkin, CheckinCreate
from myos.schemas.common import normalize_labels, validate_model
from myos.schemas.habit import HabitLogSet
from myos.schemas.sync import RemoteConfigUpdate, SyncResult, SyncOutcome
from myos.schemas.task import TaskCreate


class TestLabels:
    def test_set_semantics(self):
        assert normalize_labels([" work ", "home", "work", ""]) == ["work", "home"]

    def test_none(self):
        assert normalize_labels(None) == []


class TestCheckinSchemas:
    def test_create_defaults(self):
        checkin = CheckinCreate(title="Call mum")
        assert checkin.frequency_value == 1
        assert checkin.frequency_unit == "week"
        assert checkin.red_value == 3

    def test_zero_frequency_rejected(self):
        with pytest.raises(PydanticValidationError):
            CheckinCreate(title="x", frequency_value=0)

    def test_unknown_unit_rejected(self):
        with pytest.raises(PydanticValidationError):
            CheckinCreate(title="x", frequency_unit="decade")

    def test_stored_record_keeps_unknown_fields(self):
        checkin = Checkin(
            id="c1",
            title="x",
            created_at="2024-06-15T12:00:00Z",
            updated_at="2024-06-15T12:00:00+00:00",
            colour="blue",
        )
        record = checkin.to_record()
        assert record["colour"] == "blue"
        assert record["created_at"] == "2024-06-15T12:00:00.000Z"
        assert record["updated_at"] == "2024-06-15T12:00:00.000Z"

    def test_bad_timestamp_rejected(self):
        with pytest.raises(PydanticValidationError):
            Checkin(id="c1", title="x", created_at="yesterday", updated_at="2024-06-15T12:00:00Z")


class TestValidateModel:
    def test_converts_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_model(TaskCreate, {"title": ""})
        assert exc_info.value.field == "title"

    def test_passes_instances_through(self):
        task = TaskCreate(title="a")
        assert validate_model(TaskCreate, task) is task


class TestHabitLogSet:
    def test_clear(self):
        assert HabitLogSet(date="2024-06-15").status is None

    def test_date_format(self):
        with pytest.raises(PydanticValidationError):
            HabitLogSet(date="2024-6-15", status="SUCCESS")


class TestSyncSchemas:
    def test_remote_url_normalised(self):
        config = RemoteConfigUpdate(supabase_url=" https://abc.supabase.co/ ", supabase_key="k")
        assert config.supabase_url == "https://abc.supabase.co"

    def test_remote_url_scheme_required(self):
        with pytest.raises(PydanticValidationError):
            RemoteConfigUpdate(supabase_url="abc.supabase.co", supabase_key="k")

    def test_result_ok(self):
        assert SyncResult(outcome=SyncOutcome.OK).ok
        assert not SyncResult(outcome=SyncOutcome.ERROR, error="x").ok
