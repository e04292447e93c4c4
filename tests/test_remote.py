import json
import httpx
import pytest

from myos.core.exceptions import RemoteRejected, RemoteUnreachable
from myos.services.remote import SupabaseRemote, load_identity, load_remote_config

from conftest import run


def make_remote(handler):
    return SupabaseRemote(
        "https://example.supabase.co/",
        "anon-key",
        access_token="user-token",
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


class TestSupabaseRemote:
    def test_upsert_request(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = request.url
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(201)

        records = [{"id": "t1", "title": "a"}]
        run(make_remote(handler).upsert("tasks", records))

        assert seen["method"] == "POST"
        assert seen["url"].path == "/rest/v1/tasks"
        assert seen["url"].params["on_conflict"] == "id"
        assert "resolution=merge-duplicates" in seen["headers"]["prefer"]
        assert seen["headers"]["apikey"] == "anon-key"
        assert seen["headers"]["authorization"] == "Bearer user-token"
        assert seen["body"] == records

    def test_empty_upsert_sends_nothing(self):
        def handler(request):
            raise AssertionError("no request expected")

        run(make_remote(handler).upsert("tasks", []))

    def test_fetch_all(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.params["select"] == "*"
            return httpx.Response(200, json=[{"id": "h1"}, {"id": "h2"}])

        rows = run(make_remote(handler).fetch_all("habits"))
        assert [r["id"] for r in rows] == ["h1", "h2"]

    def test_http_error_is_rejected(self):
        def handler(request):
            return httpx.Response(401, json={"message": "JWT expired"})

        with pytest.raises(RemoteRejected) as exc_info:
            run(make_remote(handler).fetch_all("habits"))
        assert exc_info.value.status_code == 401

    def test_timeout_is_unreachable(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RemoteUnreachable):
            run(make_remote(handler).fetch_all("habits"))

    def test_connection_error_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteUnreachable):
            run(make_remote(handler).upsert("tasks", [{"id": "t1"}]))

    def test_non_list_payload_is_rejected(self):
        def handler(request):
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(RemoteRejected):
            run(make_remote(handler).fetch_all("habits"))


class TestRemoteConfig:
    def test_incomplete_config(self, store):
        run(store.set_config("supabase_url", "https://example.supabase.co"))
        assert run(load_remote_config(store)) is None

    def test_config_and_identity(self, store):
        run(store.set_config("supabase_url", "https://example.supabase.co/"))
        run(store.set_config("supabase_key", "anon"))
        run(store.set_config("auth_session", {"user_id": "u1", "access_token": "tok"}))
        config = run(load_remote_config(store))
        assert config.url == "https://example.supabase.co"
        identity = run(load_identity(store))
        assert identity.user_id == "u1"

    def test_missing_identity(self, store):
        run(store.set_config("auth_session", {"user_id": "u1"}))
        assert run(load_identity(store)) is None
