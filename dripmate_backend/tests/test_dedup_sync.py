import json
from datetime import datetime, timezone

import httpx
import pytest

from dripmate_backend.app.services.sync.backend_client import BackendSyncClient
from dripmate_backend.app.services.sync.dedup import (
    create_stable_coffee_id,
    dedupe_coffees,
    has_feedback_history_coverage,
    merge_inbound,
    normalize_coffee_record,
)

# ---------------- dedup contract ----------------

def test_normalize_adds_defaults_and_id():
    c = normalize_coffee_record({"name": "Test Coffee", "feedback": None, "feedbackHistory": None})
    assert c["id"].startswith("coffee-")
    assert c["feedback"] == {}
    assert c["feedbackHistory"] == []

def test_stable_id_seed_is_sanitized():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert create_stable_coffee_id({"name": "Test Coffee"}, 0, now=now) == "coffee-testcoffee|||2024-01-0100:00:0000:00|0"

def test_stable_id_keeps_existing_id():
    assert create_stable_coffee_id({"id": 42}) == "42"

def test_stable_id_is_deterministic_with_added_date():
    c = {"name": "A", "roaster": "R", "origin": "O", "addedDate": "2024-01-01T00:00:00.000Z"}
    assert create_stable_coffee_id(c, 3) == create_stable_coffee_id(dict(c), 3)

def test_dedupe_by_id():
    out = dedupe_coffees([
        {"id": "coffee-1", "name": "A"},
        {"id": "coffee-1", "name": "A duplicate"},
        {"id": "coffee-2", "name": "B"},
    ], "test")
    assert [c["name"] for c in out] == ["A", "B"]

def test_dedupe_by_fallback_key():
    out = dedupe_coffees([
        {"name": "A", "roaster": "R", "origin": "O", "addedDate": "2024-01-01T00:00:00.000Z"},
        {"name": " a ", "roaster": "r", "origin": "O", "addedDate": "2024-01-01T00:00:00.000Z"},
        {"name": "B", "roaster": "R2", "origin": "O2", "addedDate": "2024-01-02T00:00:00.000Z"},
    ], "test")
    assert len(out) == 2

def test_dedupe_is_idempotent():
    once = dedupe_coffees([{"name": "A", "addedDate": "d"}, {"name": "A", "addedDate": "d"}, {"id": "x"}])
    assert dedupe_coffees(once) == once

def test_dedupe_logs_removed_count(caplog):
    with caplog.at_level("WARNING", logger="dripmate.sync"):
        dedupe_coffees([{"id": "1"}, {"id": "1"}, {"id": "1"}], "unit")
    assert "removed 2 duplicate coffee entries (unit)" in caplog.text

def test_feedback_history_coverage():
    assert has_feedback_history_coverage([])
    assert has_feedback_history_coverage([{"id": "a"}, {"id": "b", "feedbackHistory": []}])
    assert not has_feedback_history_coverage([{"id": "a"}])

def test_merge_keeps_local_when_remote_looks_stripped():
    local = [{"id": "a", "feedbackHistory": [{"timestamp": "t"}]}]
    assert merge_inbound(local, [{"id": "a"}]) == local

def test_merge_takes_remote_when_complete():
    local = [{"id": "a", "feedbackHistory": []}]
    remote = [{"id": "b", "feedbackHistory": []}, {"id": "b", "feedbackHistory": []}]
    out = merge_inbound(local, remote)
    assert [c["id"] for c in out] == ["b"]

def test_merge_takes_stripped_remote_when_local_empty():
    assert [c["id"] for c in merge_inbound([], [{"id": "a"}])] == ["a"]

# ---------------- backend client ----------------

class Recorder:
    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"success": False, "error": "not found"})
        return handler(request)

def _client(routes, token="tok", device_id="device-1"):
    rec = Recorder(routes)
    c = BackendSyncClient(token, device_id, base_url="https://sync.test", transport=httpx.MockTransport(rec))
    return c, rec

def test_no_token_never_calls_backend():
    c, rec = _client({}, token=None)
    assert c.fetch_coffees() is None
    assert c.push_coffees([]) is False
    assert c.check_user_status() == {"valid": False, "error": "No token found"}
    assert rec.requests == []

def test_fetch_returns_raw_rows_with_auth_headers():
    routes = {("GET", "/api/coffees"): lambda r: httpx.Response(200, json={
        "success": True, "coffees": [{"id": "1"}, {"id": "1"}, {"id": "2"}, "junk"],
    })}
    c, rec = _client(routes)
    out = c.fetch_coffees()
    assert [x["id"] for x in out] == ["1", "1", "2"]
    assert "feedbackHistory" not in out[0]
    req = rec.requests[0]
    assert req.headers["Authorization"] == "Bearer tok"
    assert req.headers["X-Device-ID"] == "device-1"

@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "boom"}),
    httpx.Response(200, json={"success": False, "error": "nope"}),
    httpx.Response(200, text="<html>not json</html>"),
])
def test_fetch_failures_return_none(response):
    c, _ = _client({("GET", "/api/coffees"): lambda r: response})
    assert c.fetch_coffees() is None

def test_transport_errors_are_swallowed():
    def explode(request):
        raise httpx.ConnectError("offline", request=request)
    c = BackendSyncClient("tok", "d", base_url="https://sync.test", transport=httpx.MockTransport(explode))
    assert c.fetch_coffees() is None
    assert c.push_grinder("fellow_gen2") is False
    assert c.check_user_status()["valid"] is False

def test_push_coffees_posts_wrapped_list():
    seen = {}

    def accept(request):
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "saved": 1})

    c, _ = _client({("POST", "/api/coffees"): accept})
    assert c.push_coffees([{"id": "a"}]) is True
    assert seen == {"coffees": [{"id": "a"}]}

def test_preferences_round_trip():
    routes = {
        ("GET", "/api/user/grinder"): lambda r: httpx.Response(200, json={"success": True, "grinder": "comandante"}),
        ("GET", "/api/user/water-hardness"): lambda r: httpx.Response(200, json={"success": True, "waterHardness": 12}),
        ("POST", "/api/user/water-hardness"): lambda r: httpx.Response(200, json={"success": True}),
        ("GET", "/api/auth/validate"): lambda r: httpx.Response(200, json={"valid": True, "user": {"username": "u"}}),
    }
    c, _ = _client(routes)
    assert c.fetch_grinder() == "comandante"
    assert c.fetch_water_hardness() == 12.0
    assert c.push_water_hardness(12.0) is True
    assert c.check_user_status() == {"valid": True, "user": {"username": "u"}}
