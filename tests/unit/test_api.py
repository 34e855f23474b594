"""Tests for the HTTP surface: auth, validation, status mapping and error bodies."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from prompt_versions.api.routers.versions import get_auth_client, get_current_user, get_version_store
from prompt_versions.core.config import settings
from prompt_versions.main import create_app
from prompt_versions.services.auth_client import AuthClient

from ..conftest import FakeVersionStore

TOKEN = "Bearer good-token"
USER_ID = "5f8e3d0c-1c1b-4a9e-9d55-2f1f0a6c7b21"


def _auth_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path != "/auth/v1/user":
        return httpx.Response(404)
    if request.headers.get("Authorization") == TOKEN:
        return httpx.Response(200, json={"id": USER_ID, "email": "dev@example.com"})
    return httpx.Response(401, json={"message": "invalid JWT"})


def _make_client(store: FakeVersionStore, auth_handler=_auth_handler) -> TestClient:
    app = create_app()

    async def _store(user=Depends(get_current_user)):
        store.user_id = user["id"]
        return store

    app.dependency_overrides[get_auth_client] = lambda: AuthClient(
        base_url="http://auth.test",
        transport=httpx.MockTransport(auth_handler),
    )
    app.dependency_overrides[get_version_store] = _store
    # no lifespan: the database is never touched
    return TestClient(app)


@pytest.fixture
def client(store) -> TestClient:
    return _make_client(store)


def _post(client: TestClient, body, token: str | None = TOKEN) -> httpx.Response:
    headers = {"Authorization": token} if token else {}
    return client.post("/prompt-versions", json=body, headers=headers)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def test_missing_credential_is_401(client, store):
    response = _post(client, {"action": "cleanup"}, token=None)

    assert response.status_code == 401
    assert response.json() == {"error": "Authorization required", "code": "AUTH_REQUIRED"}
    assert store.calls == []


def test_rejected_credential_is_401(client, store):
    response = _post(client, {"action": "cleanup"}, token="Bearer bad")

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_INVALID"
    assert store.calls == []


def test_caller_is_bound_to_the_store(client, store):
    _post(client, {"action": "cleanup"})

    assert store.user_id == USER_ID


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_invalid_action_is_400_before_persistence(client, store):
    response = _post(client, {"action": "explode"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid action: explode", "code": "INVALID_INPUT"}
    assert store.calls == []


def test_history_limit_out_of_range_is_400(client, store):
    response = _post(client, {"action": "history", "prompt_row_id": "p1", "limit": 101})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"
    assert store.calls == []


def test_commit_with_bad_tag_is_400(client, store):
    response = _post(client, {"action": "commit", "prompt_row_id": "p1", "tag_name": "two words"})

    assert response.status_code == 400
    assert response.json() == {"error": "tag_name: alphanumeric, max 50 chars", "code": "INVALID_INPUT"}
    assert store.calls == []


def test_body_that_is_not_json_is_400(client):
    response = client.post(
        "/prompt-versions",
        content=b"{not json",
        headers={"Authorization": TOKEN, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be valid JSON", "code": "INVALID_INPUT"}


# ---------------------------------------------------------------------------
# Actions and status mapping
# ---------------------------------------------------------------------------


def test_diff_returns_changes(client, store, prompt_snapshot):
    prompt_id = store.add_prompt(prompt_snapshot)
    store.add_version(prompt_id, {**prompt_snapshot, "input_user_prompt": "Summarise: {{ticket}}\nBriefly."})

    response = _post(client, {"action": "diff", "prompt_row_id": prompt_id})

    assert response.status_code == 200
    (change,) = response.json()["changes"]
    assert change["field"] == "input_user_prompt"
    assert change["textDiff"] == [
        {"type": "unchanged", "content": "Summarise: {{ticket}}", "lineNumber": {"old": 1, "new": 1}},
        {"type": "removed", "content": "Briefly.", "lineNumber": {"old": 2}},
    ]


def test_history_round_trip(client, store, prompt_snapshot):
    prompt_id = store.add_prompt(prompt_snapshot)
    store.add_version(prompt_id, prompt_snapshot, commit_message="Initial")

    response = _post(client, {"action": "history", "prompt_row_id": prompt_id, "limit": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["versions"][0]["commit_message"] == "Initial"


def test_not_found_is_client_error(client):
    response = _post(client, {"action": "preview", "version_id": "missing"})

    assert response.status_code == 400
    assert response.json() == {"error": "Version not found: missing", "code": "CLIENT_ERROR"}


def test_unclassified_failure_is_500(client, store):
    store.fail_with = RuntimeError("connection reset by peer")

    response = _post(client, {"action": "cleanup"})

    assert response.status_code == 500
    assert response.json() == {"error": "connection reset by peer", "code": "SERVER_ERROR"}


def test_deadline_exceeded_is_504(monkeypatch, prompt_snapshot):
    class SlowStore(FakeVersionStore):
        async def fetch_live_record(self, prompt_row_id):
            await asyncio.sleep(5)
            return {}

    store = SlowStore()
    prompt_id = store.add_prompt(prompt_snapshot)
    monkeypatch.setattr(settings, "request_timeout_seconds", 0.05)

    response = _post(_make_client(store), {"action": "diff", "prompt_row_id": prompt_id})

    assert response.status_code == 504
    assert response.json() == {"error": "Request timeout", "code": "TIMEOUT"}


def test_time_spent_authenticating_counts_toward_deadline(monkeypatch, store):
    async def slow_auth(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.2)
        return _auth_handler(request)

    monkeypatch.setattr(settings, "request_timeout_seconds", 0.05)

    response = _post(_make_client(store, auth_handler=slow_auth), {"action": "cleanup"})

    assert response.status_code == 504
    assert response.json()["code"] == "TIMEOUT"
    assert store.calls == []


def test_responses_carry_request_id(client):
    response = _post(client, {"action": "cleanup"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"]
    assert "X-Process-Time" in response.headers


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def test_health(client):
    response = client.get("/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_detailed_health_without_database_is_degraded(client):
    response = client.get("/health/detailed")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["components"] == {"database": False}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
