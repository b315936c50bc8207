"""Tests HTTP des routes de versions (auth, propriété, enveloppes d'erreur)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pitch_history.api.deps import (
    get_jwt_config,
    get_pitch_store,
    get_restore_controller,
    get_version_store,
)
from pitch_history.app.main import app
from pitch_history.core.http_constants import (
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
)
from pitch_history.domain.auth import create_access_token
from pitch_history.domain.errors import TransientError
from pitch_history.domain.restore import RestoreController

SECRET = "test-secret"
ALG = "HS256"


def _auth(sub: str = "owner-1", name: str | None = "Jane") -> dict[str, str]:
    payload = {"sub": sub}
    if name:
        payload["name"] = name
    return {"Authorization": f"Bearer {create_access_token(SECRET, ALG, 5, payload)}"}


@pytest.fixture
def restore_controller(version_store, pitch_store):
    return RestoreController(version_store, pitch_store)


@pytest.fixture
def client(version_store, pitch_store, restore_controller):
    pitch_store.save({"id": "p1", "userId": "owner-1", "businessName": "Acme", "level": 1})
    pitch_store.save({"id": "p-anon", "userId": "anonymous", "businessName": "Anon"})
    pitch_store.save({"id": "p-other", "userId": "owner-2", "businessName": "Other"})
    app.dependency_overrides[get_version_store] = lambda: version_store
    app.dependency_overrides[get_pitch_store] = lambda: pitch_store
    app.dependency_overrides[get_restore_controller] = lambda: restore_controller
    app.dependency_overrides[get_jwt_config] = lambda: (SECRET, ALG)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _seed(version_store, pitch_store, count: int = 3):
    versions = []
    for n in range(count):
        current = pitch_store.get("p1")
        versions.append(
            version_store.create_version("p1", current, "owner-1", "Jane", {"level": n + 2})
        )
        pitch_store.update("p1", {"level": n + 2})
    return versions


def test_missing_token_is_rejected(client) -> None:
    r = client.get("/pitch/p1/versions")
    assert r.status_code == HTTP_UNAUTHORIZED
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "UNAUTHORIZED"


def test_invalid_token_is_rejected(client) -> None:
    r = client.get("/pitch/p1/versions", headers={"Authorization": "Bearer not.a.valid.token"})
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "invalid_token"


def test_foreign_pitch_is_forbidden(client) -> None:
    r = client.get("/pitch/p-other/versions", headers=_auth())
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["message"] == "Not authorized to access this pitch"


def test_anonymous_pitch_is_accessible(client) -> None:
    r = client.get("/pitch/p-anon/versions", headers=_auth())
    assert r.status_code == HTTP_OK
    assert r.json() == {"success": True, "data": [], "total": 0}


def test_missing_pitch_is_not_found(client) -> None:
    r = client.get("/pitch/nope/versions", headers=_auth())
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["message"] == "Pitch not found"


def test_list_versions_shape(client, version_store, pitch_store) -> None:
    _seed(version_store, pitch_store)
    r = client.get("/pitch/p1/versions", params={"limit": 2}, headers=_auth())
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["success"] is True
    assert body["total"] == 2
    first = body["data"][0]
    assert first["versionNumber"] == 3
    assert "snapshot" not in first
    assert first["pitchId"] == "p1"
    assert first["changes"]["userName"] == "Jane"
    assert first["changes"]["diff"]["structure"][0] == {
        "op": "replace",
        "field": "level",
        "oldValue": 3,
        "newValue": 4,
    }


def test_get_version_includes_snapshot(client, version_store, pitch_store) -> None:
    versions = _seed(version_store, pitch_store)
    r = client.get(f"/pitch/p1/versions/{versions[0].version_id}", headers=_auth())
    assert r.status_code == HTTP_OK
    data = r.json()["data"]
    assert data["id"] == versions[0].version_id
    assert data["snapshot"]["level"] == 1


def test_get_unknown_version(client) -> None:
    r = client.get("/pitch/p1/versions/missing", headers=_auth())
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["code"] == "NOT_FOUND"


def test_get_version_of_other_pitch(client, version_store, pitch_store) -> None:
    other = version_store.create_version("p-anon", pitch_store.get("p-anon"), "x", "X", {})
    r = client.get(f"/pitch/p1/versions/{other.version_id}", headers=_auth())
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["message"] == "Version does not belong to this pitch"


def test_preview_projection(client, version_store, pitch_store) -> None:
    versions = _seed(version_store, pitch_store)
    r = client.get(f"/pitch/p1/versions/{versions[1].version_id}/preview", headers=_auth())
    assert r.status_code == HTTP_OK
    data = r.json()["data"]
    assert set(data) == {"versionNumber", "snapshot", "changes", "createdAt"}
    assert data["versionNumber"] == 2
    assert version_store.count_versions("p1") == 3


def test_restore_route(client, version_store, pitch_store) -> None:
    versions = _seed(version_store, pitch_store)
    r = client.post(f"/pitch/p1/versions/{versions[0].version_id}/restore", headers=_auth())
    assert r.status_code == HTTP_OK
    assert r.json() == {
        "success": True,
        "message": "Restored to version 1",
        "data": {"restoredFields": ["businessName", "level"]},
    }
    assert pitch_store.get("p1")["level"] == 1
    latest = version_store.list_versions("p1", limit=1)[0]
    assert latest.changes.type.value == "restored"
    assert latest.changes.user_name == "Jane"


def test_restore_unknown_version(client) -> None:
    r = client.post("/pitch/p1/versions/missing/restore", headers=_auth())
    assert r.status_code == HTTP_NOT_FOUND


def test_restore_contention_returns_503_with_retry_after(client) -> None:
    class Busy:
        def restore_version(self, *args, **kwargs):
            raise TransientError("Could not allocate a version number, retry later", attempts=5)

    app.dependency_overrides[get_restore_controller] = lambda: Busy()
    r = client.post("/pitch/p1/versions/v1/restore", headers=_auth())
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.headers["Retry-After"] == "1"
    assert r.json()["code"] == "TRANSIENT"


def test_restore_unexpected_error_returns_500(version_store, pitch_store, client) -> None:
    class Broken:
        def restore_version(self, *args, **kwargs):
            raise RuntimeError("store exploded")

    app.dependency_overrides[get_restore_controller] = lambda: Broken()
    safe_client = TestClient(app, raise_server_exceptions=False)
    r = safe_client.post("/pitch/p1/versions/v1/restore", headers=_auth())
    assert r.status_code == HTTP_INTERNAL_SERVER_ERROR
    assert r.json()["code"] == "INTERNAL_ERROR"


def test_request_id_is_echoed(client) -> None:
    r = client.get("/pitch/p1/versions", headers={**_auth(), "X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"


def test_preview_loads_the_version_once(
    client, version_store, pitch_store, monkeypatch
) -> None:
    versions = _seed(version_store, pitch_store, count=1)
    loaded: list[str] = []
    real_get = version_store.get_version

    def counting_get(version_id: str):
        loaded.append(version_id)
        return real_get(version_id)

    monkeypatch.setattr(version_store, "get_version", counting_get)
    r = client.get(f"/pitch/p1/versions/{versions[0].version_id}/preview", headers=_auth())
    assert r.status_code == HTTP_OK
    assert loaded == [versions[0].version_id]


def test_error_envelope_has_fixed_keys(client) -> None:
    r = client.get("/pitch/nope/versions", headers={**_auth(), "X-Request-ID": "req-7"})
    assert r.status_code == HTTP_NOT_FOUND
    assert set(r.json()) == {"success", "code", "message", "trace_id"}
    assert r.json()["trace_id"] == "req-7"
