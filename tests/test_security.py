from datetime import timedelta

import pytest

from relgraph.main import app
from relgraph.core.config import get_settings
from relgraph.services.admin_service import AdminService
from conftest import ADMIN_CREDENTIALS, API_KEY, add_person, login


@pytest.fixture
def without_api_key():
    settings = get_settings().model_copy(update={"api_key": None})
    app.dependency_overrides[get_settings] = lambda: settings
    yield
    app.dependency_overrides.pop(get_settings, None)


def test_missing_api_key(client):
    response = client.post("/api/addNode", json={"name": "Alice"})
    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_wrong_api_key(client):
    response = client.post("/api/addNode", json={"name": "Alice"}, headers={"x-api-key": "nope"})
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_api_key_in_query(client):
    response = client.post("/api/addNode", params={"key": API_KEY}, json={"name": "Alice"})
    assert response.status_code == 200


def test_auth_checked_before_body(client):
    response = client.post("/api/addNode", content=b"{not json")
    assert response.status_code == 401


def test_unconfigured_api_key(client, without_api_key):
    response = client.post("/api/addNode", json={"name": "Alice"}, headers={"x-api-key": API_KEY})
    assert response.status_code == 500
    assert response.json()["error"] == "server_misconfigured"


def test_read_routes_are_public(client):
    assert client.get("/api/graph").status_code == 200
    assert client.get("/api/persons").status_code == 200


def test_login_and_verify(client):
    response = client.post("/api/admin/login", json=ADMIN_CREDENTIALS)
    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "admin"
    assert len(data["token"]) == 64

    response = client.get("/api/admin/verify", headers={"x-session-token": data["token"]})
    assert response.status_code == 200
    assert response.json()["username"] == "admin"


def test_login_with_wrong_password(client):
    response = client.post("/api/admin/login", json={"username": "admin", "password": "wrong"})
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_login_validation(client):
    response = client.post("/api/admin/login", json={"username": "admin"})
    assert response.status_code == 400
    assert response.json()["details"] == ["필수 필드 누락: password"]


def test_verify_without_token(client):
    response = client.get("/api/admin/verify")
    assert response.status_code == 401

    response = client.get("/api/admin/verify", headers={"x-session-token": "unknown"})
    assert response.status_code == 401


def test_logout_invalidates_token(client, session_store):
    token = login(client)

    response = client.post("/api/admin/logout", headers={"x-session-token": token})
    assert response.status_code == 200
    assert session_store.get(token) is None

    response = client.get("/api/admin/verify", headers={"x-session-token": token})
    assert response.status_code == 401


def test_expired_session_is_removed(client, session_store):
    token = login(client)
    session_store.get(token).created_at -= timedelta(hours=25)

    response = client.get("/api/admin/verify", headers={"x-session-token": token})
    assert response.status_code == 401
    assert session_store.get(token) is None


def test_sweep_expired_sessions(client, session_store):
    fresh = login(client)
    stale = login(client)
    session_store.get(stale).created_at -= timedelta(hours=24, seconds=1)

    service = AdminService(get_settings(), session_store)
    assert service.sweep_expired() == 1
    assert session_store.get(fresh) is not None
    assert session_store.get(stale) is None


def test_background_write_guard(client):
    person_id = add_person(client, "Alice").json()["id"]
    body = {"person_id": str(person_id), "body": "note"}

    assert client.put("/api/background", json=body).status_code == 401
    assert client.put("/api/background", json=body, headers={"x-api-key": "nope"}).status_code == 403

    response = client.put("/api/background", json=body, headers={"x-session-token": "stale"})
    assert response.status_code == 401

    # 세션이 무효해도 올바른 API 키가 있으면 통과
    response = client.put(
        "/api/background",
        json=body,
        headers={"x-session-token": "stale", "x-api-key": API_KEY},
    )
    assert response.status_code == 200
