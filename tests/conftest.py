import os

# relgraph 임포트 전에 설정 (엔진/설정이 임포트 시점에 만들어짐)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["API_KEY"] = "test-api-key"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "s3cret-password"
os.environ["EDGE_CONFLICT_MODE"] = "upsert"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from relgraph.main import app
from relgraph.database import Base, engine
from relgraph.core import rate_limit
from relgraph.core.rate_limit import InMemoryRateLimitStore, get_rate_limit_store
from relgraph.services.admin_service import InMemorySessionStore, get_session_store
from relgraph.api.endpoints.images import get_renderer

API_KEY = "test-api-key"
API_HEADERS = {"x-api-key": API_KEY}
ADMIN_CREDENTIALS = {"username": "admin", "password": "s3cret-password"}

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


class FakeRenderer:
    """브라우저 없이 렌더 호출만 기록"""

    def __init__(self, image: bytes = PNG_BYTES):
        self.image = image
        self.calls = []

    async def render(self, graph, style, output):
        self.calls.append((graph, style, output))
        return self.image


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(rate_limit, "monotonic", fake)
    return fake


@pytest.fixture
def rate_limit_store():
    return InMemoryRateLimitStore()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def client(rate_limit_store, session_store, renderer):
    app.dependency_overrides[get_rate_limit_store] = lambda: rate_limit_store
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_renderer] = lambda: renderer
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def add_person(client, name, **fields):
    return client.post("/api/addNode", json={"name": name, **fields}, headers=API_HEADERS)


def add_edge(client, first, second, source=None, headers=API_HEADERS):
    body = {"from": str(first), "to": str(second)}
    if source is not None:
        body["source"] = source
    return client.post("/api/addEdge", json=body, headers=headers)


def delete_edge(client, first, second, headers=API_HEADERS):
    return client.request(
        "DELETE",
        "/api/deleteEdge",
        json={"from": str(first), "to": str(second)},
        headers=headers,
    )


def login(client):
    response = client.post("/api/admin/login", json=ADMIN_CREDENTIALS)
    assert response.status_code == 200
    return response.json()["token"]
