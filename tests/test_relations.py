import pytest

from relgraph.main import app
from relgraph.core.config import get_settings
from conftest import API_HEADERS, add_edge, add_person, delete_edge, login


@pytest.fixture
def people(client):
    return [add_person(client, name).json()["id"] for name in ("Alice", "Bob", "Charlie")]


@pytest.fixture
def strict_mode():
    strict_settings = get_settings().model_copy(update={"edge_conflict_mode": "strict"})
    app.dependency_overrides[get_settings] = lambda: strict_settings
    yield
    app.dependency_overrides.pop(get_settings, None)


def test_add_edge(client, people):
    alice, bob, _ = people
    response = add_edge(client, alice, bob, source="news article")
    assert response.status_code == 200

    data = response.json()
    assert data["action"] == "created"
    assert data["from"] == alice
    assert data["to"] == bob
    assert data["source"] == "news article"


def test_self_loop_rejected(client, people):
    response = add_edge(client, people[0], people[0])
    assert response.status_code == 400
    assert response.json()["error"] == "self_loop"


def test_edge_requires_existing_persons(client, people):
    response = add_edge(client, people[0], 999)
    assert response.status_code == 404
    assert response.json()["error"] == "person_not_found"


def test_edge_ids_must_be_strings(client, people):
    response = client.post(
        "/api/addEdge", json={"from": people[0], "to": str(people[1])}, headers=API_HEADERS
    )
    assert response.status_code == 400
    assert response.json()["details"] == ["필드 from 타입 오류: 기대 string, 실제 number"]


def test_reverse_edge_updates_existing(client, people):
    alice, bob, _ = people
    created = add_edge(client, alice, bob, source="first").json()

    response = add_edge(client, bob, alice, source="<em>second</em>")
    assert response.status_code == 200
    updated = response.json()
    assert updated["action"] == "updated"
    assert updated["id"] == created["id"]
    assert updated["source"] == "second"

    graph = client.get("/api/graph").json()
    assert len(graph["edges"]) == 1


def test_reverse_edge_conflicts_in_strict_mode(client, people, strict_mode):
    alice, bob, _ = people
    assert add_edge(client, alice, bob).status_code == 200

    response = add_edge(client, bob, alice)
    assert response.status_code == 409
    assert response.json()["error"] == "edge_exists"


def test_delete_edge_in_either_direction(client, people):
    alice, bob, _ = people
    add_edge(client, alice, bob)

    response = delete_edge(client, bob, alice)
    assert response.status_code == 200
    assert response.json()["deletedRows"] == 1

    response = delete_edge(client, alice, bob)
    assert response.status_code == 404
    assert response.json()["error"] == "edge_not_found"

    # 인물은 그대로 남음
    assert client.get("/api/persons").json()["count"] == 3


def test_delete_self_loop_rejected(client, people):
    response = delete_edge(client, people[0], people[0])
    assert response.status_code == 400
    assert response.json()["error"] == "self_loop"


def test_graph_contains_only_connected_persons(client, people):
    alice, bob, _ = people
    add_edge(client, alice, bob)

    graph = client.get("/api/graph").json()
    assert graph["success"] is True
    assert {node["id"] for node in graph["nodes"]} == {str(alice), str(bob)}
    assert {node["label"] for node in graph["nodes"]} == {"Alice", "Bob"}
    assert graph["counts"] == {"totalPersons": 3, "connectedPersons": 2, "relations": 1}

    edge = graph["edges"][0]
    assert edge["from"] == str(alice)
    assert edge["to"] == str(bob)
    assert "source" not in edge


def test_empty_graph(client, people):
    graph = client.get("/api/graph").json()
    assert graph["nodes"] == []
    assert graph["edges"] == []
    assert graph["counts"]["totalPersons"] == 3


def test_person_relations(client, people):
    alice, bob, charlie = people
    add_edge(client, charlie, alice, source="school")
    add_edge(client, alice, bob)

    data = client.get(f"/api/person/{alice}/relations").json()
    assert data["person"]["name"] == "Alice"
    assert data["degree"] == 2
    assert [neighbor["name"] for neighbor in data["neighbors"]] == ["Bob", "Charlie"]
    assert {relation["neighbor_id"] for relation in data["relations"]} == {bob, charlie}

    by_query = client.get("/api/relations", params={"id": alice}).json()
    assert by_query["degree"] == 2


def test_person_relations_errors(client, people):
    response = client.get("/api/person/abc/relations")
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_id"

    response = client.get("/api/person/999/relations")
    assert response.status_code == 404


def test_isolated_person_has_no_relations(client, people):
    data = client.get(f"/api/person/{people[2]}/relations").json()
    assert data["degree"] == 0
    assert data["relations"] == []
    assert data["neighbors"] == []


def test_update_edge_with_session(client, people):
    alice, bob, _ = people
    add_edge(client, alice, bob, source="old")
    token = login(client)

    response = client.put(
        "/api/updateEdge",
        json={"from": str(bob), "to": str(alice), "source": "new"},
        headers={"x-session-token": token},
    )
    assert response.status_code == 200
    assert response.json()["action"] == "updated"
    assert response.json()["source"] == "new"


def test_update_missing_edge(client, people):
    token = login(client)
    response = client.put(
        "/api/updateEdge",
        json={"from": str(people[0]), "to": str(people[1]), "source": "new"},
        headers={"x-session-token": token},
    )
    assert response.status_code == 404
    assert response.json()["error"] == "edge_not_found"


def test_update_edge_rejects_api_key(client, people):
    response = client.put(
        "/api/updateEdge",
        json={"from": str(people[0]), "to": str(people[1])},
        headers=API_HEADERS,
    )
    assert response.status_code == 401


def test_full_width_digit_ids_rejected(client, people):
    response = add_edge(client, "١", "２")
    assert response.status_code == 400
    assert response.json()["error"] == "validation_failed"
    assert client.get("/api/graph").json()["edges"] == []


def test_wrong_type_and_range_reported_together(client, people):
    response = client.post("/api/addEdge", json={"from": 0, "to": "2"}, headers=API_HEADERS)
    assert response.status_code == 400
    assert len(response.json()["details"]) == 2
