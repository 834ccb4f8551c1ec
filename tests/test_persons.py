from conftest import API_HEADERS, add_edge, add_person, login


def test_add_person(client):
    response = add_person(client, "Alice", description="<i>friend</i>", gender="FEMALE")
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert data["name"] == "Alice"
    assert data["description"] == "friend"
    assert data["gender"] == "female"
    assert isinstance(data["id"], int)


def test_add_person_defaults(client):
    data = add_person(client, "Bob").json()
    assert data["description"] == ""
    assert data["gender"] == "unknown"


def test_duplicate_name_conflicts(client):
    assert add_person(client, "Alice").status_code == 200

    response = add_person(client, "Alice")
    assert response.status_code == 409
    assert response.json()["error"] == "person_exists"


def test_names_are_case_sensitive(client):
    assert add_person(client, "Alice").status_code == 200
    assert add_person(client, "alice").status_code == 200


def test_name_is_sanitized_before_duplicate_check(client):
    assert add_person(client, "Alice").status_code == 200
    response = add_person(client, "<b>Alice</b>")
    assert response.status_code == 409


def test_markup_only_name_is_rejected(client):
    response = add_person(client, "<b></b>")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_failed"
    assert body["details"] == ["필수 필드 누락: name"]


def test_add_person_validation_details(client):
    response = client.post(
        "/api/addNode", json={"name": 123, "description": "x" * 501}, headers=API_HEADERS
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_failed"
    assert len(body["details"]) == 2
    assert "timestamp" in body


def test_list_includes_isolated_persons(client):
    add_person(client, "Charlie")
    add_person(client, "Alice")
    add_person(client, "Bob")
    add_edge(client, 1, 2)

    data = client.get("/api/persons").json()
    assert data["count"] == 3
    assert [person["name"] for person in data["persons"]] == ["Alice", "Bob", "Charlie"]


def test_background_upsert_and_read(client):
    person_id = add_person(client, "Alice").json()["id"]

    response = client.put(
        "/api/background",
        json={"person_id": str(person_id), "birth_year": 1990, "body": "<p>born in Seoul</p>"},
        headers=API_HEADERS,
    )
    assert response.status_code == 200
    assert response.json()["action"] == "created"
    assert response.json()["background"]["body"] == "born in Seoul"

    response = client.put(
        "/api/background",
        json={"person_id": str(person_id), "birth_year": 1991},
        headers=API_HEADERS,
    )
    assert response.json()["action"] == "updated"

    background = client.get("/api/background", params={"id": person_id}).json()["background"]
    assert background["person_id"] == person_id
    assert background["birth_year"] == 1991
    assert background["body"] is None


def test_background_with_session_token(client):
    person_id = add_person(client, "Alice").json()["id"]
    token = login(client)

    response = client.put(
        "/api/background",
        json={"person_id": str(person_id), "body": "note"},
        headers={"x-session-token": token},
    )
    assert response.status_code == 200


def test_background_not_found(client):
    person_id = add_person(client, "Alice").json()["id"]

    response = client.get("/api/background", params={"id": person_id})
    assert response.status_code == 404
    assert response.json()["error"] == "background_not_found"

    response = client.get("/api/background", params={"id": 999})
    assert response.status_code == 404
    assert response.json()["error"] == "person_not_found"


def test_background_invalid_id(client):
    response = client.get("/api/background", params={"id": "abc"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_id"

    response = client.get("/api/background")
    assert response.status_code == 400


def test_background_for_unknown_person(client):
    response = client.put(
        "/api/background", json={"person_id": "42", "body": "x"}, headers=API_HEADERS
    )
    assert response.status_code == 404
    assert response.json()["error"] == "person_not_found"
