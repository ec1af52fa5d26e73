import json

import pytest

from mockprep.services.question_bank import normalize_difficulty


def _question_payload(**overrides):
    payload = {
        "type": "single_choice",
        "stem": "What does SQL stand for?",
        "category": "database",
        "level": "junior",
        "difficulty": "2",
        "topics": ["sql"],
        "options": [
            {"text": "Structured Query Language", "is_correct": True},
            {"text": "Simple Question List", "is_correct": False},
        ],
    }
    payload.update(overrides)
    return payload


def test_non_admin_is_refused(client, auth_headers):
    response = client.get("/api/admin/questions", headers=auth_headers)
    assert response.status_code == 403


def test_create_and_fetch_question(client, admin_headers):
    response = client.post("/api/admin/questions", json=_question_payload(), headers=admin_headers)
    assert response.status_code == 201
    created = response.json()
    assert created["difficulty"] == "easy"
    assert [o["order"] for o in created["options"]] == [0, 1]

    fetched = client.get(f"/api/admin/questions/{created['id']}", headers=admin_headers)
    assert fetched.status_code == 200
    assert fetched.json()["stem"] == "What does SQL stand for?"


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": "essay"},
        {"options": [{"text": "Only one", "is_correct": True}]},
        {"options": [{"text": "A"}, {"text": "B"}]},
        {"options": [{"text": "A", "is_correct": True}, {"text": "B", "is_correct": True}]},
    ],
)
def test_invalid_questions_are_rejected(client, admin_headers, overrides):
    response = client.post(
        "/api/admin/questions", json=_question_payload(**overrides), headers=admin_headers
    )
    assert response.status_code == 400


def test_open_ended_question_needs_no_options(client, admin_headers):
    response = client.post(
        "/api/admin/questions",
        json=_question_payload(type="open_ended", options=[]),
        headers=admin_headers,
    )
    assert response.status_code == 201


def test_list_filters_and_paginates(client, admin_headers, questions):
    response = client.get(
        "/api/admin/questions", params={"type": "single_choice", "page_size": 2}, headers=admin_headers
    )
    data = response.json()
    assert data["total"] == 3
    assert len(data["items"]) == 2

    response = client.get("/api/admin/questions", params={"search": "HTTP"}, headers=admin_headers)
    assert [q["type"] for q in response.json()["items"]] == ["multiple_choice"]


def test_update_replaces_options(client, admin_headers, questions):
    question_id = questions[0].id
    response = client.put(
        f"/api/admin/questions/{question_id}",
        json={
            "stem": "Renamed",
            "options": [
                {"text": "yes", "is_correct": True},
                {"text": "no", "is_correct": False},
            ],
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["stem"] == "Renamed"
    assert [o["text"] for o in data["options"]] == ["yes", "no"]
    assert data["category"] == "backend"


def test_update_type_revalidates_existing_options(client, admin_headers, questions):
    response = client.put(
        f"/api/admin/questions/{questions[3].id}",
        json={"type": "single_choice"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_delete_and_bulk_delete(client, admin_headers, questions):
    response = client.delete(f"/api/admin/questions/{questions[0].id}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/admin/questions/{questions[0].id}", headers=admin_headers).status_code == 404

    response = client.post(
        "/api/admin/questions/bulk-delete",
        json={"ids": [q.id for q in questions[1:]]},
        headers=admin_headers,
    )
    assert response.json() == {"deleted": 3}


def test_question_set_lifecycle(client, admin_headers, questions):
    ids = [q.id for q in questions]

    response = client.post(
        "/api/admin/question-sets", json={"name": "Backend basics"}, headers=admin_headers
    )
    assert response.status_code == 201
    set_id = response.json()["id"]
    assert response.json()["status"] == "draft"

    empty_publish = client.post(f"/api/admin/question-sets/{set_id}/publish", headers=admin_headers)
    assert empty_publish.status_code == 400

    duplicate = client.put(
        f"/api/admin/question-sets/{set_id}/items",
        json={"question_ids": [ids[0], ids[0]]},
        headers=admin_headers,
    )
    assert duplicate.status_code == 400

    missing = client.put(
        f"/api/admin/question-sets/{set_id}/items",
        json={"question_ids": [ids[0], "missing"]},
        headers=admin_headers,
    )
    assert missing.status_code == 404

    response = client.put(
        f"/api/admin/question-sets/{set_id}/items",
        json={"question_ids": list(reversed(ids))},
        headers=admin_headers,
    )
    assert response.json()["question_ids"] == list(reversed(ids))

    published = client.post(f"/api/admin/question-sets/{set_id}/publish", headers=admin_headers)
    assert published.json()["status"] == "published"

    fetched = client.get(f"/api/admin/question-sets/{set_id}", headers=admin_headers)
    assert fetched.json()["question_ids"] == list(reversed(ids))


def test_ai_generate_stores_valid_questions(client, admin_headers, fake_llm, llm_override):
    reply = json.dumps({
        "questions": [
            {
                "stem": "Which keyword defines a function in Python?",
                "explanation": "def starts a function definition.",
                "options": [
                    {"text": "def", "is_correct": True},
                    {"text": "func", "is_correct": False},
                    {"text": "lambda", "is_correct": False},
                ],
            },
            {
                "stem": "Broken: two answers for a single choice question",
                "options": [
                    {"text": "a", "is_correct": True},
                    {"text": "b", "is_correct": True},
                ],
            },
        ]
    })
    fake = llm_override(fake_llm("Here you go:\n```json\n" + reply + "\n```"))

    response = client.post(
        "/api/admin/questions/ai-generate",
        json={"topic": "python", "category": "backend", "count": 2},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert len(data) == 1
    assert data[0]["topics"] == ["python"]
    assert data[0]["tags"] == ["ai-generated"]
    assert len(fake.models.calls) == 1

    listing = client.get("/api/admin/questions", headers=admin_headers)
    assert listing.json()["total"] == 1


def test_ai_generate_rejects_open_ended(client, admin_headers, fake_llm, llm_override):
    llm_override(fake_llm())
    response = client.post(
        "/api/admin/questions/ai-generate",
        json={"topic": "python", "type": "open_ended"},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.parametrize(
    "value, expected",
    [("Hard", "hard"), (1, "easy"), ("3", "medium"), (4.5, "hard"), (None, None), ("weird", None)],
)
def test_normalize_difficulty(value, expected):
    assert normalize_difficulty(value) == expected


def test_admin_packages_and_users(client, admin, admin_headers, user):
    created = client.post(
        "/api/admin/packages",
        json={"name": "Starter", "price": 5, "test_quiz_eq_limit": 3},
        headers=admin_headers,
    )
    assert created.status_code == 201
    package_id = created.json()["id"]

    updated = client.put(
        f"/api/admin/packages/{package_id}", json={"price": 7.5}, headers=admin_headers
    )
    assert updated.json()["price"] == 7.5
    assert updated.json()["test_quiz_eq_limit"] == 3

    assigned = client.post(
        f"/api/admin/users/{user.id}/packages",
        json={"service_package_id": package_id},
        headers=admin_headers,
    )
    assert assigned.status_code == 201
    assert assigned.json()["service_package"]["name"] == "Starter"

    in_use = client.delete(f"/api/admin/packages/{package_id}", headers=admin_headers)
    assert in_use.status_code == 400

    emails = {u["email"] for u in client.get("/api/admin/users", headers=admin_headers).json()}
    assert emails == {"admin@example.com", "alice@example.com"}

    promoted = client.put(f"/api/admin/users/{user.id}/role", json={"role": "admin"}, headers=admin_headers)
    assert promoted.json()["role"] == "admin"

    demote_self = client.put(f"/api/admin/users/{admin.id}/role", json={"role": "user"}, headers=admin_headers)
    assert demote_self.status_code == 400

    unknown = client.put(f"/api/admin/users/{user.id}/role", json={"role": "owner"}, headers=admin_headers)
    assert unknown.status_code == 400
