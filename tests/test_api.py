import json

import pytest
from fastapi.testclient import TestClient

from people_journal.main import create_app


@pytest.fixture
def client(settings, fake_llm):
    app = create_app(settings)
    with TestClient(app) as client:
        app.state.journal.llm_factory = lambda s: fake_llm
        yield client


def _create_member(client, name="Alice"):
    response = client.post("/api/team", json={"name": name})
    assert response.status_code == 201
    return response.json()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_config_without_credentials(client):
    response = client.get("/api/config")

    assert response.status_code == 200
    assert response.json() == {"ai_configured": False, "jira_configured": False}


def test_team_crud(client):
    member = _create_member(client)

    updated = client.put(f"/api/team/{member['id']}", json={"role": "Tech Lead"})
    assert updated.status_code == 200
    assert updated.json()["role"] == "Tech Lead"
    assert updated.json()["name"] == "Alice"

    notes = client.put(f"/api/team/{member['id']}/prep-notes", json={"prep_notes": "promo packet"})
    assert notes.json() == {"prep_notes": "promo packet"}

    listed = client.get("/api/team").json()
    assert [m["prep_notes"] for m in listed] == ["promo packet"]

    deleted = client.delete(f"/api/team/{member['id']}")
    assert deleted.json() == {"deleted": True}
    assert client.get("/api/team").json() == []


def test_unknown_member_is_404(client):
    response = client.put("/api/team/member-missing", json={"name": "X"})

    assert response.status_code == 404
    assert response.json() == {"error": "member not found"}


def test_entry_crud(client):
    member = _create_member(client)

    created = client.post("/api/entries", json={
        "member_id": member["id"],
        "date": "2025-03-01",
        "summary": "Kickoff",
        "action_items_mine": [{"text": "Share roadmap", "completed": False}],
    })
    assert created.status_code == 201
    entry = created.json()
    assert entry["created_at"] == entry["updated_at"]

    updated = client.put(f"/api/entries/{entry['id']}", json={"morale_score": 5})
    assert updated.json()["morale_score"] == 5
    assert updated.json()["summary"] == "Kickoff"

    listed = client.get("/api/entries", params={"member_id": member["id"]}).json()
    assert [e["id"] for e in listed] == [entry["id"]]

    assert client.delete(f"/api/entries/{entry['id']}").json() == {"deleted": True}
    assert client.get(f"/api/entries/{entry['id']}").status_code == 404


def test_entry_for_missing_member_is_409(client):
    response = client.post("/api/entries", json={"member_id": "member-missing", "date": "2025-03-01"})

    assert response.status_code == 409


def test_score_out_of_range_rejected(client):
    member = _create_member(client)

    response = client.post("/api/entries", json={"member_id": member["id"], "morale_score": 9})

    assert response.status_code == 422


def test_extract_requires_transcript(client):
    response = client.post("/api/extract", json={"transcript": "", "member_name": "Alice"})

    assert response.status_code == 400


def test_extract_returns_structured_result(client, fake_llm):
    fake_llm.complete.return_value = json.dumps({"summary": "ok", "tags": ["wins"], "morale_score": 4})

    response = client.post("/api/extract", json={"transcript": "we talked", "member_name": "Alice"})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "ok"
    assert body["tags"] == ["wins"]
    assert body["blockers"] == []


def test_extract_bad_model_output_is_502(client, fake_llm):
    fake_llm.complete.return_value = "I cannot help with that."

    response = client.post("/api/extract", json={"transcript": "we talked", "member_name": "Alice"})

    assert response.status_code == 502
    assert "error" in response.json()


def test_prep_omits_jira_fields(client, fake_llm):
    fake_llm.complete.return_value = "**Follow up on**\n- roadmap"
    member = _create_member(client)
    client.post("/api/entries", json={"member_id": member["id"], "date": "2025-03-01", "tags": ["process"]})

    response = client.post("/api/prep", json={"member_id": member["id"]})

    assert response.status_code == 200
    body = response.json()
    assert body["briefing"] == "**Follow up on**\n- roadmap"
    assert body["recent_tags"] == [{"tag": "process", "count": 1}]
    assert "jira_assigned" not in body
