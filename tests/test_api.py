import pytest
from fastapi.testclient import TestClient

from conftest import ALICE, BEN
from daily_checkin.api import create_app
from daily_checkin.errors import StoreUnavailable


def _headers(user_id: str, api_key: str = "test-key") -> dict:
    return {"X-API-Key": api_key, "X-User-Id": user_id}


@pytest.fixture
def client(settings, service):
    return TestClient(create_app(settings, service))


def _schedule(client, text: str, day) -> str:
    response = client.post("/api/admin/questions", json={"text": text, "date": day}, headers=_headers(ALICE))
    assert response.status_code == 201
    return response.json()["id"]


def test_healthcheck_needs_no_key(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_api_key_is_required(client):
    assert client.get("/api/questions/today", headers=_headers(ALICE, api_key="wrong")).status_code == 401


def test_me_reports_role_and_partner(client):
    body = client.get("/api/me", headers=_headers(BEN)).json()
    assert body["is_admin"] is False
    assert body["partner"]["user_id"] == ALICE
    assert body["poll_interval_seconds"] == 3


def test_unknown_user_is_forbidden(client):
    response = client.get("/api/questions/today", headers=_headers("stranger"))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "unauthorized"


def test_check_in_flow(client):
    question_id = _schedule(client, "What made you laugh?", "2024-01-01")

    today = client.get("/api/questions/today", headers=_headers(BEN)).json()
    assert today["date"] == "2024-01-02"
    assert today["question"]["id"] == question_id

    response = client.post(
        f"/api/questions/{question_id}/answers", json={"text": "I love hiking"}, headers=_headers(ALICE)
    )
    assert response.status_code == 201
    assert response.json()["answers"]["state"] == "waiting"

    hidden = client.get(f"/api/questions/{question_id}/answers", headers=_headers(BEN)).json()["answers"]
    assert hidden["self_answer"] is None
    assert hidden["partner_answer"] is None
    assert client.get(f"/api/questions/{question_id}/submitted", headers=_headers(BEN)).json() == {
        "submitted": False
    }

    client.post(f"/api/questions/{question_id}/answers", json={"text": "Puns"}, headers=_headers(BEN))
    revealed = client.get(f"/api/questions/{question_id}/answers", headers=_headers(ALICE)).json()["answers"]
    assert revealed["state"] == "revealed"
    assert revealed["self_answer"]["text"] == "I love hiking"
    assert revealed["partner_answer"]["text"] == "Puns"

    days = client.get("/api/answered-days", headers=_headers(ALICE)).json()
    assert days == {"days": ["2024-01-02"]}


def test_submission_errors_map_to_status_codes(client):
    question_id = _schedule(client, "Question", "2024-01-01")
    url = f"/api/questions/{question_id}/answers"

    assert client.post(url, json={"text": "  "}, headers=_headers(ALICE)).status_code == 400
    assert client.post(url, json={"text": "Once"}, headers=_headers(ALICE)).status_code == 201

    duplicate = client.post(url, json={"text": "Twice"}, headers=_headers(ALICE))
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "duplicate_submission"

    missing = client.post("/api/questions/nope/answers", json={"text": "Hi"}, headers=_headers(ALICE))
    assert missing.status_code == 404


def test_unknown_question_lookups(client):
    assert client.get("/api/questions/nope", headers=_headers(ALICE)).status_code == 404
    assert client.get("/api/questions/nope/answers", headers=_headers(ALICE)).json() == {"answers": None}


def test_past_questions(client):
    older = _schedule(client, "Older", "2023-12-30")
    _schedule(client, "Active", "2024-01-01")
    _schedule(client, "Future", "2024-03-01")

    body = client.get("/api/questions/past", headers=_headers(BEN)).json()
    assert body == {"question_ids": [older]}


def test_admin_routes_require_admin(client):
    response = client.post("/api/admin/questions", json={"text": "Hi", "date": "2024-01-03"}, headers=_headers(BEN))
    assert response.status_code == 403
    assert client.get("/api/admin/questions", headers=_headers(BEN)).status_code == 403


def test_admin_schedule_and_update(client):
    nanos = 1704844800000000000  # 2024-01-10T00:00:00Z
    question_id = _schedule(client, "Future plans?", nanos)

    listing = client.get("/api/admin/questions", headers=_headers(ALICE)).json()
    assert [q["id"] for q in listing["upcoming"]] == [question_id]
    assert listing["upcoming"][0]["scheduled_date"] == "2024-01-10"

    response = client.put(
        f"/api/admin/questions/{question_id}",
        json={"text": "Weekend plans?", "date": "2024-01-13"},
        headers=_headers(ALICE),
    )
    assert response.status_code == 200
    assert response.json()["question"]["text"] == "Weekend plans?"

    bad_date = client.put(
        f"/api/admin/questions/{question_id}", json={"text": "x", "date": "13/01/2024"}, headers=_headers(ALICE)
    )
    assert bad_date.status_code == 400

    unknown = client.put("/api/admin/questions/nope", json={"text": "x", "date": "2024-01-13"}, headers=_headers(ALICE))
    assert unknown.status_code == 404


def test_store_outage_is_retryable(client, service, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StoreUnavailable("database is locked")

    monkeypatch.setattr(service.database, "get_latest_questions_on_or_before", unavailable)
    response = client.get("/api/questions/today", headers=_headers(ALICE))
    assert response.status_code == 503
    assert response.headers["Retry-After"] == "3"
    assert response.json()["error"]["code"] == "store_unavailable"
