import pytest
from fastapi.testclient import TestClient

from eduai.infra.activity_db import get_activity_repository
from eduai.main import app
from tests.utils.sqlite_activity_repo import SQLiteActivityRepository

client = TestClient(app)


@pytest.fixture
def sqlite_repo(tmp_path):
    repo = SQLiteActivityRepository(db_path=str(tmp_path / "history.db"))
    repo.ensure_schema()
    app.dependency_overrides[get_activity_repository] = lambda: repo
    yield repo
    app.dependency_overrides = {}


def test_recorded_activity_is_listed(sqlite_repo):
    resp = client.post("/api/history", json={
        "userEmail": "student@example.com",
        "activityType": "exam",
        "title": "Biology mock paper",
        "inputText": "chapter 3",
        "result": {"examContent": "Q1. Define osmosis."},
        "status": "completed",
        "duration": 45,
        "metadata": {"difficulty": "hard"},
    })
    assert resp.status_code == 200
    activity_id = resp.json()["activityId"]

    resp = client.get("/api/history", params={"email": "student@example.com"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    item = body["activities"][0]
    assert item["id"] == activity_id
    assert item["type"] == "exam"
    assert item["title"] == "Biology mock paper"
    assert item["status"] == "completed"
    assert item["duration"] == 45
    assert item["result"] == {"examContent": "Q1. Define osmosis."}
    assert item["metadata"] == {"difficulty": "hard"}


def test_history_is_newest_first_and_scoped_to_user(sqlite_repo):
    for title in ("first", "second"):
        client.post("/api/history", json={"userEmail": "a@example.com", "activityType": "chat", "title": title})
    client.post("/api/history", json={"userEmail": "b@example.com", "activityType": "quiz", "title": "other"})

    body = client.get("/api/history", headers={"x-user-email": "a@example.com"}).json()

    assert [a["title"] for a in body["activities"]] == ["second", "first"]


def test_failed_status_survives_roundtrip(sqlite_repo):
    client.post("/api/history", json={
        "userEmail": "a@example.com",
        "activityType": "video",
        "title": "Volcanoes",
        "status": "failed",
    })

    item = client.get("/api/history", params={"email": "a@example.com"}).json()["activities"][0]

    assert item["status"] == "failed"
    assert item["duration"] == 0
