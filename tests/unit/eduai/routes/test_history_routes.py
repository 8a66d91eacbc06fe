import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from eduai.infra.activity_db import get_activity_repository
from eduai.main import app

client = TestClient(app)


@pytest.fixture
def repo():
    mock_repo = MagicMock()
    app.dependency_overrides[get_activity_repository] = lambda: mock_repo
    yield mock_repo
    app.dependency_overrides = {}


def test_history_requires_email(repo):
    resp = client.get("/api/history")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "User email is required"
    repo.list_activities_by_user.assert_not_called()


def test_history_by_query(repo):
    repo.list_activities_by_user.return_value = [
        {
            "id": 1,
            "type": "summary",
            "title": "Cells",
            "inputText": "cells",
            "result": {"summary": "s"},
            "status": "completed",
            "duration": 3,
            "metadata": {},
            "timestamp": "2024-05-01T12:00:00+00:00",
        }
    ]

    resp = client.get("/api/history", params={"email": "a@b.com"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["user"] == "a@b.com"
    assert body["activities"][0]["title"] == "Cells"
    repo.list_activities_by_user.assert_called_once_with("a@b.com")


def test_history_by_header(repo):
    repo.list_activities_by_user.return_value = []

    resp = client.get("/api/history", headers={"x-user-email": "h@b.com"})

    assert resp.status_code == 200
    assert resp.json() == {"activities": [], "total": 0, "user": "h@b.com"}


def test_history_store_failure(repo):
    repo.list_activities_by_user.side_effect = RuntimeError("connection refused")

    resp = client.get("/api/history", params={"email": "a@b.com"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Failed to fetch history"
    assert body["details"] == "connection refused"
    assert body["activities"] == []


def test_record_activity(repo):
    repo.create_activity.return_value = 17

    resp = client.post("/api/history", json={
        "userEmail": "a@b.com",
        "activityType": "quiz",
        "title": "Fractions",
        "result": {"questions": []},
        "duration": 30,
    })

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "activityId": 17, "message": "Activity recorded successfully"}
    activity = repo.create_activity.call_args.args[0]
    assert activity.type == "quiz"
    assert activity.status == "completed"
    assert activity.duration == 30


def test_record_activity_missing_fields(repo):
    resp = client.post("/api/history", json={"userEmail": "a@b.com", "title": "No type"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required fields: userEmail, activityType, title"
    repo.create_activity.assert_not_called()


@pytest.mark.parametrize("field,value", [("activityType", "podcast"), ("status", "pending")])
def test_record_activity_rejects_unknown_values(repo, field, value):
    payload = {"userEmail": "a@b.com", "activityType": "quiz", "title": "T", field: value}

    resp = client.post("/api/history", json=payload)

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Invalid activity")
    repo.create_activity.assert_not_called()


def test_record_activity_store_failure(repo):
    repo.create_activity.side_effect = RuntimeError("disk full")

    resp = client.post("/api/history", json={"userEmail": "a@b.com", "activityType": "chat", "title": "T"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to record activity", "details": "disk full"}
