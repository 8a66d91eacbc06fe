import json

from fastapi.testclient import TestClient

from eduai.main import app

client = TestClient(app)

TEXT = "Volcanoes form where magma rises through weaknesses in the crust. Eruptions release ash and lava."


def test_quiz_route(fake_gateway):
    fake_gateway.invoke_text.return_value = json.dumps([
        {"question": "Where does magma rise?", "options": ["a", "b", "c", "d"], "correctAnswer": 2,
         "explanation": "Weak crust", "category": "Conceptual"},
    ])

    resp = client.post("/api/quiz", json={"text": TEXT})

    assert resp.status_code == 200
    body = resp.json()
    assert body["structured"] is True
    assert body["result"][0]["correctAnswer"] == 2
    assert body["result"][0]["category"] == "Conceptual"


def test_quiz_route_fallback(fake_gateway):
    fake_gateway.invoke_text.side_effect = RuntimeError("throttled")

    resp = client.post("/api/quiz", json={"text": TEXT})

    assert resp.status_code == 200
    assert resp.json()["structured"] is False
    assert resp.json()["result"]


def test_quiz_route_empty_text(fake_gateway):
    resp = client.post("/api/quiz", json={"text": " "})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Article content cannot be empty"
    fake_gateway.invoke_text.assert_not_called()


def test_mindmap_route(fake_gateway):
    fake_gateway.invoke_text.return_value = json.dumps({"title": "Volcanoes", "nodes": [{"id": "v", "text": "Volcano"}]})

    resp = client.post("/api/mindmap", json={"text": TEXT})

    assert resp.status_code == 200
    assert resp.json() == {
        "result": {"title": "Volcanoes", "nodes": [{"id": "v", "text": "Volcano"}], "connections": []},
        "structured": True,
    }


def test_mindmap_route_empty_text(fake_gateway):
    resp = client.post("/api/mindmap", json={})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Text content cannot be empty"


def test_chatbox_route(fake_gateway):
    fake_gateway.invoke_text.return_value = "Lava is molten rock above ground."

    resp = client.post("/api/chatbox", json={
        "message": "What is lava?",
        "conversationHistory": [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello!"}],
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["response"] == "Lava is molten rock above ground."
    assert body["structured"] is True
    assert body["model"]
    assert body["timestamp"]
    assert len(fake_gateway.invoke_text.call_args.kwargs["history"]) == 2


def test_chatbox_route_model_down(fake_gateway):
    fake_gateway.invoke_text.side_effect = RuntimeError("down")

    resp = client.post("/api/chatbox", json={"message": "hello there"})

    assert resp.status_code == 200
    assert resp.json()["response"].startswith("Hello! I'm your AI study assistant")
    assert resp.json()["structured"] is False


def test_chatbox_requires_string_message(fake_gateway):
    for payload in ({}, {"message": 42}, {"message": ""}):
        resp = client.post("/api/chatbox", json=payload)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Message is required and must be a string"
    fake_gateway.invoke_text.assert_not_called()
