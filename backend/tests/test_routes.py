"""Tests for the HTTP handlers."""

import json
import threading
import time
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from db import ChatStoreError
from dependencies import (
    get_chat_store,
    get_deep_gateway,
    get_fast_gateway,
    get_send_orchestrator,
)
from llm.base import ModelInvocationError
from main import app
from services.orchestrator import SendOrchestrator
from services.types import Speaker, StoredTurn


@pytest.fixture
def client(store, uploader, gateway):
    """Test client wired to the in-memory fakes."""
    orchestrator = SendOrchestrator(store, uploader, gateway)
    app.dependency_overrides[get_chat_store] = lambda: store
    app.dependency_overrides[get_fast_gateway] = lambda: gateway
    app.dependency_overrides[get_deep_gateway] = lambda: gateway
    app.dependency_overrides[get_send_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestDispatchEndpoint:
    """Tests for POST /api/chat."""

    def test_answer(self, client, gateway):
        """Test a valid question returns the answer."""
        response = client.post(
            "/api/chat",
            json={
                "question": "What is mitosis?",
                "systemPrompt": "Be brief.",
                "history": [
                    {"role": "user", "content": "hi"},
                    {"role": "assistant", "content": ""},
                ],
            },
        )

        assert response.status_code == 200
        assert response.json() == {"answer": "Mitosis is cell division."}
        blocks = gateway.calls[0]
        assert len(blocks) == 3
        assert blocks[0].text_parts[0].text == "Be brief."

    def test_image_aliases(self, client, gateway):
        """Test both image field names reach the model."""
        client.post("/api/chat", json={"question": "a", "imageData": "https://x.io/a.png"})
        client.post("/api/chat", json={"question": "b", "imageBase64": "AAAA"})

        first = gateway.calls[0][-1].media_parts[0].media
        second = gateway.calls[1][-1].media_parts[0].media
        assert first.mime_type == "image/png"
        assert second.mime_type == "image/jpeg"

    def test_document_attachment(self, client, gateway):
        """Test a document is sent after the image as a PDF part."""
        client.post(
            "/api/chat",
            json={"question": "Summarize", "imageData": "AAAA", "documentData": "JVBERi0"},
        )

        media = [p.media for p in gateway.calls[0][-1].media_parts]
        assert [m.mime_type for m in media] == ["image/jpeg", "application/pdf"]

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"question": 42},
            {"systemPrompt": "no question"},
            {"question": "q", "history": [{"role": "tutor", "content": "x"}]},
        ],
    )
    def test_invalid_payload(self, client, body):
        """Test malformed bodies get the fixed 400 error."""
        response = client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid payload"}

    def test_non_json_body(self, client):
        """Test a body that is not JSON is an invalid payload."""
        response = client.post(
            "/api/chat", content=b"question=hi", headers={"Content-Type": "text/plain"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid payload"}

    def test_model_failure(self, client, gateway):
        """Test a model failure is reported as a 500 error."""
        gateway.error = ModelInvocationError("Model error: overloaded")

        response = client.post("/api/chat", json={"question": "What is mitosis?"})

        assert response.status_code == 500
        assert response.json() == {"error": "Model error: overloaded"}


class TestSendEndpoint:
    """Tests for POST /api/chat/send."""

    def test_send_and_read_history(self, client):
        """Test a send returns the result and both turns are readable."""
        response = client.post(
            "/api/chat/send", json={"owner_id": "u1", "question": "What is mitosis?"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["answer"] == "Mitosis is cell division."
        assert data["source"] == "textbook"
        assert data["lang"] == "en"
        assert data["image_uploaded"] is False

        history = client.get(
            "/api/chat/history", params={"owner_id": "u1", "chat_id": data["chat_id"]}
        ).json()
        assert history["total_count"] == 2
        assert [m["role"] for m in history["messages"]] == ["user", "assistant"]
        assert history["messages"][1]["source"] == "textbook"

    def test_model_failure_keeps_user_turn(self, client, gateway):
        """Test a model failure answers 502 with the apology and chat id."""
        gateway.error = ModelInvocationError("boom")

        response = client.post(
            "/api/chat/send", json={"owner_id": "u1", "question": "ما هو الانقسام؟"}
        )

        assert response.status_code == 502
        body = response.json()
        assert body["code"] == "3001"
        assert body["message"] == "حدث خطأ أثناء معالجة سؤالك. حاول لاحقًا."
        chat_id = body["error_details"]["chat_id"]

        history = client.get(
            "/api/chat/history", params={"owner_id": "u1", "chat_id": chat_id}
        ).json()
        assert [m["role"] for m in history["messages"]] == ["user"]

    def test_empty_send_is_invalid(self, client):
        """Test a send without text or image is rejected."""
        response = client.post("/api/chat/send", json={"owner_id": "u1", "question": ""})

        assert response.status_code == 400
        assert response.json()["code"] == "1001"

    def test_missing_owner_is_validation_error(self, client):
        """Test request validation errors use the envelope."""
        response = client.post("/api/chat/send", json={"question": "hi"})

        assert response.status_code == 422
        assert response.json()["code"] == "1000"

    def test_status_is_idle_after_send(self, client):
        """Test the typing indicator is cleared after a send."""
        chat_id = client.post(
            "/api/chat/send", json={"owner_id": "u1", "question": "hi"}
        ).json()["data"]["chat_id"]

        response = client.get("/api/chat/status", params={"chat_id": chat_id})

        assert response.json() == {"chat_id": chat_id, "typing": False}


class TestChatsEndpoints:
    """Tests for /api/chats."""

    def test_list_rename_delete(self, client, store):
        """Test the conversation management flow."""
        chat_id = client.post(
            "/api/chat/send", json={"owner_id": "u1", "question": "Photosynthesis"}
        ).json()["data"]["chat_id"]

        chats = client.get("/api/chats", params={"owner_id": "u1"}).json()["chats"]
        assert [c["title"] for c in chats] == ["Photosynthesis"]
        assert chats[0]["last_message_preview"] == "Mitosis is cell division."

        renamed = client.patch(
            f"/api/chats/{chat_id}", params={"owner_id": "u1"}, json={"title": "Biology"}
        )
        assert renamed.status_code == 200
        assert client.get("/api/chats", params={"owner_id": "u1"}).json()["chats"][0][
            "title"
        ] == "Biology"

        deleted = client.delete(f"/api/chats/{chat_id}", params={"owner_id": "u1"})
        assert deleted.status_code == 200
        assert client.get("/api/chats", params={"owner_id": "u1"}).json()["chats"] == []

    def test_rename_missing_chat(self, client):
        """Test renaming an unknown chat is a 404."""
        response = client.patch(
            "/api/chats/missing", params={"owner_id": "u1"}, json={"title": "x"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "1002"

    def test_delete_missing_chat(self, client):
        """Test deleting an unknown chat is a 404."""
        response = client.delete("/api/chats/missing", params={"owner_id": "u1"})

        assert response.status_code == 404
        assert response.json()["code"] == "1002"

    def test_delete_store_failure(self, client, store):
        """Test a store outage during delete is a store error, not a missing chat."""
        store.delete_conversation = AsyncMock(side_effect=ChatStoreError("unavailable"))

        response = client.delete("/api/chats/c1", params={"owner_id": "u1"})

        assert response.status_code == 500
        assert response.json()["code"] == "2001"


def _sse_frames(text: str) -> list[tuple[str, dict]]:
    """Parse an SSE body into (event, data) pairs."""
    frames = []
    for chunk in text.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in chunk.splitlines())
        frames.append((lines["event"], json.loads(lines["data"])))
    return frames


class TestStreamEndpoint:
    """Tests for GET /api/chat/stream."""

    def test_snapshot_per_change(self, client, store):
        """Test the stream sends the current turns, then one snapshot per change."""
        with TestClient(app) as live_client:
            chat_id = live_client.portal.call(store.create_conversation, "u1", "q")
            live_client.portal.call(
                store.append_turn, "u1", chat_id, StoredTurn(role=Speaker.USER, content="q")
            )

            result = {}

            def read_stream():
                result["response"] = live_client.get(
                    "/api/chat/stream", params={"owner_id": "u1", "chat_id": chat_id}
                )

            reader = threading.Thread(target=read_stream)
            reader.start()

            deadline = time.monotonic() + 5
            while ("u1", chat_id) not in store._subscribers:
                assert time.monotonic() < deadline, "stream never subscribed"
                time.sleep(0.01)

            live_client.portal.call(
                store.append_turn,
                "u1",
                chat_id,
                StoredTurn(role=Speaker.ASSISTANT, content="a"),
            )
            # Deleting the chat ends the subscription and closes the stream
            live_client.portal.call(store.delete_conversation, "u1", chat_id)
            reader.join(timeout=5)

        response = result["response"]
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        frames = _sse_frames(response.text)
        assert [event for event, _ in frames] == ["snapshot", "snapshot"]
        assert [m["content"] for m in frames[0][1]["messages"]] == ["q"]
        assert [(m["role"], m["content"]) for m in frames[1][1]["messages"]] == [
            ("user", "q"),
            ("assistant", "a"),
        ]
        assert frames[1][1]["chat_id"] == chat_id


class TestHealthEndpoint:
    """Tests for GET /api/health."""

    def test_healthy(self, client):
        """Test the in-memory store reports healthy."""
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["services"][0]["name"] == "chat_store:memory"
