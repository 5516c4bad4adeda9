"""Tests for the FastAPI web interface."""

import pytest

from cougar_tutor.config import CORS_HEADERS, GENERIC_ERROR_MESSAGE
from cougar_tutor.interfaces import web_app
from cougar_tutor.interfaces.web_app import ChatRequest, parse_chat_request
from cougar_tutor.errors import InputError

# ── POST /api/chat ──────────────────────────────────────────────────────────


class TestChat:
    def test_returns_reply(self, test_client, chat_client):
        resp = test_client.post("/api/chat", json={"message": "What is a limit?", "sessionId": "abc"})
        assert resp.status_code == 200
        assert resp.json() == {"reply": chat_client.content}

    def test_records_session_history(self, test_client, pipeline):
        test_client.post("/api/chat", json={"message": "What is a limit?", "sessionId": "abc"})
        test_client.post("/api/chat", json={"message": "And a derivative?", "sessionId": "abc"})
        roles = [t.role for t in pipeline.sessions.get("abc").turns]
        assert roles == ["system", "user", "assistant", "user", "assistant"]

    def test_default_book_is_used(self, test_client, vector_store):
        test_client.post(
            "/api/chat",
            json={"message": "optimization", "sessionId": "abc", "defaultBook": "unbound"},
        )
        assert vector_store.searches[0]["where"] == {"book": "unbound"}

    def test_cors_headers_on_success(self, test_client):
        resp = test_client.post("/api/chat", json={"message": "hi", "sessionId": "abc"})
        for header, value in CORS_HEADERS.items():
            assert resp.headers[header] == value

    def test_rejects_malformed_json(self, test_client, embedder, chat_client):
        resp = test_client.post(
            "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert "error" in resp.json()
        assert embedder.calls == []
        assert chat_client.calls == []

    def test_rejects_empty_body(self, test_client, embedder):
        resp = test_client.post("/api/chat", content=b"")
        assert resp.status_code == 400
        assert embedder.calls == []

    def test_rejects_non_object_json(self, test_client):
        resp = test_client.post("/api/chat", json=["message", "sessionId"])
        assert resp.status_code == 400

    def test_rejects_missing_session_id(self, test_client, chat_client):
        resp = test_client.post("/api/chat", json={"message": "hi"})
        assert resp.status_code == 400
        assert "sessionId" in resp.json()["error"]
        assert chat_client.calls == []

    def test_rejects_missing_message(self, test_client):
        resp = test_client.post("/api/chat", json={"sessionId": "abc"})
        assert resp.status_code == 400
        assert "message" in resp.json()["error"]

    def test_rejects_empty_message(self, test_client):
        resp = test_client.post("/api/chat", json={"message": "", "sessionId": "abc"})
        assert resp.status_code == 400

    def test_rejects_blank_message_before_embedding(self, test_client, embedder, chat_client):
        resp = test_client.post("/api/chat", json={"message": "   ", "sessionId": "abc"})
        assert resp.status_code == 400
        assert "message" in resp.json()["error"]
        assert embedder.calls == []
        assert chat_client.calls == []

    def test_error_responses_carry_cors_headers(self, test_client):
        resp = test_client.post("/api/chat", content=b"nope")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_upstream_failure_is_generic_500(self, failing_test_client):
        resp = failing_test_client.post("/api/chat", json={"message": "hi", "sessionId": "abc"})
        assert resp.status_code == 500
        assert resp.json() == {"error": GENERIC_ERROR_MESSAGE}
        assert "10.0.0.7" not in resp.text


# ── OPTIONS /api/chat ───────────────────────────────────────────────────────


class TestPreflight:
    def test_options_acknowledged(self, test_client, embedder):
        resp = test_client.options("/api/chat")
        assert resp.status_code == 200
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]
        assert embedder.calls == []


# ── GET /health ─────────────────────────────────────────────────────────────


class TestHealth:
    def test_health_ok(self, test_client):
        test_client.post("/api/chat", json={"message": "hi", "sessionId": "abc"})
        resp = test_client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "sessions": 1, "chunks": 2}


# ── Module-level app ────────────────────────────────────────────────────────


class TestModuleApp:
    def test_app_is_built_once(self, monkeypatch):
        built = []

        def fake_create_app(pipeline=None):
            built.append(object())
            return built[-1]

        monkeypatch.setattr(web_app, "_app", None)
        monkeypatch.setattr(web_app, "create_app", fake_create_app)

        first = web_app.app
        assert web_app.app is first
        assert len(built) == 1


# ── Request parsing ─────────────────────────────────────────────────────────


class TestParseChatRequest:
    def test_defaults(self):
        request = parse_chat_request(b'{"message": "hi", "sessionId": "abc"}')
        assert request == ChatRequest(message="hi", session_id="abc")
        assert request.context == "free_use"

    def test_optional_fields(self):
        request = parse_chat_request(
            b'{"message": "hi", "sessionId": "abc", "context": "exam_prep", "defaultBook": "unbound"}'
        )
        assert request.context == "exam_prep"
        assert request.default_book == "unbound"

    @pytest.mark.parametrize(
        "body",
        [
            b"",
            b"null",
            b"42",
            b'{"message": 5, "sessionId": "abc"}',
            b'{"message": "hi", "sessionId": null}',
            b'{"message": "   ", "sessionId": "abc"}',
        ],
    )
    def test_invalid_bodies(self, body):
        with pytest.raises(InputError):
            parse_chat_request(body)
