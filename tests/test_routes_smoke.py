"""Smoke tests for API routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fakes import REPLY_KEYS, FakeCompletion, upstream_json
from language_tutor.api.errors import install_error_handlers
from language_tutor.api.routes import router
from language_tutor.gateway.handler import TutorGateway
from language_tutor.gateway.upstream import UpstreamError


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.upstream_api_key = None
    return settings


@pytest.fixture
def app():
    app = FastAPI()
    install_error_handlers(app)
    app.include_router(router)
    return app


@pytest.fixture
def client(app, mock_settings):
    with patch("language_tutor.api.routes.get_settings", return_value=mock_settings):
        with TestClient(app) as c:
            yield c


@pytest.fixture
def client_with_upstream(app):
    """Client whose gateway talks to a swappable fake upstream."""
    completion = FakeCompletion(text=upstream_json())
    with patch(
        "language_tutor.api.routes.get_gateway",
        side_effect=lambda: TutorGateway(completion),
    ):
        with TestClient(app) as c:
            yield c, completion


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestPreflightAndMethods:
    def test_options_returns_empty_body_with_cors_headers(self, client):
        response = client.options("/api/chat")
        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert "Content-Type" in response.headers["access-control-allow-headers"]

    @pytest.mark.parametrize("path", ["/api/chat", "/api/complete", "/api/assess"])
    def test_each_endpoint_answers_preflight(self, client, path):
        response = client.options(path)
        assert response.status_code == 200
        assert response.content == b""

    def test_unknown_path_is_not_found(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_browser_preflight(self, client):
        response = client.options(
            "/api/chat",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.content == b""

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_other_methods_not_allowed(self, client, method):
        response = client.request(method.upper(), "/api/chat")
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}


class TestChatEndpoint:
    def test_empty_body_is_rejected(self, client):
        response = client.post("/api/chat", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}

    def test_blank_message_is_rejected(self, client):
        response = client.post("/api/chat", json={"message": "   "})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_wrong_types_are_rejected(self, client):
        response = client.post("/api/chat", json={"message": 42})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request body"
        assert "message" in body["details"]

    def test_non_json_body_is_rejected(self, client):
        response = client.post(
            "/api/chat", content="hello", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_without_credential_returns_template_reply(self, client):
        response = client.post("/api/chat", json={"message": "hello"})
        assert response.status_code == 200
        body = response.json()
        assert set(body) == REPLY_KEYS
        assert isinstance(body["tutorResponse"], str) and body["tutorResponse"]
        assert set(body["feedback"]) == {"positive", "corrections", "suggestions"}
        assert set(body["grammarAnalysis"]) == {
            "accuracy", "detectedLevel", "strengths", "improvements",
        }
        assert response.headers["access-control-allow-origin"] == "*"

    def test_lone_surrogate_still_gets_template_reply(self, client):
        response = client.post(
            "/api/chat",
            content='{"message": "hi \\ud800 there"}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        body = response.json()
        assert set(body) == REPLY_KEYS
        assert body["vocabularyUsed"] == ["there"]

    def test_profile_options_select_template(self, client):
        response = client.post(
            "/api/chat",
            json={
                "message": "Ciao, come stai oggi?",
                "userProfile": {
                    "proficiencyLevel": "Intermediate",
                    "selectedLanguage": "italian",
                    "englishOnlyMode": True,
                },
            },
        )
        body = response.json()
        assert response.status_code == 200
        assert body["czechTranslation"] is None
        assert body["grammarAnalysis"]["detectedLevel"] == "Intermediate"
        assert body["vocabularyUsed"] == ["ciao", "come", "stai", "oggi"]

    def test_upstream_reply_is_passed_through(self, client_with_upstream):
        client, completion = client_with_upstream
        response = client.post(
            "/api/chat",
            json={
                "message": "Hello there",
                "conversationHistory": [{"sender": "tutor", "text": "Hi!"}],
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["tutorResponse"] == "Hello! How are you today?"
        assert body["grammarAnalysis"]["accuracy"] == 92
        assert len(completion.prompts) == 1

    def test_non_json_upstream_text_still_returns_reply(self, client_with_upstream):
        client, completion = client_with_upstream
        completion.text = "Sure! Let's talk about your day."
        response = client.post("/api/chat", json={"message": "hello"})
        assert response.status_code == 200
        assert set(response.json()) == REPLY_KEYS

    def test_upstream_failure_returns_reply(self, client_with_upstream):
        client, completion = client_with_upstream
        completion.error = UpstreamError("Upstream API error: 529")
        response = client.post("/api/chat", json={"message": "hello"})
        assert response.status_code == 200
        assert response.json()["tutorResponse"]

    def test_unexpected_failure_returns_500(self, client_with_upstream):
        client, completion = client_with_upstream
        completion.error = RuntimeError("boom")
        response = client.post("/api/chat", json={"message": "hello"})
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "details": "boom"}


class TestCompleteEndpoint:
    def test_missing_prompt(self, client):
        response = client.post("/api/complete", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}

    def test_without_credential_is_configuration_error(self, client):
        response = client.post("/api/complete", json={"prompt": "Say hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "API key not configured"}

    def test_with_upstream(self, client_with_upstream):
        client, _ = client_with_upstream
        response = client.post("/api/complete", json={"prompt": "Say hi"})
        assert response.status_code == 200
        assert response.json()["tutorResponse"] == "Hello! How are you today?"


class TestAssessEndpoint:
    def test_short_conversation(self, client):
        response = client.post(
            "/api/assess",
            json={"messages": [{"sender": "user", "text": "Hej"}], "targetLanguage": "swedish"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["level"] == "Beginner"
        assert body["reasoning"] == "Insufficient conversation data"
        assert "levelProgression" in body
