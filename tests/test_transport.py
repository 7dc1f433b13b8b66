"""Tests for the client's HTTP transport to the gateway."""

import json

import httpx
import pytest

from fakes import make_reply
from language_tutor.client.transport import GatewayTransport
from language_tutor.models.result import Err, ErrorKind, Ok
from language_tutor.models.tutor import (
    AssessmentRequest,
    ChatRequest,
    CompletionRequest,
    ConversationTurn,
    Language,
    ProficiencyLevel,
    TutorOptions,
)


def _transport(handler) -> GatewayTransport:
    return GatewayTransport("http://gateway.test/", transport=httpx.MockTransport(handler))


@pytest.fixture
def chat_request():
    return ChatRequest(
        message="Hej!",
        conversation_history=[ConversationTurn(sender="tutor", text="Välkommen!")],
        user_profile=TutorOptions(
            selected_language=Language.SWEDISH,
            target_language_only_mode=True,
        ),
    )


class TestChat:
    async def test_success(self, chat_request):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=make_reply().to_wire())

        result = await _transport(handler).chat(chat_request)

        assert isinstance(result, Ok)
        assert result.value == make_reply()
        assert seen[0].url == "http://gateway.test/api/chat"

    async def test_body_is_camel_case(self, chat_request):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=make_reply().to_wire())

        await _transport(handler).chat(chat_request)

        body = bodies[0]
        assert body["message"] == "Hej!"
        assert body["conversationHistory"] == [{"sender": "tutor", "text": "Välkommen!"}]
        assert body["userProfile"] == {
            "proficiencyLevel": "Beginner",
            "selectedLanguage": "swedish",
            "showLessonMode": False,
            "targetLanguageOnlyMode": True,
        }

    async def test_validation_error_status(self, chat_request):
        result = await _transport(
            lambda request: httpx.Response(400, json={"error": "Message is required"})
        ).chat(chat_request)
        assert isinstance(result, Err)
        assert result.kind is ErrorKind.INVALID_REQUEST
        assert result.message == "Message is required"

    async def test_server_error_without_json(self, chat_request):
        result = await _transport(
            lambda request: httpx.Response(502, text="Bad Gateway")
        ).chat(chat_request)
        assert result.kind is ErrorKind.UPSTREAM
        assert result.message == "Gateway returned HTTP 502"

    async def test_unreachable(self, chat_request):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _transport(handler).chat(chat_request)
        assert result.kind is ErrorKind.TRANSPORT
        assert result.message == "Gateway unreachable"

    async def test_timeout(self, chat_request):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        result = await _transport(handler).chat(chat_request)
        assert isinstance(result, Err)
        assert result.kind is ErrorKind.TRANSPORT
        assert result.message == "Gateway unreachable"

    async def test_non_json_success_body(self, chat_request):
        result = await _transport(lambda request: httpx.Response(200, text="OK")).chat(chat_request)
        assert result == Err(ErrorKind.TRANSPORT, "Malformed gateway response")

    async def test_unexpected_shape(self, chat_request):
        result = await _transport(
            lambda request: httpx.Response(200, json={"reply": "Hej"})
        ).chat(chat_request)
        assert result.kind is ErrorKind.TRANSPORT
        assert result.message == "Unexpected gateway response shape"


class TestOtherEndpoints:
    async def test_complete_path(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json=make_reply().to_wire())

        result = await _transport(handler).complete(CompletionRequest(prompt="Say hi"))
        assert isinstance(result, Ok)
        assert paths == ["/api/complete"]

    async def test_assess(self):
        analysis = {
            "level": "Advanced",
            "confidence": 0.7,
            "reasoning": "Complex clauses",
            "details": {},
            "levelProgression": {"currentStage": "Advanced"},
        }
        result = await _transport(lambda request: httpx.Response(200, json=analysis)).assess(
            AssessmentRequest(target_language=Language.ITALIAN)
        )
        assert isinstance(result, Ok)
        assert result.value.level is ProficiencyLevel.ADVANCED
        assert result.value.level_progression.current_stage == "Advanced"
