"""End-to-end tests: TutorSession over HTTP against the gateway app."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from fakes import FakeCompletion, upstream_json
from language_tutor.client.session import TutorSession
from language_tutor.client.transport import GatewayTransport
from language_tutor.gateway.handler import TutorGateway
from language_tutor.main import app
from language_tutor.models.session import Sender
from language_tutor.models.tutor import CompletionRequest, Language, ProficiencyLevel


@pytest.fixture
def transport():
    return GatewayTransport("http://testserver", transport=httpx.ASGITransport(app=app))


class TestWithoutCredential:
    @pytest.fixture(autouse=True)
    def no_credential(self):
        settings = MagicMock()
        settings.upstream_api_key = None
        with patch("language_tutor.api.routes.get_settings", return_value=settings):
            yield

    async def test_template_reply_reaches_session(self, transport):
        session = TutorSession(transport, language=Language.SWEDISH)
        reply = await session.send_message("Hej, jag heter Anna")

        assert reply.sender is Sender.TUTOR
        assert reply.translation
        assert session.profile.total_message_count == 1
        assert session.profile.grammar_accuracy == 80
        assert session.profile.vocabulary == {"hej", "jag", "heter", "anna"}

    async def test_complete_reports_configuration_error(self, transport):
        result = await transport.complete(CompletionRequest(prompt="Say hi"))
        assert result.message == "API key not configured"

    async def test_assessment_uses_conversation_length(self, transport):
        session = TutorSession(transport)
        for i in range(3):
            await session.send_message(f"This is message number {i}")

        analysis = await session.analyze_proficiency()

        assert analysis.level is ProficiencyLevel.BEGINNER
        assert analysis.reasoning == "Fallback analysis based on conversation length"


class TestWithUpstream:
    async def test_upstream_reply_reaches_session(self, transport):
        completion = FakeCompletion(text=upstream_json())
        with patch(
            "language_tutor.api.routes.get_gateway",
            side_effect=lambda: TutorGateway(completion),
        ):
            session = TutorSession(transport)
            reply = await session.send_message("Hello")

        assert reply.text == "Hello! How are you today?"
        assert session.profile.proficiency_level is ProficiencyLevel.INTERMEDIATE
        assert session.profile.vocabulary == {"hello", "today"}
        assert len(completion.prompts) == 1
