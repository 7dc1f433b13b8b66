"""Tests for the terminal front-end."""

import asyncio
import random

import pytest

from fakes import FakeTransport, make_reply
from language_tutor.client.repl import HELP, handle_line
from language_tutor.client.session import TutorSession
from language_tutor.models.result import Ok


@pytest.fixture
def session():
    return TutorSession(FakeTransport([Ok(make_reply())]), rng=random.Random(3))


class TestCommands:
    async def test_quit(self, session):
        assert await handle_line(session, "/quit") is None

    async def test_help(self, session):
        assert await handle_line(session, "/help") == HELP

    async def test_change_language(self, session):
        output = await handle_line(session, "/lang italian")
        assert output.startswith("Language: Italian")
        assert "Master basic greetings (ciao, buongiorno)" in output

    async def test_unknown_language(self, session):
        assert await handle_line(session, "/lang klingon") == "Unsupported language: 'klingon'"

    async def test_add_goal(self, session):
        assert await handle_line(session, "/goal Order a coffee") == "Added goal [4]"
        assert await handle_line(session, "/goal") == "Enter your learning goal:"

    async def test_toggle_goal(self, session):
        output = await handle_line(session, "/done 1")
        assert "[1] x Master basic greetings (100%)" in output
        assert await handle_line(session, "/done one") == "Usage: /done <id>"
        assert await handle_line(session, "/done 42") == "No goal 42"

    async def test_assess_without_analysis(self, session):
        assert await handle_line(session, "/assess") == "Let's keep practicing!"


class TestConversation:
    async def test_message_round_trip(self, session):
        output = await handle_line(session, "Ciao")
        assert output.startswith("[2] tutor: Ciao! Come stai?")
        assert "Use 'sono'" in output

    async def test_thinking_notice_while_busy(self):
        transport = FakeTransport([Ok(make_reply())])
        transport.gate = asyncio.Event()
        session = TutorSession(transport)
        seen = []

        def notify(text):
            seen.append(text)
            transport.gate.set()

        output = await handle_line(session, "Ciao", notify)

        assert seen == ["Tutor is thinking..."]
        assert output.startswith("[2] tutor: Ciao! Come stai?")

    async def test_translation_toggle(self, session):
        await handle_line(session, "Ciao")
        output = await handle_line(session, "/tr 2")
        assert "(Czech translation: Ahoj! Jak se máš?)" in output
        assert await handle_line(session, "/tr 9") == "No message 9"

    async def test_profile(self, session):
        await handle_line(session, "Ciao")
        output = await handle_line(session, "/profile")
        assert output.startswith("Level: Intermediate, messages: 1")
        assert "vocabulary: 2 words" in output

    async def test_blank_line(self, session):
        assert await handle_line(session, "   ") == ""
        assert session.messages == []
