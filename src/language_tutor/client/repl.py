"""Terminal front-end for a tutor session."""

import asyncio
from collections.abc import Callable

import structlog

from language_tutor.client.locale import Locale
from language_tutor.client.session import TutorSession
from language_tutor.client.transport import GatewayTransport
from language_tutor.config import get_settings
from language_tutor.log_config import configure_logging
from language_tutor.models.session import ConversationMessage

logger = structlog.get_logger()

HELP = """\
Commands:
  /lang <english|swedish|italian>  switch language (clears the conversation)
  /goals                           list learning goals
  /goal <text>                     add a learning goal
  /done <goal id>                  toggle a goal's completion
  /tr <message id>                 toggle a message's translation
  /assess                          assess your level
  /profile                         show your progress
  /quit                            leave
Anything else is sent to the tutor."""


def format_message(session: TutorSession, message: ConversationMessage) -> str:
    line = f"[{message.id}] {message.sender.value}: {message.text}"
    if message.translation and message.id in session.translated_messages:
        line += f"\n    ({session.locale.t('translation')}: {message.translation})"
    return line


def _format_goals(session: TutorSession) -> str:
    return "\n".join(
        f"[{goal.id}] {'x' if goal.completed else ' '} {goal.text} ({goal.progress}%)"
        for goal in session.goals
    )


async def handle_line(
    session: TutorSession, line: str, notify: Callable[[str], None] = print
) -> str | None:
    """Apply one line of input to the session and return text to print.

    ``notify`` receives the progress line shown while the tutor is answering.
    Returns None when the user asked to quit.
    """
    command, _, argument = line.strip().partition(" ")
    argument = argument.strip()

    if command == "/quit":
        return None
    if command == "/help":
        return HELP
    if command == "/lang":
        try:
            session.change_language(argument)
        except ValueError as exc:
            return str(exc)
        return f"Language: {session.selected_language.display_name}\n{_format_goals(session)}"
    if command == "/goals":
        return _format_goals(session)
    if command == "/goal":
        goal = session.add_custom_goal(argument)
        return f"Added goal [{goal.id}]" if goal else session.locale.t("enter_learning_goal")
    if command in ("/done", "/tr"):
        if not argument.isdigit():
            return f"Usage: {command} <id>"
        if command == "/done":
            goal = session.toggle_goal_completion(int(argument))
            return _format_goals(session) if goal else f"No goal {argument}"
        session.toggle_message_translation(int(argument))
        match = next((m for m in session.messages if m.id == int(argument)), None)
        return format_message(session, match) if match else f"No message {argument}"
    if command == "/assess":
        analysis = await session.analyze_proficiency()
        if analysis is None:
            return session.locale.t("keep_practicing")
        return f"{analysis.level.value} ({analysis.confidence:.0%}): {analysis.reasoning}"
    if command == "/profile":
        profile = session.profile
        return (
            f"Level: {profile.proficiency_level.value}, messages: {profile.total_message_count}, "
            f"vocabulary: {len(profile.vocabulary)} words, accuracy: {profile.grammar_accuracy}%"
        )

    session.draft = line
    if not session.can_send:
        return ""
    sending = asyncio.create_task(session.send_message())
    await asyncio.sleep(0)
    if session.busy:
        notify(session.locale.t("tutor_thinking"))
    reply = await sending
    if reply is None:
        return ""
    output = format_message(session, reply)
    if session.feedback and session.feedback.corrections:
        output += "\n    " + "; ".join(session.feedback.corrections)
    return output


async def run(session: TutorSession) -> None:
    print(HELP)
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        output = await handle_line(session, line)
        if output is None:
            break
        if output:
            print(output)


def main() -> None:
    """Chat with the tutor through the configured gateway."""
    configure_logging()
    settings = get_settings()
    session = TutorSession(
        GatewayTransport(settings.gateway_url, timeout=settings.client_timeout_seconds),
        locale=Locale.resolve(settings.ui_locale),
    )
    logger.info("chat_client_started", gateway_url=settings.gateway_url)
    asyncio.run(run(session))


if __name__ == "__main__":
    main()
