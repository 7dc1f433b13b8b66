"""Tutor session controller: message log, learner profile and goals."""

import itertools
import random

import structlog

from language_tutor.client.goals import default_goals, generate_learning_goals
from language_tutor.client.locale import Locale
from language_tutor.client.transport import GatewayTransport
from language_tutor.models.result import Err, ErrorKind, Ok
from language_tutor.models.session import (
    ConversationMessage,
    LearningGoal,
    ProgressStats,
    Sender,
    UserProfile,
)
from language_tutor.models.tutor import (
    AssessmentRequest,
    ChatRequest,
    ConversationTurn,
    Feedback,
    Language,
    ProficiencyAnalysis,
    ProficiencyLevel,
    TutorOptions,
    TutorReply,
)

logger = structlog.get_logger()

PROGRESS_SAMPLE_EVERY = 5


class TutorSession:
    """Client-side state for one learner conversation.

    All mutation happens on a single asyncio event loop, so the ``busy``
    flag is the only coordination needed: while a send is outstanding,
    further sends are ignored. Failures of the round trip are absorbed
    into a fixed apology message; nothing is raised to the caller.

    Args:
        transport: Gateway transport used for the network round trips.
        locale: UI locale for the strings the session emits.
        language: Initial target language.
        show_lesson_mode: Ask the tutor to teach rather than chat.
        target_language_only_mode: Suppress translations.
        rng: Random source for generated goal progress; seed it in tests.
    """

    def __init__(
        self,
        transport: GatewayTransport,
        locale: Locale | None = None,
        language: Language = Language.ENGLISH,
        show_lesson_mode: bool = False,
        target_language_only_mode: bool = False,
        rng: random.Random | None = None,
    ):
        self.transport = transport
        self.locale = locale or Locale()
        self.selected_language = language
        self.show_lesson_mode = show_lesson_mode
        self.target_language_only_mode = target_language_only_mode
        self.rng = rng or random.Random()

        self._message_ids = itertools.count(1)
        self._goal_ids = itertools.count(1)
        # bumped on every conversation reset; replies from an older one are dropped
        self._generation = 0

        self.messages: list[ConversationMessage] = []
        self.draft: str = ""
        self.busy: bool = False
        self.profile = UserProfile()
        self.goals: list[LearningGoal] = default_goals(self._goal_ids)
        self.feedback: Feedback | None = None
        self.translated_messages: set[int] = set()
        self.progress_stats = ProgressStats()
        self.analysis: ProficiencyAnalysis | None = None

    @property
    def can_send(self) -> bool:
        """Whether the send action is enabled for the current draft."""
        return bool(self.draft.strip()) and not self.busy

    @property
    def options(self) -> TutorOptions:
        return TutorOptions(
            proficiency_level=self.profile.proficiency_level,
            selected_language=self.selected_language,
            show_lesson_mode=self.show_lesson_mode,
            target_language_only_mode=self.target_language_only_mode,
        )

    async def send_message(self, text: str | None = None) -> ConversationMessage | None:
        """Send ``text`` (or the current draft) and record the tutor's answer.

        The user message is appended before the request is issued. Exactly
        one tutor message is appended once the request resolves, unless the
        conversation was reset by ``change_language`` in the meantime; then the
        reply is discarded and the profile is left alone.

        Returns:
            The tutor message, or None when the call was a no-op or its
            reply was discarded.
        """
        text = self.draft if text is None else text
        if not text.strip() or self.busy:
            return None

        history = [ConversationTurn(sender=m.sender.value, text=m.text) for m in self.messages]
        self._append(text.strip(), Sender.USER)
        self.draft = ""
        self.busy = True
        generation = self._generation
        try:
            result = await self.transport.chat(
                ChatRequest(
                    message=text.strip(),
                    conversation_history=history,
                    user_profile=self.options,
                    learning_goals=[goal.text for goal in self.goals],
                )
            )
        except Exception as exc:
            logger.exception("tutor_request_crashed")
            result = Err(ErrorKind.TRANSPORT, "Tutor request failed", details=str(exc))
        finally:
            self.busy = False

        if generation != self._generation:
            logger.info("stale_reply_dropped", language=self.selected_language.value)
            return None
        if isinstance(result, Ok):
            return self._apply_reply(result.value)

        logger.warning("tutor_reply_unavailable", kind=result.kind.value, error=result.message)
        return self._append(self.locale.t("sorry_trouble_responding"), Sender.TUTOR)

    async def analyze_proficiency(self) -> ProficiencyAnalysis | None:
        """Ask the gateway to assess the conversation and adopt the detected level."""
        request = AssessmentRequest(
            messages=[ConversationTurn(sender=m.sender.value, text=m.text) for m in self.messages],
            target_language=self.selected_language,
        )
        result = await self.transport.assess(request)
        if isinstance(result, Err):
            logger.warning("proficiency_analysis_unavailable", error=result.message)
            return None

        self.analysis = result.value
        self.profile.proficiency_level = result.value.level
        return result.value

    def toggle_goal_completion(self, goal_id: int) -> LearningGoal | None:
        """Flip a goal's completion; completing it sets progress to 100."""
        for goal in self.goals:
            if goal.id == goal_id:
                if not goal.completed:
                    goal.progress = 100
                goal.completed = not goal.completed
                return goal
        return None

    def add_custom_goal(self, text: str) -> LearningGoal | None:
        text = text.strip()
        if not text:
            return None
        goal = LearningGoal(id=next(self._goal_ids), text=text)
        self.goals.append(goal)
        return goal

    def toggle_message_translation(self, message_id: int) -> bool:
        """Show or hide a message's translation. Returns the new visibility."""
        if message_id in self.translated_messages:
            self.translated_messages.discard(message_id)
            return False
        self.translated_messages.add(message_id)
        return True

    def change_language(self, language: Language | str) -> None:
        """Start over in another language, keeping the learner's profile."""
        parsed = Language.parse(language)
        if parsed is None:
            raise ValueError(f"Unsupported language: {language!r}")

        self._generation += 1
        self.selected_language = parsed
        self.messages = []
        self.feedback = None
        self.translated_messages = set()
        self.goals = generate_learning_goals(
            self.profile.proficiency_level, parsed, self.rng, self._goal_ids
        )
        logger.info("language_changed", language=parsed.value)

    def _append(self, text: str, sender: Sender, translation: str | None = None) -> ConversationMessage:
        message = ConversationMessage(
            id=next(self._message_ids),
            text=text,
            sender=sender,
            translation=translation,
        )
        self.messages.append(message)
        return message

    def _apply_reply(self, reply: TutorReply) -> ConversationMessage:
        message = self._append(reply.tutor_response, Sender.TUTOR, reply.czech_translation)
        self.feedback = reply.feedback

        profile = self.profile
        level = ProficiencyLevel.parse(reply.grammar_analysis.detected_level)
        if level is not None:
            profile.proficiency_level = level
        profile.grammar_accuracy = reply.grammar_analysis.accuracy
        profile.vocabulary |= {word.lower() for word in reply.vocabulary_used}
        profile.total_message_count += 1

        if profile.total_message_count % PROGRESS_SAMPLE_EVERY == 0:
            self.progress_stats.sample(
                len(profile.vocabulary), profile.grammar_accuracy, len(self.messages)
            )
        return message
