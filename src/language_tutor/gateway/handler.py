"""Tutor gateway: validates requests, calls the upstream once, normalises the reply."""

import random

import structlog

from language_tutor.conversation.prompts import build_assessment_prompt, build_tutor_prompt
from language_tutor.gateway.fallback import (
    baseline_analysis,
    build_fallback_reply,
    fallback_analysis,
)
from language_tutor.gateway.normalize import normalize_analysis, normalize_reply
from language_tutor.gateway.upstream import CompletionClient, UpstreamError
from language_tutor.models.result import Err, ErrorKind, Ok
from language_tutor.models.session import Sender
from language_tutor.models.tutor import (
    AssessmentRequest,
    ChatRequest,
    CompletionRequest,
    ProficiencyAnalysis,
    TutorOptions,
    TutorReply,
)

logger = structlog.get_logger()

MIN_ASSESSMENT_MESSAGES = 3
MIN_ASSESSMENT_USER_MESSAGES = 2


class TutorGateway:
    """Stateless handler between the tutor client and the completion service.

    Every call is independent. Upstream failures and unusable replies are
    replaced by deterministic templates; only validation and configuration
    problems come back as ``Err``.

    Args:
        completion: Upstream client, or None when no credential is configured.
        rng: Random source for template variants; by default each message
            seeds its own, which keeps substitutions deterministic.
    """

    def __init__(
        self,
        completion: CompletionClient | None = None,
        rng: random.Random | None = None,
    ):
        self.completion = completion
        self.rng = rng

    async def chat(self, request: ChatRequest) -> Ok[TutorReply] | Err:
        """Answer one user message with a TutorReply."""
        message = request.message.strip()
        if not message:
            return Err(ErrorKind.INVALID_REQUEST, "Message is required")

        options = request.user_profile or TutorOptions()
        try:
            prompt = build_tutor_prompt(
                message, request.conversation_history, options, request.learning_goals
            )
            reply = await self._reply(message, prompt, options)
        except Exception as exc:
            logger.exception("chat_failed")
            return Err(ErrorKind.INTERNAL, "Internal server error", details=str(exc))
        return Ok(reply)

    async def complete(self, request: CompletionRequest) -> Ok[TutorReply] | Err:
        """Forward a caller-built prompt and normalise the answer into a TutorReply."""
        prompt = request.prompt.strip()
        if not prompt:
            return Err(ErrorKind.INVALID_REQUEST, "Prompt is required")
        if self.completion is None:
            logger.error("upstream_not_configured")
            return Err(ErrorKind.CONFIGURATION, "API key not configured")

        options = request.user_profile or TutorOptions()
        try:
            reply = await self._reply(prompt, prompt, options)
        except Exception as exc:
            logger.exception("completion_failed")
            return Err(ErrorKind.INTERNAL, "Internal server error", details=str(exc))
        return Ok(reply)

    async def assess(self, request: AssessmentRequest) -> Ok[ProficiencyAnalysis] | Err:
        """Assess the learner's level over the conversation so far."""
        if len(request.messages) < MIN_ASSESSMENT_MESSAGES:
            return Ok(baseline_analysis("Insufficient conversation data", 0.9, "20%"))

        user_messages = [
            turn.text for turn in request.messages
            if turn.sender == Sender.USER and turn.text.strip()
        ]
        if len(user_messages) < MIN_ASSESSMENT_USER_MESSAGES:
            return Ok(baseline_analysis("Too few user messages to analyze", 0.8, "30%"))

        fallback = fallback_analysis(len(user_messages))
        if self.completion is None:
            return Ok(fallback)

        try:
            prompt = build_assessment_prompt(user_messages, request.target_language)
            text = await self.completion.complete(prompt)
        except UpstreamError as exc:
            logger.warning("upstream_request_failed", operation="assess", error=str(exc))
            return Ok(fallback)
        except Exception as exc:
            logger.exception("assessment_failed")
            return Err(ErrorKind.INTERNAL, "Internal server error", details=str(exc))

        analysis = normalize_analysis(text, fallback)
        logger.info("proficiency_assessed", level=analysis.level.value)
        return Ok(analysis)

    async def _reply(self, message: str, prompt: str, options: TutorOptions) -> TutorReply:
        fallback = build_fallback_reply(message, options, self.rng)
        if self.completion is None:
            logger.info("reply_from_template", reason="upstream_not_configured")
            return fallback

        try:
            text = await self.completion.complete(prompt)
        except UpstreamError as exc:
            logger.warning("upstream_request_failed", error=str(exc))
            return fallback

        return normalize_reply(text, fallback, options)
