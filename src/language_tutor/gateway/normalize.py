"""Coerce upstream completion text into the fixed reply shapes."""

import json
import math
import re
from typing import Any

import structlog

from language_tutor.gateway.fallback import MAX_VOCABULARY
from language_tutor.models.tutor import (
    AnalysisDetails,
    Feedback,
    GrammarAnalysis,
    LevelProgression,
    ProficiencyAnalysis,
    ProficiencyLevel,
    TutorOptions,
    TutorReply,
)

logger = structlog.get_logger()

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

TRANSLATION_KEYS = ("czechTranslation", "englishTranslation", "translation")


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Extract a JSON object from model output.

    Accepts bare JSON, JSON wrapped in a markdown code fence, or JSON
    surrounded by stray prose. Returns None when no object can be parsed.
    """
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            data = json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _str_list(value: Any, default: list[str]) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return list(default)
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _bounded_int(value: Any, default: int, low: int = 0, high: int = 100) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return default
    if not isinstance(value, int | float) or not math.isfinite(value):
        return default
    return max(low, min(high, round(value)))


def _bounded_float(value: Any, default: float, low: float = 0.0, high: float = 1000.0) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float) or not math.isfinite(value):
        return default
    return max(low, min(high, float(value)))


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _vocabulary(value: Any, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    words: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        word = item.strip().lower()
        if word and word not in words:
            words.append(word)
        if len(words) == MAX_VOCABULARY:
            break
    return words


def normalize_reply(text: str, fallback: TutorReply, options: TutorOptions) -> TutorReply:
    """Turn upstream text into a TutorReply.

    Args:
        text: Raw completion text from the upstream service.
        fallback: Template reply used wholesale when the text is unusable,
            and field by field for anything missing or invalid.
        options: Learner options from the request.

    Returns:
        A well-formed TutorReply. Never raises on bad input.
    """
    data = parse_json_object(text)
    if data is None:
        logger.warning("reply_substituted", reason="not_json", length=len(text))
        return fallback

    utterance = _text(data.get("tutorResponse"))
    if utterance is None:
        logger.warning("reply_substituted", reason="missing_tutor_response")
        return fallback

    translation = None
    if not options.target_language_only_mode:
        translation = next(
            (t for t in (_text(data.get(key)) for key in TRANSLATION_KEYS) if t),
            None,
        )

    feedback = _section(data, "feedback")
    grammar = _section(data, "grammarAnalysis")
    level = ProficiencyLevel.parse(grammar.get("detectedLevel")) or options.proficiency_level

    return TutorReply(
        tutor_response=utterance,
        czech_translation=translation,
        feedback=Feedback(
            positive=_str_list(feedback.get("positive"), fallback.feedback.positive),
            corrections=_str_list(feedback.get("corrections"), fallback.feedback.corrections),
            suggestions=_str_list(feedback.get("suggestions"), fallback.feedback.suggestions),
        ),
        grammar_analysis=GrammarAnalysis(
            accuracy=_bounded_int(grammar.get("accuracy"), fallback.grammar_analysis.accuracy),
            detected_level=level.value,
            strengths=_str_list(grammar.get("strengths"), fallback.grammar_analysis.strengths),
            improvements=_str_list(
                grammar.get("improvements"), fallback.grammar_analysis.improvements
            ),
        ),
        vocabulary_used=_vocabulary(data.get("vocabularyUsed"), fallback.vocabulary_used),
        progress_notes=_text(data.get("progressNotes")) or fallback.progress_notes,
    )


def normalize_analysis(text: str, fallback: ProficiencyAnalysis) -> ProficiencyAnalysis:
    """Turn upstream text into a ProficiencyAnalysis, or return ``fallback``."""
    data = parse_json_object(text)
    if data is None:
        logger.warning("analysis_substituted", reason="not_json")
        return fallback

    level = ProficiencyLevel.parse(data.get("level"))
    if level is None:
        logger.warning("analysis_substituted", reason="invalid_level", level=data.get("level"))
        return fallback

    details = _section(data, "details")
    progression = _section(data, "levelProgression")

    return ProficiencyAnalysis(
        level=level,
        confidence=_bounded_float(data.get("confidence"), 0.8, high=1.0),
        reasoning=_text(data.get("reasoning")) or "AI analysis completed",
        details=AnalysisDetails(
            grammar_accuracy=_bounded_int(details.get("grammarAccuracy"), 75),
            vocabulary_level=_text(details.get("vocabularyLevel")) or "Basic",
            sentence_complexity=_text(details.get("sentenceComplexity")) or "Simple",
            language_consistency=_text(details.get("languageConsistency")) or "Good",
            strong_points=_str_list(details.get("strongPoints"), []),
            improvement_areas=_str_list(details.get("improvementAreas"), []),
            error_count=_bounded_int(details.get("errorCount"), 0, high=10_000),
            average_sentence_length=_bounded_float(details.get("averageSentenceLength"), 5.0),
        ),
        level_progression=LevelProgression(
            current_stage=_text(progression.get("currentStage")) or level.value,
            next_milestone=_text(progression.get("nextMilestone")) or "Continue practicing",
            estimated_progress=_text(progression.get("estimatedProgress")) or "50%",
        ),
    )
