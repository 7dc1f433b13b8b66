"""Wire models exchanged between the tutor client and the gateway."""

from enum import StrEnum
from typing import Any

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = structlog.get_logger()


class ProficiencyLevel(StrEnum):
    """Coarse learner skill levels."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    NATIVE = "Native"

    @classmethod
    def parse(cls, value: Any) -> "ProficiencyLevel | None":
        """Case-insensitive lookup, None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        for level in cls:
            if level.value.lower() == value.strip().lower():
                return level
        return None

    @classmethod
    def from_message_count(cls, count: int) -> "ProficiencyLevel":
        """Estimate level from the number of user messages alone."""
        if count >= 25:
            return cls.ADVANCED
        elif count >= 15:
            return cls.INTERMEDIATE
        else:
            return cls.BEGINNER


class Language(StrEnum):
    """Target languages the tutor teaches."""

    ENGLISH = "english"
    SWEDISH = "swedish"
    ITALIAN = "italian"

    @property
    def display_name(self) -> str:
        return _LANGUAGE_NAMES[self]

    @classmethod
    def parse(cls, value: Any) -> "Language | None":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_LANGUAGE_NAMES = {
    Language.ENGLISH: "English",
    Language.SWEDISH: "Swedish",
    Language.ITALIAN: "Italian",
}


class WireModel(BaseModel):
    """Base for JSON bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ConversationTurn(WireModel):
    """One prior message as sent in a chat request."""

    sender: str
    text: str


class TutorOptions(WireModel):
    """Every recognised ``userProfile`` option with its default.

    Unrecognised level or language values fall back to the defaults
    instead of failing the request.
    """

    proficiency_level: ProficiencyLevel = ProficiencyLevel.BEGINNER
    selected_language: Language = Language.ENGLISH
    show_lesson_mode: bool = False
    target_language_only_mode: bool = Field(
        default=False,
        serialization_alias="targetLanguageOnlyMode",
        validation_alias=AliasChoices(
            "targetLanguageOnlyMode", "englishOnlyMode", "target_language_only_mode"
        ),
    )

    @field_validator("proficiency_level", mode="before")
    @classmethod
    def _lenient_level(cls, value: Any) -> ProficiencyLevel:
        level = ProficiencyLevel.parse(value)
        if level is None:
            logger.warning("unknown_proficiency_level", value=value)
            return ProficiencyLevel.BEGINNER
        return level

    @field_validator("selected_language", mode="before")
    @classmethod
    def _lenient_language(cls, value: Any) -> Language:
        language = Language.parse(value)
        if language is None:
            logger.warning("unknown_language", value=value)
            return Language.ENGLISH
        return language


class ChatRequest(WireModel):
    message: str = ""
    conversation_history: list[ConversationTurn] = Field(default_factory=list)
    user_profile: TutorOptions | None = None
    learning_goals: list[str] = Field(default_factory=list)


class CompletionRequest(WireModel):
    prompt: str = ""
    user_profile: TutorOptions | None = None


class AssessmentRequest(WireModel):
    messages: list[ConversationTurn] = Field(default_factory=list)
    target_language: Language = Language.ENGLISH

    @field_validator("target_language", mode="before")
    @classmethod
    def _lenient_language(cls, value: Any) -> Language:
        return Language.parse(value) or Language.ENGLISH


class Feedback(WireModel):
    positive: list[str] = Field(default_factory=list)
    corrections: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class GrammarAnalysis(WireModel):
    accuracy: int = Field(default=80, ge=0, le=100)
    detected_level: str = ProficiencyLevel.BEGINNER.value
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class TutorReply(WireModel):
    """Fixed-shape tutoring response; every key is always present."""

    tutor_response: str = Field(min_length=1)
    czech_translation: str | None = None
    feedback: Feedback = Field(default_factory=Feedback)
    grammar_analysis: GrammarAnalysis = Field(default_factory=GrammarAnalysis)
    vocabulary_used: list[str] = Field(default_factory=list, max_length=5)
    progress_notes: str = ""


class AnalysisDetails(WireModel):
    grammar_accuracy: int = Field(default=70, ge=0, le=100)
    vocabulary_level: str = "Basic"
    sentence_complexity: str = "Simple"
    language_consistency: str = "Good"
    strong_points: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)
    error_count: int = Field(default=0, ge=0)
    average_sentence_length: float = 5.0


class LevelProgression(WireModel):
    current_stage: str = ProficiencyLevel.BEGINNER.value
    next_milestone: str = "Continue practicing"
    estimated_progress: str = "50%"


class ProficiencyAnalysis(WireModel):
    """Assessment of the learner's level over a whole conversation."""

    level: ProficiencyLevel
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    reasoning: str = ""
    details: AnalysisDetails = Field(default_factory=AnalysisDetails)
    level_progression: LevelProgression = Field(default_factory=LevelProgression)


class ErrorBody(BaseModel):
    error: str
    details: str | None = None
