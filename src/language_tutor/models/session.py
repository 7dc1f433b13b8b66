"""Client-side session state models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from language_tutor.models.tutor import ProficiencyLevel


class Sender(StrEnum):
    USER = "user"
    TUTOR = "tutor"


class ConversationMessage(BaseModel):
    """A single message in the conversation log. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    sender: Sender
    timestamp: datetime = Field(default_factory=datetime.now)
    translation: str | None = None


class UserProfile(BaseModel):
    """Aggregate learner statistics, updated from each tutor reply."""

    proficiency_level: ProficiencyLevel = ProficiencyLevel.BEGINNER
    total_message_count: int = Field(default=0, ge=0)
    vocabulary: set[str] = Field(default_factory=set)
    grammar_accuracy: int = Field(default=0, ge=0, le=100)


class LearningGoal(BaseModel):
    id: int
    text: str
    completed: bool = False
    progress: int = Field(default=0, ge=0, le=100)


class ProgressStats(BaseModel):
    """Sampled history of the learner's progress for charting."""

    vocabulary_growth: list[int] = Field(default_factory=list)
    grammar_accuracy: list[int] = Field(default_factory=list)
    conversation_length: list[int] = Field(default_factory=list)

    def sample(self, vocabulary_size: int, accuracy: int, conversation_length: int) -> None:
        self.vocabulary_growth.append(vocabulary_size)
        self.grammar_accuracy.append(accuracy)
        self.conversation_length.append(conversation_length)
