"""Learning goal tables and generation."""

import random
from collections.abc import Iterator

from language_tutor.models.session import LearningGoal
from language_tutor.models.tutor import Language, ProficiencyLevel

GOALS_PER_SESSION = 3
INITIAL_PROGRESS_CEILING = 30

DEFAULT_GOALS: list[tuple[str, int]] = [
    ("Master basic greetings", 20),
    ("Learn present tense verbs", 10),
    ("Expand food vocabulary", 0),
]

GOALS_BY_LEVEL: dict[ProficiencyLevel, dict[Language, list[str]]] = {
    ProficiencyLevel.BEGINNER: {
        Language.ENGLISH: [
            "Master basic greetings and introductions",
            "Learn present tense regular verbs",
            "Build everyday vocabulary",
            "Practice numbers 1-100",
            "Use basic question words (what, how, where)",
        ],
        Language.SWEDISH: [
            "Master basic greetings (hej, hej då)",
            "Learn present tense verbs",
            "Build family and home vocabulary",
            "Practice Swedish pronunciation",
            "Use basic question words",
        ],
        Language.ITALIAN: [
            "Master basic greetings (ciao, buongiorno)",
            "Learn present tense essere and avere",
            "Build food and family vocabulary",
            "Practice Italian pronunciation",
            "Learn basic sentence structure",
        ],
    },
    ProficiencyLevel.INTERMEDIATE: {
        Language.ENGLISH: [
            "Master past tenses",
            "Learn conditional mood",
            "Expand professional vocabulary",
            "Practice complex sentence structures",
            "Understand cultural expressions",
        ],
        Language.SWEDISH: [
            "Master past tenses (preteritum and perfekt)",
            "Learn Swedish word order",
            "Expand professional vocabulary",
            "Practice complex sentence structures",
            "Understand Swedish culture",
        ],
        Language.ITALIAN: [
            "Master past tenses (passato prossimo and imperfetto)",
            "Learn subjunctive mood basics",
            "Expand professional vocabulary",
            "Practice complex sentence structures",
            "Understand Italian culture",
        ],
    },
    ProficiencyLevel.ADVANCED: {
        Language.ENGLISH: [
            "Master all verb tenses",
            "Learn advanced conditional sentences",
            "Expand idiomatic expressions",
            "Practice nuanced conversation skills",
            "Understand cultural references",
        ],
        Language.SWEDISH: [
            "Master all verb tenses (including futurum and konjunktiv)",
            "Learn advanced Swedish syntax",
            "Expand idiomatic expressions",
            "Practice nuanced conversation skills",
            "Understand Swedish cultural references",
        ],
        Language.ITALIAN: [
            "Master all verb tenses (including futuro anteriore and congiuntivo)",
            "Learn advanced Italian syntax",
            "Expand idiomatic expressions",
            "Practice nuanced conversation skills",
            "Understand Italian cultural references",
        ],
    },
    ProficiencyLevel.NATIVE: {
        Language.ENGLISH: [
            "Maintain fluency in all tenses",
            "Use idiomatic expressions naturally",
            "Engage in complex discussions",
            "Understand cultural nuances deeply",
            "Teach others about the language",
        ],
        Language.SWEDISH: [
            "Maintain fluency in all tenses (including futurum and konjunktiv)",
            "Use idiomatic expressions naturally",
            "Engage in complex discussions",
            "Understand cultural nuances deeply",
            "Teach others about the language",
        ],
        Language.ITALIAN: [
            "Maintain fluency in all tenses (including futuro anteriore and congiuntivo)",
            "Use idiomatic expressions naturally",
            "Engage in complex discussions",
            "Understand cultural nuances deeply",
            "Teach others about the language",
        ],
    },
}


def default_goals(ids: Iterator[int]) -> list[LearningGoal]:
    """The seed goals a new session starts with."""
    return [
        LearningGoal(id=next(ids), text=text, progress=progress)
        for text, progress in DEFAULT_GOALS
    ]


def generate_learning_goals(
    level: ProficiencyLevel,
    language: Language,
    rng: random.Random,
    ids: Iterator[int],
) -> list[LearningGoal]:
    """Goals for a level/language pair with a small random head start.

    Args:
        level: Learner's current level.
        language: Target language.
        rng: Source of the initial progress values.
        ids: Goal id sequence owned by the session.

    Returns:
        Exactly ``GOALS_PER_SESSION`` incomplete goals.
    """
    texts = GOALS_BY_LEVEL[level][language][:GOALS_PER_SESSION]
    return [
        LearningGoal(id=next(ids), text=text, progress=rng.randrange(INITIAL_PROGRESS_CEILING))
        for text in texts
    ]
