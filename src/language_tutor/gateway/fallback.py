"""Deterministic template replies used when the upstream reply is unusable."""

import random
import re
import zlib

from language_tutor.models.tutor import (
    AnalysisDetails,
    Feedback,
    GrammarAnalysis,
    Language,
    LevelProgression,
    ProficiencyAnalysis,
    ProficiencyLevel,
    TutorOptions,
    TutorReply,
)

MAX_VOCABULARY = 5
FALLBACK_ACCURACY = 80

_WORD_RE = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")

# (tutor utterance in the target language, Czech translation)
Template = tuple[str, str]

TEMPLATES: dict[Language, dict[ProficiencyLevel, list[Template]]] = {
    Language.ENGLISH: {
        ProficiencyLevel.BEGINNER: [
            ("I understand you. Let's continue! What do you like to do?",
             "Rozumím vám. Pokračujme! Co rád děláte?"),
            ("Good! Tell me more, please. Where do you live?",
             "Dobře! Řekněte mi víc, prosím. Kde bydlíte?"),
        ],
        ProficiencyLevel.INTERMEDIATE: [
            ("I see what you mean. Could you tell me a bit more about that?",
             "Chápu, co myslíte. Mohl byste mi o tom říct něco víc?"),
            ("That's interesting! What happened next?",
             "To je zajímavé! Co se stalo potom?"),
        ],
        ProficiencyLevel.ADVANCED: [
            ("That's a fair point. How would you argue the opposite side?",
             "To je dobrý postřeh. Jak byste argumentoval pro opačnou stranu?"),
            ("I follow your reasoning. What led you to that conclusion?",
             "Rozumím vaší úvaze. Co vás k tomu závěru přivedlo?"),
        ],
        ProficiencyLevel.NATIVE: [
            ("Fair enough. What's your take on why people see it differently?",
             "Dobře. Proč to podle vás lidé vidí jinak?"),
        ],
    },
    Language.SWEDISH: {
        ProficiencyLevel.BEGINNER: [
            ("Jag förstår. Vi fortsätter! Vad tycker du om att göra?",
             "Rozumím. Pokračujme! Co rád děláte?"),
            ("Bra! Berätta mer, tack. Var bor du?",
             "Dobře! Řekněte mi víc, prosím. Kde bydlíte?"),
        ],
        ProficiencyLevel.INTERMEDIATE: [
            ("Jag förstår vad du menar. Kan du berätta lite mer om det?",
             "Chápu, co myslíte. Můžete mi o tom říct něco víc?"),
            ("Vad intressant! Vad hände sedan?",
             "To je zajímavé! Co se stalo potom?"),
        ],
        ProficiencyLevel.ADVANCED: [
            ("Det är en bra poäng. Hur skulle du argumentera för motsatsen?",
             "To je dobrý postřeh. Jak byste argumentoval pro opak?"),
        ],
        ProficiencyLevel.NATIVE: [
            ("Absolut. Varför tror du att folk ser annorlunda på det?",
             "Rozhodně. Proč si myslíte, že to lidé vidí jinak?"),
        ],
    },
    Language.ITALIAN: {
        ProficiencyLevel.BEGINNER: [
            ("Ho capito. Continuiamo! Che cosa ti piace fare?",
             "Rozumím. Pokračujme! Co rád děláš?"),
            ("Bene! Dimmi di più, per favore. Dove abiti?",
             "Dobře! Řekni mi víc, prosím. Kde bydlíš?"),
        ],
        ProficiencyLevel.INTERMEDIATE: [
            ("Capisco cosa intendi. Puoi raccontarmi qualcosa di più?",
             "Chápu, co myslíš. Můžeš mi říct něco víc?"),
            ("Che interessante! E poi cosa è successo?",
             "To je zajímavé! A co se stalo potom?"),
        ],
        ProficiencyLevel.ADVANCED: [
            ("È un'osservazione giusta. Come sosterresti la tesi opposta?",
             "To je správný postřeh. Jak bys obhajoval opačný názor?"),
        ],
        ProficiencyLevel.NATIVE: [
            ("Certo. Secondo te, perché la gente la vede diversamente?",
             "Jistě. Proč to podle tebe lidé vidí jinak?"),
        ],
    },
}

# UI-language strings: Czech by default, English in target-language-only mode
_FEEDBACK_TEXT = {
    False: {
        "positive": "Dobrá komunikace!",
        "suggestion": "Pokračujte v procvičování!",
        "strength": "Jasné vyjadřování",
        "improvement": "Pokračujte!",
        "progress": "Děláte pokroky!",
    },
    True: {
        "positive": "Good communication!",
        "suggestion": "Keep practicing!",
        "strength": "Clear expression",
        "improvement": "Keep going!",
        "progress": "Making progress!",
    },
}


def extract_vocabulary(text: str, limit: int = MAX_VOCABULARY) -> list[str]:
    """First ``limit`` distinct lowercase words longer than two letters."""
    words: list[str] = []
    for word in _WORD_RE.findall(text.lower()):
        if len(word) > 2 and word not in words:
            words.append(word)
            if len(words) == limit:
                break
    return words


def select_template(message: str, options: TutorOptions, rng: random.Random | None = None) -> Template:
    """Pick a template variant.

    Without an explicit ``rng`` the choice is seeded from the message, so the
    same message always gets the same variant.
    """
    variants = TEMPLATES[options.selected_language][options.proficiency_level]
    if rng is None:
        rng = random.Random(zlib.crc32(message.encode("utf-8", "surrogatepass")))
    return rng.choice(variants)


def build_fallback_reply(
    message: str, options: TutorOptions, rng: random.Random | None = None
) -> TutorReply:
    """Build the substitute TutorReply for a message.

    Args:
        message: The user's utterance (or free-text prompt).
        options: Learner options; language and level select the template.
        rng: Optional random source for the variant choice.

    Returns:
        A complete TutorReply, identical for identical inputs when no
        ``rng`` is given.
    """
    utterance, translation = select_template(message, options, rng)
    text = _FEEDBACK_TEXT[options.target_language_only_mode]
    return TutorReply(
        tutor_response=utterance,
        czech_translation=None if options.target_language_only_mode else translation,
        feedback=Feedback(
            positive=[text["positive"]],
            corrections=[],
            suggestions=[text["suggestion"]],
        ),
        grammar_analysis=GrammarAnalysis(
            accuracy=FALLBACK_ACCURACY,
            detected_level=options.proficiency_level.value,
            strengths=[text["strength"]],
            improvements=[text["improvement"]],
        ),
        vocabulary_used=extract_vocabulary(message),
        progress_notes=text["progress"],
    )


def baseline_analysis(reasoning: str, confidence: float, estimated_progress: str) -> ProficiencyAnalysis:
    """Analysis for conversations too short to assess."""
    return ProficiencyAnalysis(
        level=ProficiencyLevel.BEGINNER,
        confidence=confidence,
        reasoning=reasoning,
        details=AnalysisDetails(
            strong_points=["Getting started"],
            improvement_areas=["Continue practicing"],
        ),
        level_progression=LevelProgression(estimated_progress=estimated_progress),
    )


def fallback_analysis(user_message_count: int) -> ProficiencyAnalysis:
    """Estimate the level from conversation length when no assessment is available."""
    level = ProficiencyLevel.from_message_count(user_message_count)
    return ProficiencyAnalysis(
        level=level,
        confidence=0.6,
        reasoning="Fallback analysis based on conversation length",
        details=AnalysisDetails(
            strong_points=["Active participation"],
            improvement_areas=["Continue practicing"],
            error_count=2,
            average_sentence_length=6.0,
        ),
        level_progression=LevelProgression(current_stage=level.value),
    )
