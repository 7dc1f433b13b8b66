"""UI strings the tutor client itself emits, per locale."""

from dataclasses import dataclass

DEFAULT_LOCALE = "en-US"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en-US": {
        "sorry_trouble_responding": (
            "I'm sorry, I'm having trouble responding right now. Let's continue practicing!"
        ),
        "keep_practicing": "Let's keep practicing!",
        "tutor_thinking": "Tutor is thinking...",
        "enter_learning_goal": "Enter your learning goal:",
        "translation": "Czech translation",
    },
    "cs-CZ": {
        "sorry_trouble_responding": (
            "Omlouvám se, mám potíže s odpovědí. Pokračujme v procvičování!"
        ),
        "keep_practicing": "Pokračujme v procvičování!",
        "tutor_thinking": "Tutor přemýšlí...",
        "enter_learning_goal": "Zadejte svůj výukový cíl:",
        "translation": "Český překlad",
    },
}


def find_matching_locale(locale: str) -> str:
    """Exact match first, then any locale sharing the language, else the default."""
    if locale in TRANSLATIONS:
        return locale
    language = locale.split("-")[0].lower()
    for key in TRANSLATIONS:
        if key.lower().startswith(language + "-"):
            return key
    return DEFAULT_LOCALE


@dataclass(frozen=True)
class Locale:
    """Resolved UI locale, passed explicitly to whoever renders strings."""

    code: str = DEFAULT_LOCALE

    @classmethod
    def resolve(cls, requested: str | None) -> "Locale":
        return cls(find_matching_locale(requested or DEFAULT_LOCALE))

    def t(self, key: str) -> str:
        return (
            TRANSLATIONS.get(self.code, {}).get(key)
            or TRANSLATIONS[DEFAULT_LOCALE].get(key)
            or key
        )
