"""
Catalog module for healthguide package.

Contains the static language list, health topics, voice table and the
demonstration texts shown when real translation is unavailable.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import ValidationError


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    native_name: str


@dataclass(frozen=True)
class HealthTopic:
    key: str
    title: str
    content: str


# ----------------------------
# Languages
# ----------------------------
LANGUAGES: List[Language] = [
    Language("ach", "Acholi", "Acholi"),
    Language("teo", "Ateso", "Ateso"),
    Language("lug", "Luganda", "Oluganda"),
    Language("lgg", "Lugbara", "Lugbara"),
    Language("nyn", "Runyankole", "Runyankole"),
]

SOURCE_LANGUAGE = "eng"


# ----------------------------
# Health topics
# ----------------------------
HEALTH_TOPICS: Dict[str, HealthTopic] = {
    "malaria": HealthTopic(
        key="malaria",
        title="Malaria Prevention & Treatment",
        content=(
            "Malaria is a serious disease spread by mosquito bites. Symptoms include fever, "
            "chills, headache, and body aches. To prevent malaria: sleep under treated mosquito "
            "nets, use insect repellent, wear long sleeves and pants in the evening, and remove "
            "standing water around your home. If you have fever, seek medical care immediately. "
            "Take antimalarial medication as prescribed by a healthcare worker. Pregnant women "
            "and children under 5 are at highest risk and should take extra precautions."
        ),
    ),
    "covid19": HealthTopic(
        key="covid19",
        title="COVID-19 Prevention & Safety",
        content=(
            "COVID-19 is a respiratory illness that spreads through droplets when infected "
            "people cough, sneeze, or talk. Symptoms include fever, cough, difficulty breathing, "
            "loss of taste or smell, and fatigue. To protect yourself: wash hands frequently "
            "with soap for 20 seconds, wear a mask in crowded places, maintain physical distance "
            "from others, avoid touching your face, and get vaccinated when available. If you "
            "feel sick, stay home and seek medical advice. Cover coughs and sneezes with your "
            "elbow."
        ),
    ),
    "maternal": HealthTopic(
        key="maternal",
        title="Maternal & Child Health Care",
        content=(
            "Pregnant women should attend regular antenatal care visits to monitor the health "
            "of mother and baby. Eat nutritious foods including fruits, vegetables, and "
            "proteins. Take folic acid and iron supplements as recommended. Avoid alcohol, "
            "smoking, and harmful substances. Deliver with a skilled birth attendant at a health "
            "facility. After birth, breastfeed exclusively for 6 months. Ensure children receive "
            "all recommended vaccinations. Watch for danger signs like severe bleeding, high "
            "fever, or difficulty breathing and seek immediate medical care."
        ),
    ),
    "hygiene": HealthTopic(
        key="hygiene",
        title="Personal & Community Hygiene",
        content=(
            "Good hygiene prevents many diseases. Wash hands with soap and clean water before "
            "eating, after using the toilet, and after handling animals. Brush teeth twice daily "
            "and visit a dentist regularly. Keep your home and surroundings clean. Use clean, "
            "safe water for drinking and cooking. Store food properly to prevent contamination. "
            "Dispose of waste in designated areas. Keep latrines clean and away from water "
            "sources. Bathe regularly and wear clean clothes. Teach children proper hygiene "
            "habits from an early age."
        ),
    ),
    "nutrition": HealthTopic(
        key="nutrition",
        title="Nutrition & Healthy Eating",
        content=(
            "A balanced diet is essential for good health. Eat a variety of foods including "
            "fruits, vegetables, whole grains, proteins, and dairy products. Limit sugar, salt, "
            "and processed foods. Drink plenty of clean water daily. For children, breastfeed "
            "exclusively for the first 6 months, then introduce nutritious complementary foods. "
            "Ensure children get enough vitamins and minerals for proper growth. Adults should "
            "maintain a healthy weight through proper diet and exercise. If you have diabetes or "
            "other conditions, follow dietary advice from healthcare providers."
        ),
    ),
}

PREVIEW_LENGTH = 200


# ----------------------------
# Voices
# ----------------------------
VOICES: Dict[str, str] = {
    "lug": "pNInz6obpgDQGcFmaJgB",  # Adam
    "nyn": "EXAVITQu4vr4xnSDxMaL",  # Bella
    "ach": "VR6AewLTigWG4xSOukaG",  # Antoni
    "teo": "pFZP5JQG7iQjIQuC4Bku",  # Lily
    "lgg": "onwK4e9ZLuTAKqWW03F9",  # Daniel
}

DEFAULT_VOICE = "pNInz6obpgDQGcFmaJgB"

# Locales handed to local speech synthesis. None of these match the target
# language; they are stand-ins and can be overridden through configuration.
SPEECH_LOCALES: Dict[str, str] = {
    "lug": "sw-KE",
    "nyn": "sw-KE",
    "ach": "en-GB",
    "teo": "en-GB",
    "lgg": "fr-FR",
}

DEFAULT_LOCALE = "en-US"


# ----------------------------
# Lookups
# ----------------------------
def get_language(code: str) -> Language:
    """Return the language for a code, raising ValidationError if unknown."""
    for lang in LANGUAGES:
        if lang.code == code:
            return lang
    raise ValidationError(f"Unknown language code: {code!r}")


def get_topic(key: str) -> HealthTopic:
    """Return the health topic for a key, raising ValidationError if unknown."""
    try:
        return HEALTH_TOPICS[key]
    except KeyError:
        raise ValidationError(f"Unknown health topic: {key!r}") from None


def language_name(code: str) -> Optional[str]:
    """Display name for a language code, or None when the code is empty or unknown."""
    for lang in LANGUAGES:
        if lang.code == code:
            return lang.name
    return None


def voice_for(code: str) -> str:
    return VOICES.get(code, DEFAULT_VOICE)


def preview(topic: HealthTopic) -> str:
    return f"{topic.content[:PREVIEW_LENGTH]}..."


# ----------------------------
# Demonstration texts
# ----------------------------
def demo_translation(language: str, english_text: str) -> str:
    """Placeholder shown when no translation credential is configured."""
    return (
        f"[Demo Translation to {language}]\n\n{english_text}\n\n"
        f"[This is a demonstration. In production, this text would be translated to "
        f"{language} using the Sunbird Translate API. To enable real translation, "
        f"configure your API token.]"
    )


def fallback_translation(language: str, english_text: str) -> str:
    """Placeholder shown after a failed translation attempt."""
    return (
        f"[Demo Translation to {language}]\n\n{english_text}\n\n"
        f"[This is a demo. In a real scenario, this text would be translated to "
        f"{language} using the Sunbird Translate API.]"
    )
