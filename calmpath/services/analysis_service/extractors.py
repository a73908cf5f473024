"""Trigger, distortion and advisory-list extraction for the local tier.

Unlike the signal detector these are additive: every category whose
keywords occur in the message is tagged.
"""
from typing import Iterable, Mapping, Tuple

from calmpath.shared.models import CrisisRiskLevel
from .config import (
    DISTORTION_KEYWORDS,
    LOCAL_TRIGGER_KEYWORDS,
    PHYSICAL_SYMPTOM_KEYWORDS,
)


def _tag(text: str, table: Mapping[str, Tuple[str, ...]]) -> Tuple[str, ...]:
    return tuple(
        tag for tag, keywords in table.items()
        if any(keyword in text for keyword in keywords)
    )


def extract_triggers(
    text: str,
    table: Mapping[str, Tuple[str, ...]] = LOCAL_TRIGGER_KEYWORDS,
) -> Tuple[str, ...]:
    """Tag every trigger category whose keywords occur in lowercased text."""
    return _tag(text, table)


def extract_distortions(
    text: str,
    table: Mapping[str, Tuple[str, ...]] = DISTORTION_KEYWORDS,
) -> Tuple[str, ...]:
    """Tag cognitive-distortion patterns, independent of severity."""
    return _tag(text, table)


BASE_INTERVENTIONS: Tuple[str, ...] = (
    "Practice deep breathing exercises",
    "Try progressive muscle relaxation",
    "Use grounding techniques (5-4-3-2-1 method)",
    "Consider journaling your thoughts",
)

CRISIS_INTERVENTIONS: Tuple[str, ...] = (
    "Contact crisis hotline immediately",
    "Reach out to emergency services if needed",
)


def recommend_interventions(risk: CrisisRiskLevel) -> Tuple[str, ...]:
    """Ordered intervention list; crisis steps come first when critical."""
    if risk is CrisisRiskLevel.CRITICAL:
        return CRISIS_INTERVENTIONS + BASE_INTERVENTIONS
    return BASE_INTERVENTIONS


def beck_anxiety_categories(emotions: Iterable[str], text: str) -> Tuple[str, ...]:
    categories = []
    if "anxiety" in emotions:
        categories.append("Subjective anxiety")
    if any(keyword in text for keyword in PHYSICAL_SYMPTOM_KEYWORDS):
        categories.append("Physical symptoms")
    return tuple(categories)


def dsm5_indicators(anxiety_level: int, triggers: Tuple[str, ...]) -> Tuple[str, ...]:
    indicators = []
    if anxiety_level >= 6:
        indicators.append("Excessive anxiety present")
    if len(triggers) > 1:
        indicators.append("Multiple anxiety triggers identified")
    return tuple(indicators)
