"""Signal detector - exclusive, priority-ordered category match.

The first category whose lexicon matches the lowercased message wins:

    negation > crisis > anxiety > depression > positive > neutral

The crisis lexicon is additionally tested on its own regardless of the
winner, so a message such as "I'm okay but I want to end it" is reported
as NEGATION *and* crisis_matched. The risk assessor keys off the flag,
never off the winning category.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Optional, Tuple

from calmpath.shared.models import Sentiment
from .config import DEFAULT_LEXICON, Lexicon

logger = logging.getLogger(__name__)


class SignalCategory(Enum):
    NEGATION = "negation"
    CRISIS = "crisis"
    ANXIETY = "anxiety"
    DEPRESSION = "depression"
    POSITIVE = "positive"
    NEUTRAL = "neutral"


# Sentiment and emotion tags implied by each winning category
CATEGORY_SENTIMENT = {
    SignalCategory.NEGATION: Sentiment.POSITIVE,
    SignalCategory.CRISIS: Sentiment.CRISIS,
    SignalCategory.ANXIETY: Sentiment.NEGATIVE,
    SignalCategory.DEPRESSION: Sentiment.NEGATIVE,
    SignalCategory.POSITIVE: Sentiment.POSITIVE,
    SignalCategory.NEUTRAL: Sentiment.NEUTRAL,
}

CATEGORY_EMOTIONS = {
    SignalCategory.NEGATION: ("calm", "okay"),
    SignalCategory.CRISIS: ("despair", "hopelessness"),
    SignalCategory.ANXIETY: ("anxiety",),
    SignalCategory.DEPRESSION: ("sadness",),
    SignalCategory.POSITIVE: ("positive",),
    SignalCategory.NEUTRAL: ("neutral",),
}


@dataclass(frozen=True)
class SignalMatch:
    """Winning category plus the independent crisis flag."""
    category: SignalCategory
    matched_phrase: Optional[str]
    crisis_matched: bool
    crisis_phrases: Tuple[str, ...] = ()

    @property
    def sentiment(self) -> Sentiment:
        return CATEGORY_SENTIMENT[self.category]

    @property
    def emotions(self) -> Tuple[str, ...]:
        return CATEGORY_EMOTIONS[self.category]


def normalize_message(text: str) -> str:
    """Lowercase, trim, and fold typographic apostrophes to ASCII."""
    return text.lower().strip().replace("’", "'").replace("‘", "'")


def find_phrases(text: str, phrases: FrozenSet[str]) -> Tuple[str, ...]:
    """All phrases that occur as substrings of text, sorted for stable output."""
    return tuple(sorted(p for p in phrases if p in text))


def _first_phrase(phrases: FrozenSet[str]) -> Callable[[str], Optional[str]]:
    def predicate(text: str) -> Optional[str]:
        found = find_phrases(text, phrases)
        return found[0] if found else None
    return predicate


class SignalDetector:
    """Short-circuiting ordered list of predicate -> category pairs."""

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON):
        self.lexicon = lexicon
        self._rules: Tuple[Tuple[SignalCategory, Callable[[str], Optional[str]]], ...] = (
            (SignalCategory.NEGATION, _first_phrase(lexicon.negation)),
            (SignalCategory.CRISIS, _first_phrase(lexicon.crisis)),
            (SignalCategory.ANXIETY, _first_phrase(lexicon.anxiety)),
            (SignalCategory.DEPRESSION, _first_phrase(lexicon.depression)),
            (SignalCategory.POSITIVE, _first_phrase(lexicon.positive)),
        )

    @property
    def order(self) -> Tuple[SignalCategory, ...]:
        return tuple(category for category, _ in self._rules) + (SignalCategory.NEUTRAL,)

    def detect(self, message: str) -> SignalMatch:
        """Classify a raw message into exactly one signal category."""
        text = normalize_message(message)
        crisis_phrases = find_phrases(text, self.lexicon.crisis)

        category, matched = SignalCategory.NEUTRAL, None
        for candidate, predicate in self._rules:
            matched = predicate(text)
            if matched is not None:
                category = candidate
                break

        if crisis_phrases:
            logger.critical(
                "CRISIS_LEXICON_MATCHED",
                extra={
                    "winning_category": category.value,
                    "crisis_phrase_count": len(crisis_phrases),
                }
            )

        return SignalMatch(
            category=category,
            matched_phrase=matched,
            crisis_matched=bool(crisis_phrases),
            crisis_phrases=crisis_phrases,
        )


def detect_signal(message: str, lexicon: Lexicon = DEFAULT_LEXICON) -> SignalMatch:
    """Convenience wrapper around SignalDetector.detect()."""
    return SignalDetector(lexicon).detect(message)
