"""Regex extraction fallback for unparseable model replies.

Rebuilds every Analysis field from the raw message with word-boundary
regular expressions. This is a separate implementation from the local
tier's signal detector:

- severity is additive over weighted phrase tiers (score_additive)
- triggers use a 5-category taxonomy including family
- crisis and sentiment use their own pattern lists
- escalation is the single-message level threshold, history is ignored

The local crisis lexicon is checked as well, so a lexicon hit is never
lost on this path.
"""
import logging
import re
from typing import Iterable, Mapping, Optional, Pattern, Sequence, Tuple

from calmpath.shared.models import Analysis, CrisisRiskLevel, Sentiment, clamp_anxiety_level
from calmpath.shared.utils import hash_text_for_audit
from calmpath.services.analysis_service.config import (
    DEFAULT_LEXICON,
    DISTORTION_KEYWORDS,
    Lexicon,
)
from calmpath.services.analysis_service.escalation import escalation_from_level
from calmpath.services.analysis_service.extractors import (
    beck_anxiety_categories,
    dsm5_indicators,
    recommend_interventions,
)
from calmpath.services.analysis_service.risk import (
    assess_crisis_risk,
    select_therapy_approach,
)
from calmpath.services.analysis_service.severity import estimate_gad7, score_additive
from calmpath.services.analysis_service.signal_detector import find_phrases, normalize_message
from .personalized_fallback import compose_fallback_response

logger = logging.getLogger(__name__)

CRISIS_LEVEL_FLOOR = 9
NEGATIVE_SCORE_MIN = 4


def _word_pattern(words: Iterable[str]) -> Pattern:
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b")


CRISIS_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"\bkill(?:ing)? myself\b"),
    re.compile(r"\bsuicid(?:e|al)\b"),
    re.compile(r"\bend(?:ing)? (?:it all|my life)\b"),
    re.compile(r"\bhurt(?:ing)? myself\b"),
    re.compile(r"\bself[- ]harm\b"),
    re.compile(r"\bwant(?:ed)? to die\b"),
    re.compile(r"\bnot worth living\b"),
    re.compile(r"\bno reason to live\b"),
)

EXTRACTION_TRIGGER_PATTERNS: Mapping[str, Pattern] = {
    "work": _word_pattern(("work", "job", "boss", "deadline", "meeting", "colleague", "career")),
    "social": _word_pattern(("people", "friends", "friend", "social", "party", "crowd")),
    "health": _word_pattern(("health", "sick", "pain", "doctor", "hospital", "symptoms")),
    "financial": _word_pattern(("money", "bills", "debt", "financial", "rent", "expensive")),
    "family": _word_pattern(("family", "parents", "mom", "dad", "mother", "father", "sister", "brother", "kids")),
}

ANXIETY_EMOTION_PATTERN = _word_pattern((
    "anxious", "anxiety", "worried", "worry", "nervous", "panic", "scared", "afraid", "stressed",
))
SADNESS_EMOTION_PATTERN = _word_pattern((
    "sad", "depressed", "hopeless", "empty", "lonely", "worthless", "down",
))
POSITIVE_SENTIMENT_PATTERN = _word_pattern((
    "good", "better", "happy", "calm", "relaxed", "peaceful", "okay", "fine", "great", "hopeful",
))

DISTORTION_PATTERNS: Mapping[str, Pattern] = {
    tag: _word_pattern(words) for tag, words in DISTORTION_KEYWORDS.items()
}


def _tag_patterns(text: str, patterns: Mapping[str, Pattern]) -> Tuple[str, ...]:
    return tuple(tag for tag, pattern in patterns.items() if pattern.search(text))


class ExtractionFallback:
    """Re-derives a complete Analysis when the model reply cannot be parsed."""

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON):
        self.lexicon = lexicon

    def has_crisis_signal(self, text: str) -> bool:
        if any(pattern.search(text) for pattern in CRISIS_PATTERNS):
            return True
        return bool(find_phrases(text, self.lexicon.crisis))

    def extract(self, message: str, history: Optional[Sequence[str]] = None) -> Analysis:
        """Build an Analysis from the message text alone.

        Args:
            message: Raw user message
            history: Accepted for interface parity; not used for escalation
        """
        text = normalize_message(message)
        crisis_matched = self.has_crisis_signal(text)

        score = score_additive(text)
        level = score.anxiety_level
        if crisis_matched:
            level = clamp_anxiety_level(max(level, CRISIS_LEVEL_FLOOR))

        triggers = _tag_patterns(text, EXTRACTION_TRIGGER_PATTERNS)
        distortions = _tag_patterns(text, DISTORTION_PATTERNS)
        emotions = self._emotions(text, crisis_matched)
        sentiment = self._sentiment(text, crisis_matched, score.raw_score)

        risk = assess_crisis_risk(level, crisis_matched)
        approach = select_therapy_approach(distortions, risk, emotions, triggers)

        analysis = Analysis(
            anxiety_level=level,
            gad7_score=estimate_gad7(level),
            therapy_approach=approach,
            crisis_risk_level=risk,
            sentiment=sentiment,
            personalized_response=compose_fallback_response(
                crisis_risk_level=risk,
                anxiety_level=level,
                triggers=triggers,
                sentiment=sentiment,
                cognitive_distortions=distortions,
            ),
            escalation_detected=escalation_from_level(level),
            triggers=triggers,
            emotions=emotions,
            cognitive_distortions=distortions,
            recommended_interventions=recommend_interventions(risk),
            beck_anxiety_categories=beck_anxiety_categories(emotions, text),
            dsm5_indicators=dsm5_indicators(level, triggers),
        )

        log = logger.critical if risk is CrisisRiskLevel.CRITICAL else logger.info
        log(
            "EXTRACTION_FALLBACK_COMPLETED",
            extra={
                "text_hash": hash_text_for_audit(message),
                "anxiety_level": analysis.anxiety_level,
                "crisis_risk_level": analysis.crisis_risk_level.value,
                "matched_phrase_count": len(score.matched_phrases),
            }
        )
        return analysis

    @staticmethod
    def _emotions(text: str, crisis_matched: bool) -> Tuple[str, ...]:
        if crisis_matched:
            return ("despair", "hopelessness")
        emotions = []
        if ANXIETY_EMOTION_PATTERN.search(text):
            emotions.append("anxiety")
        if SADNESS_EMOTION_PATTERN.search(text):
            emotions.append("sadness")
        if not emotions:
            emotions.append("positive" if POSITIVE_SENTIMENT_PATTERN.search(text) else "neutral")
        return tuple(emotions)

    @staticmethod
    def _sentiment(text: str, crisis_matched: bool, raw_score: int) -> Sentiment:
        if crisis_matched:
            return Sentiment.CRISIS
        if raw_score >= NEGATIVE_SCORE_MIN or SADNESS_EMOTION_PATTERN.search(text):
            return Sentiment.NEGATIVE
        if raw_score <= 1 and POSITIVE_SENTIMENT_PATTERN.search(text):
            return Sentiment.POSITIVE
        return Sentiment.NEUTRAL

