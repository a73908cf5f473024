"""Local analyzer - the offline classification tier.

Runs the whole pipeline in-process with no network access:

    SignalDetector -> {extractors, score_exclusive} -> assess_crisis_risk
        -> select_therapy_approach -> ResponseSynthesizer

Escalation is judged from conversation history, not the current message.
"""
import logging
import time
from typing import Optional

from calmpath.shared.models import Analysis, ClassificationInput
from calmpath.shared.utils import hash_text_for_audit
from .config import DEFAULT_LEXICON, Lexicon
from .escalation import escalation_from_history
from .extractors import (
    beck_anxiety_categories,
    dsm5_indicators,
    extract_distortions,
    extract_triggers,
    recommend_interventions,
)
from .responses import ResponseContext, ResponseSynthesizer, UniformChoice
from .risk import assess_crisis_risk, select_therapy_approach
from .severity import score_exclusive
from .signal_detector import SignalDetector, normalize_message

logger = logging.getLogger(__name__)


class LocalAnalyzer:
    """Offline heuristic classifier producing the shared Analysis contract."""

    def __init__(
        self,
        lexicon: Lexicon = DEFAULT_LEXICON,
        chooser: Optional[UniformChoice] = None,
    ):
        """Initialize the analyzer.

        Args:
            lexicon: Phrase sets for every signal category
            chooser: Random source for randomized reply templates
        """
        self.lexicon = lexicon
        self.detector = SignalDetector(lexicon)
        self.synthesizer = ResponseSynthesizer(chooser)

    def analyze(self, request: ClassificationInput) -> Analysis:
        """Classify one message and synthesize the reply."""
        start_time = time.perf_counter()
        text = normalize_message(request.message)

        signal = self.detector.detect(request.message)
        severity = score_exclusive(signal.category)
        triggers = extract_triggers(text)
        distortions = extract_distortions(text)
        emotions = signal.emotions

        risk = assess_crisis_risk(severity.anxiety_level, signal.crisis_matched)
        approach = select_therapy_approach(distortions, risk, emotions, triggers)

        response = self.synthesizer.synthesize(
            request.message,
            ResponseContext(
                crisis_risk_level=risk,
                sentiment=signal.sentiment,
                anxiety_level=severity.anxiety_level,
                triggers=triggers,
            ),
        )

        analysis = Analysis(
            anxiety_level=severity.anxiety_level,
            gad7_score=severity.gad7_score,
            therapy_approach=approach,
            crisis_risk_level=risk,
            sentiment=signal.sentiment,
            personalized_response=response,
            escalation_detected=escalation_from_history(request.history, self.lexicon),
            triggers=triggers,
            emotions=emotions,
            cognitive_distortions=distortions,
            recommended_interventions=recommend_interventions(risk),
            beck_anxiety_categories=beck_anxiety_categories(emotions, text),
            dsm5_indicators=dsm5_indicators(severity.anxiety_level, triggers),
        )

        log = logger.critical if signal.crisis_matched else logger.info
        log(
            "LOCAL_ANALYSIS_COMPLETED",
            extra={
                "text_hash": hash_text_for_audit(request.message),
                "signal_category": signal.category.value,
                "anxiety_level": analysis.anxiety_level,
                "crisis_risk_level": analysis.crisis_risk_level.value,
                "escalation_detected": analysis.escalation_detected,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )

        return analysis
