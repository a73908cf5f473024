"""Crisis risk assessment and therapy approach selection.

assess_crisis_risk() is the single authority for the risk tier. A crisis
lexicon match always yields CRITICAL, whatever the numeric level says.
Both functions are pure.
"""
from typing import Iterable, Sequence

from calmpath.shared.models import CrisisRiskLevel, Sentiment, TherapyApproach
from .config import RiskThresholds

DEFAULT_RISK_THRESHOLDS = RiskThresholds()


def assess_crisis_risk(
    anxiety_level: int,
    crisis_matched: bool,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> CrisisRiskLevel:
    """Derive the risk tier from severity and the crisis flag.

    Args:
        anxiety_level: Clamped 1-10 anxiety level
        crisis_matched: Whether any crisis-lexicon phrase matched

    Returns:
        CRITICAL on crisis match, else HIGH (>=8), MODERATE (>=6), LOW
    """
    if crisis_matched:
        return CrisisRiskLevel.CRITICAL
    if anxiety_level >= thresholds.high_min_level:
        return CrisisRiskLevel.HIGH
    if anxiety_level >= thresholds.moderate_min_level:
        return CrisisRiskLevel.MODERATE
    return CrisisRiskLevel.LOW


def reconcile_reported_risk(
    reported: CrisisRiskLevel,
    anxiety_level: int,
    crisis_matched: bool,
    sentiment: Sentiment,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> CrisisRiskLevel:
    """Merge an externally reported tier with the assessor's tier.

    The result is never less severe than assess_crisis_risk(), and is at
    least HIGH when the sentiment is CRISIS.
    """
    assessed = assess_crisis_risk(anxiety_level, crisis_matched, thresholds)
    final = max(reported, assessed, key=lambda level: level.rank)
    if sentiment is Sentiment.CRISIS and final.rank < CrisisRiskLevel.HIGH.rank:
        final = CrisisRiskLevel.HIGH
    return final


def select_therapy_approach(
    distortions: Sequence[str],
    risk: CrisisRiskLevel,
    emotions: Iterable[str],
    triggers: Sequence[str],
) -> TherapyApproach:
    """Priority-ordered modality mapping.

    DBT is never selected here; it only appears when a parsed model reply
    recommends it.
    """
    if distortions:
        return TherapyApproach.CBT
    if risk in (CrisisRiskLevel.HIGH, CrisisRiskLevel.CRITICAL):
        return TherapyApproach.TRAUMA_INFORMED
    if "anxiety" in emotions and triggers:
        return TherapyApproach.MINDFULNESS
    return TherapyApproach.SUPPORTIVE
