"""Shared domain models for the CalmPath classification engine."""
from .analysis import (
    Analysis,
    AnalysisRecord,
    ClassificationInput,
    CrisisRiskLevel,
    Sentiment,
    TherapyApproach,
    clamp_anxiety_level,
    clamp_gad7,
    describe_anxiety_level,
    describe_gad7_score,
    describe_therapy_approach,
)

__all__ = [
    "Analysis",
    "AnalysisRecord",
    "ClassificationInput",
    "CrisisRiskLevel",
    "Sentiment",
    "TherapyApproach",
    "clamp_anxiety_level",
    "clamp_gad7",
    "describe_anxiety_level",
    "describe_gad7_score",
    "describe_therapy_approach",
]
