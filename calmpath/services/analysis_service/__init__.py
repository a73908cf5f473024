"""Analysis Service: the local (offline) classification tier.

Turns one message plus recent history into an Analysis without any
network access. Used whenever the remote model cannot be reached.

Components:
- config.py: Lexicons and rule tables
- signal_detector.py: Exclusive priority-ordered category match
- severity.py: Exclusive (local) and additive (fallback) scoring
- extractors.py: Triggers, distortions, advisory lists
- risk.py: Crisis risk assessor and therapy approach selector
- escalation.py: History-window and level-threshold escalation checks
- responses.py: Template cascade for the reply text
- analyzer.py: LocalAnalyzer orchestrating the pipeline

Usage:
    from calmpath.services.analysis_service import LocalAnalyzer
    analysis = LocalAnalyzer().analyze(ClassificationInput(message="..."))
"""

from .analyzer import LocalAnalyzer
from .config import DEFAULT_LEXICON, Lexicon
from .responses import CRISIS_RESPONSE, UniformChoice
from .risk import assess_crisis_risk, select_therapy_approach
from .signal_detector import SignalCategory, SignalDetector, detect_signal

__all__ = [
    "LocalAnalyzer",
    "DEFAULT_LEXICON",
    "Lexicon",
    "CRISIS_RESPONSE",
    "UniformChoice",
    "assess_crisis_risk",
    "select_therapy_approach",
    "SignalCategory",
    "SignalDetector",
    "detect_signal",
]
