"""Classification Service: tier selection and the HTTP endpoint.

Components:
- config.py: EngineConfig loaded from the environment
- engine.py: ClassificationEngine (remote tier, local fallback)
- handler.py: Flask app exposing /classify, /health, /ready
"""

from .config import EngineConfig
from .engine import ClassificationEngine, ClassificationOutcome, create_engine

__all__ = [
    "EngineConfig",
    "ClassificationEngine",
    "ClassificationOutcome",
    "create_engine",
]
