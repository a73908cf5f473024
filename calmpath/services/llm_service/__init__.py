"""LLM Service: the remote classification tier.

Delegates classification to an external generative model and recovers
locally when the reply cannot be used.

Components:
- base_llm.py: Provider abstraction (Anthropic Messages API, OpenAI)
- prompts.py: System instruction and user prompt builder
- remote_adapter.py: Model call, parsing, reconciliation, persistence
- extraction_fallback.py: Regex re-derivation of every field
- personalized_fallback.py: Deterministic reply for short model replies
"""

from .base_llm import BaseLLM, LLMConfig, LLMProvider, LLMResponse, create_llm
from .extraction_fallback import ExtractionFallback
from .personalized_fallback import compose_fallback_response
from .remote_adapter import (
    ClassificationError,
    MalformedOutputError,
    PersistenceError,
    RemoteClassificationAdapter,
    UpstreamUnavailableError,
)

__all__ = [
    "BaseLLM",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "create_llm",
    "ExtractionFallback",
    "compose_fallback_response",
    "ClassificationError",
    "MalformedOutputError",
    "PersistenceError",
    "RemoteClassificationAdapter",
    "UpstreamUnavailableError",
]
