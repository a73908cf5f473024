"""Classification Service configuration."""
import os
from dataclasses import dataclass
from typing import Optional

from calmpath.services.llm_service.base_llm import (
    DEFAULT_MODEL_NAME,
    LLMConfig,
    LLMProvider,
)

# Checked in order after LLM_API_KEY
PROVIDER_KEY_VARIABLES = {
    LLMProvider.ANTHROPIC: ("ANTHROPIC_API_KEY", "CLAUDE_API_KEY"),
    LLMProvider.OPENAI: ("OPENAI_API_KEY",),
}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class EngineConfig:
    """Settings for tier selection and the remote model call."""
    llm_provider: LLMProvider = LLMProvider.ANTHROPIC
    llm_model_name: str = DEFAULT_MODEL_NAME
    llm_api_key: Optional[str] = None
    llm_max_tokens: int = 2000
    llm_temperature: float = 0.7
    llm_timeout_seconds: int = 30
    remote_analysis_enabled: bool = True
    persistence_enabled: bool = False
    # Seeds randomized reply templates; None means unseeded
    response_random_seed: Optional[int] = None

    @property
    def remote_configured(self) -> bool:
        return self.remote_analysis_enabled and bool(self.llm_api_key)

    def llm_config(self) -> LLMConfig:
        return LLMConfig(
            provider=self.llm_provider,
            model_name=self.llm_model_name,
            api_key=self.llm_api_key,
            max_tokens=self.llm_max_tokens,
            temperature=self.llm_temperature,
            timeout_seconds=self.llm_timeout_seconds,
        )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables.

        Environment variables:
            LLM_PROVIDER (anthropic), LLM_MODEL_NAME, LLM_API_KEY or the
            provider's own key variable, LLM_MAX_TOKENS (2000),
            LLM_TEMPERATURE (0.7), LLM_TIMEOUT_SECONDS (30),
            ENABLE_REMOTE_ANALYSIS (true), ENABLE_PERSISTENCE (false),
            RESPONSE_RANDOM_SEED

        Raises:
            ValueError: If LLM_PROVIDER names an unsupported provider
        """
        provider = LLMProvider(os.getenv("LLM_PROVIDER", LLMProvider.ANTHROPIC.value).lower())

        api_key = os.getenv("LLM_API_KEY")
        for variable in PROVIDER_KEY_VARIABLES[provider]:
            if api_key:
                break
            api_key = os.getenv(variable)

        seed = os.getenv("RESPONSE_RANDOM_SEED")

        return cls(
            llm_provider=provider,
            llm_model_name=os.getenv("LLM_MODEL_NAME", DEFAULT_MODEL_NAME),
            llm_api_key=api_key.strip() if api_key else None,
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "2000")),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            llm_timeout_seconds=int(os.getenv("LLM_TIMEOUT_SECONDS", "30")),
            remote_analysis_enabled=_env_flag("ENABLE_REMOTE_ANALYSIS", "true"),
            persistence_enabled=_env_flag("ENABLE_PERSISTENCE", "false"),
            response_random_seed=int(seed) if seed else None,
        )
