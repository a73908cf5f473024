"""Base LLM interface and implementations.

Provides the abstract base class and concrete implementations for the
providers the remote classification tier can call (Anthropic Messages
API, OpenAI).
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_KEY_PREFIX = "sk-ant-"
DEFAULT_MODEL_NAME = "claude-3-5-sonnet-20241022"
MAX_PROMPT_LENGTH = 10000


class LLMProvider(Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass
class LLMConfig:
    """Configuration for LLM inference."""
    provider: LLMProvider
    model_name: str = DEFAULT_MODEL_NAME
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 2000
    temperature: float = 0.7
    timeout_seconds: int = 30


@dataclass
class LLMResponse:
    """Response from LLM inference."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Optional[Dict] = None


class BaseLLM(ABC):
    """Abstract base class for LLM implementations."""

    def __init__(self, config: LLMConfig):
        """Initialize LLM with configuration.

        Args:
            config: LLM configuration
        """
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={
                "provider": config.provider.value,
                "model": config.model_name
            }
        )

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response from LLM.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt for context
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse object

        Raises:
            ValueError: If prompt is invalid
        """
        pass

    def validate_prompt(self, prompt: str) -> bool:
        """Validate prompt before sending to LLM.

        Args:
            prompt: The prompt to validate

        Returns:
            True if valid, False otherwise
        """
        if not prompt or not prompt.strip():
            logger.warning("LLM_PROMPT_EMPTY")
            return False

        if len(prompt) > MAX_PROMPT_LENGTH:
            logger.warning(
                "LLM_PROMPT_TOO_LONG",
                extra={"length": len(prompt)}
            )
            return False

        return True


class AnthropicLLM(BaseLLM):
    """Anthropic Messages API implementation (Claude models)."""

    def __init__(self, config: LLMConfig):
        """Initialize Anthropic LLM.

        Args:
            config: LLM configuration with an Anthropic API key

        Raises:
            ValueError: If the key is missing or not an Anthropic key
        """
        super().__init__(config)

        api_key = (config.api_key or "").strip()
        if not api_key:
            raise ValueError("Anthropic API key required")
        if not api_key.startswith(ANTHROPIC_KEY_PREFIX):
            raise ValueError(
                f"Anthropic API keys should start with '{ANTHROPIC_KEY_PREFIX}'"
            )

        self.endpoint = config.endpoint or ANTHROPIC_MESSAGES_URL
        self.headers = {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_API_VERSION,
        }

    def build_payload(self, prompt: str, system_prompt: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model_name,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt
        return payload

    @staticmethod
    def extract_text(result: Dict[str, Any]) -> str:
        """Pull the reply text out of a Messages API result.

        Raises:
            ValueError: If the result has no text content block
        """
        content = result.get("content") if isinstance(result, dict) else None
        if not content or not isinstance(content, list):
            raise ValueError("Missing content in Anthropic response")
        text = content[0].get("text") if isinstance(content[0], dict) else None
        if not text:
            raise ValueError("Missing content.text in Anthropic response")
        return text

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response using the Anthropic Messages API.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            **kwargs: Additional parameters

        Returns:
            LLMResponse object
        """
        import aiohttp

        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        payload = self.build_payload(prompt, system_prompt)
        start_time = time.time()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.endpoint,
                    headers=self.headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds)
                ) as response:
                    response.raise_for_status()
                    result = await response.json()

            latency_ms = (time.time() - start_time) * 1000
            generated_text = self.extract_text(result)
            usage = result.get("usage") or {}
            tokens_used = None
            if usage:
                tokens_used = usage.get("input_tokens", 0) + usage.get("output_tokens", 0)

            logger.info(
                "LLM_GENERATION_SUCCEEDED",
                extra={
                    "provider": self.config.provider.value,
                    "model": self.config.model_name,
                    "latency_ms": latency_ms,
                    "tokens_used": tokens_used,
                }
            )

            return LLMResponse(
                text=generated_text,
                model=self.config.model_name,
                provider=self.config.provider.value,
                tokens_used=tokens_used,
                latency_ms=latency_ms,
                metadata={"endpoint": self.endpoint}
            )

        except Exception as e:
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "provider": self.config.provider.value,
                    "model": self.config.model_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise


class OpenAILLM(BaseLLM):
    """OpenAI API implementation (GPT-4, etc.)."""

    def __init__(self, config: LLMConfig):
        """Initialize OpenAI LLM.

        Args:
            config: LLM configuration with API key
        """
        super().__init__(config)

        if not config.api_key:
            raise ValueError("OpenAI API key required")

        import openai
        self.client = openai.AsyncOpenAI(api_key=config.api_key)

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response using OpenAI API."""
        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        start_time = time.time()

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model_name,
                messages=messages,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                timeout=self.config.timeout_seconds
            )

            latency_ms = (time.time() - start_time) * 1000

            generated_text = response.choices[0].message.content or ""
            tokens_used = response.usage.total_tokens if response.usage else None

            logger.info(
                "LLM_GENERATION_SUCCEEDED",
                extra={
                    "provider": self.config.provider.value,
                    "model": self.config.model_name,
                    "latency_ms": latency_ms,
                    "tokens_used": tokens_used
                }
            )

            return LLMResponse(
                text=generated_text,
                model=self.config.model_name,
                provider=self.config.provider.value,
                tokens_used=tokens_used,
                latency_ms=latency_ms
            )

        except Exception as e:
            logger.error(
                "LLM_GENERATION_FAILED",
                extra={
                    "provider": self.config.provider.value,
                    "model": self.config.model_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise


def create_llm(config: LLMConfig) -> BaseLLM:
    """Factory function to create LLM instance.

    Args:
        config: LLM configuration

    Returns:
        BaseLLM instance

    Raises:
        ValueError: If provider not supported
    """
    if config.provider == LLMProvider.ANTHROPIC:
        return AnthropicLLM(config)
    elif config.provider == LLMProvider.OPENAI:
        return OpenAILLM(config)
    else:
        raise ValueError(f"Unsupported provider: {config.provider}")
