"""
LLM Provider Base Interface

Abstract base class defining the contract for LLM providers.
All providers (OpenRouter, OpenAI, Gemini) implement this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional
import logging
import time

logger = logging.getLogger(__name__)

ERROR_KIND_CONFIGURATION = "configuration"
ERROR_KIND_TRANSIENT = "transient"


class LLMConfigurationError(Exception):
    """Provider cannot be used as configured (missing key, SDK not installed)."""


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    success: bool
    text: str  # Raw completion text, stripped

    # Metrics
    latency_ms: int
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    estimated_cost_usd: float

    # Provider info
    provider: str
    model: str

    # Error handling
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def failure(cls, provider: str, model: str, error: str, error_kind: str, latency_ms: int = 0) -> "LLMResponse":
        return cls(
            success=False,
            text="",
            latency_ms=latency_ms,
            prompt_tokens=0,
            completion_tokens=0,
            total_tokens=0,
            estimated_cost_usd=0.0,
            provider=provider,
            model=model,
            error=error,
            error_kind=error_kind,
        )


@dataclass
class LLMConfig:
    """Configuration for LLM calls."""
    temperature: float = 0.7
    max_tokens: int = 1200
    timeout_seconds: int = 30
    max_retries: int = 1


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    # Subclasses must define these
    PROVIDER_NAME: str = "base"
    DEFAULT_MODEL: str = "unknown"

    # Pricing per 1M tokens (subclasses override)
    INPUT_PRICE_PER_1M: float = 0.0
    OUTPUT_PRICE_PER_1M: float = 0.0

    def __init__(self, model: Optional[str] = None, **kwargs):
        """Initialize the provider.

        Args:
            model: Specific model to use (defaults to DEFAULT_MODEL)
            **kwargs: Provider-specific configuration
        """
        self.model = model or self.DEFAULT_MODEL
        self._init_client(**kwargs)

    @abstractmethod
    def _init_client(self, **kwargs) -> None:
        """Initialize the provider's client. Implemented by subclasses."""
        pass

    @abstractmethod
    def _call_api(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig
    ) -> tuple[str, int, int]:
        """Make the actual API call.

        Returns:
            Tuple of (raw_response_text, prompt_tokens, completion_tokens)
        """
        pass

    def generate(
        self,
        system_prompt: str,
        user_content: str,
        config: Optional[LLMConfig] = None
    ) -> LLMResponse:
        """Generate a completion for a single system/user exchange."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        return self.chat(messages, config)

    def chat(
        self,
        messages: List[Dict[str, str]],
        config: Optional[LLMConfig] = None
    ) -> LLMResponse:
        """Generate a completion for an arbitrary message list.

        Never raises: failures come back as LLMResponse(success=False) with
        ``error_kind`` set to ``configuration`` or ``transient``.
        """
        config = config or LLMConfig()
        start_time = time.time()

        try:
            raw_response, prompt_tokens, completion_tokens = self._call_with_retry(
                messages, config
            )
            if not raw_response:
                raise ValueError("Empty response from LLM")

            latency_ms = int((time.time() - start_time) * 1000)
            total_tokens = prompt_tokens + completion_tokens
            cost_usd = self._calculate_cost(prompt_tokens, completion_tokens)

            logger.info(
                f"[llm] provider={self.PROVIDER_NAME} model={self.model} "
                f"latency_ms={latency_ms} tokens={total_tokens} "
                f"(prompt={prompt_tokens}, completion={completion_tokens}) "
                f"cost_usd={cost_usd:.6f}"
            )

            return LLMResponse(
                success=True,
                text=raw_response,
                latency_ms=latency_ms,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=total_tokens,
                estimated_cost_usd=cost_usd,
                provider=self.PROVIDER_NAME,
                model=self.model,
            )

        except LLMConfigurationError as e:
            logger.error(f"[llm] provider={self.PROVIDER_NAME} not configured: {e}")
            return LLMResponse.failure(
                self.PROVIDER_NAME, self.model, str(e), ERROR_KIND_CONFIGURATION,
                latency_ms=int((time.time() - start_time) * 1000),
            )
        except Exception as e:
            logger.error(f"[llm] provider={self.PROVIDER_NAME} error={str(e)}")
            return LLMResponse.failure(
                self.PROVIDER_NAME, self.model, str(e), ERROR_KIND_TRANSIENT,
                latency_ms=int((time.time() - start_time) * 1000),
            )

    def _call_with_retry(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig
    ) -> tuple[str, int, int]:
        """Call API with exponential backoff retry on rate-limit style errors."""
        last_error = None
        delay = 0.6
        attempts = max(1, config.max_retries)

        for attempt in range(attempts):
            try:
                if attempt > 0:
                    logger.info(f"[llm] retry attempt {attempt + 1}/{attempts}")
                return self._call_api(messages, config)
            except LLMConfigurationError:
                raise
            except Exception as e:
                last_error = e
                error_msg = str(e).lower()
                retryable = any(x in error_msg for x in [
                    "rate limit", "429", "quota", "timeout", "503", "502"
                ])
                if not retryable or attempt == attempts - 1:
                    break
                time.sleep(delay)
                delay *= 2

        raise last_error or Exception("LLM call failed after retries")

    def _calculate_cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        """Calculate estimated cost in USD."""
        return (
            prompt_tokens * self.INPUT_PRICE_PER_1M +
            completion_tokens * self.OUTPUT_PRICE_PER_1M
        ) / 1_000_000

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is properly configured and available."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model})"
