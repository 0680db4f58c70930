"""
LLM Provider Factory

Creates and manages LLM provider instances based on configuration.
Supports optional fallback from the primary to a secondary provider.
"""

import logging
from typing import Optional, Dict, List, Type
from enum import Enum

from app.core.settings import settings
from .base import LLMProvider, LLMResponse, LLMConfig, ERROR_KIND_TRANSIENT
from .openai_provider import OpenAIProvider, OpenRouterProvider
from .gemini_provider import GeminiProvider

logger = logging.getLogger(__name__)


class LLMProviderType(str, Enum):
    """Supported LLM providers."""
    OPENROUTER = "openrouter"
    OPENAI = "openai"
    GEMINI = "gemini"


PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {
    LLMProviderType.OPENROUTER: OpenRouterProvider,
    LLMProviderType.OPENAI: OpenAIProvider,
    LLMProviderType.GEMINI: GeminiProvider,
}


class LLMService:
    """
    LLM Service with provider selection and optional fallback.

    Configuration (see app.core.settings):
    - LLM_PROVIDER: primary provider (default: 'openrouter')
    - LLM_MODEL: model name (optional, uses provider default)
    - LLM_FALLBACK_ENABLED / LLM_FALLBACK_PROVIDER: secondary provider

    Usage:
        service = LLMService()
        response = service.generate(
            system_prompt="You are a wellness assistant.",
            user_content="Give me three tips...",
        )
        if response.success:
            print(response.text)
    """

    def __init__(
        self,
        primary_provider: Optional[str] = None,
        primary_model: Optional[str] = None,
        fallback_enabled: Optional[bool] = None,
        fallback_provider: Optional[str] = None,
        **kwargs
    ):
        self._primary_type = LLMProviderType(primary_provider or settings.llm_provider)
        self._model = primary_model or settings.llm_model
        self._fallback_enabled = (
            fallback_enabled if fallback_enabled is not None else settings.llm_fallback_enabled
        )
        self._fallback_type = LLMProviderType(fallback_provider or settings.llm_fallback_provider)
        self._kwargs = kwargs

        # Lazy-loaded providers
        self._primary: Optional[LLMProvider] = None
        self._fallback: Optional[LLMProvider] = None

        logger.info(
            f"[llm_service] initialized: primary={self._primary_type.value} "
            f"model={self._model or 'default'} fallback={self._fallback_enabled}"
        )

    @property
    def fallback_enabled(self) -> bool:
        return self._fallback_enabled and self._fallback_type != self._primary_type

    @property
    def primary_provider(self) -> LLMProvider:
        if self._primary is None:
            provider_class = PROVIDER_REGISTRY[self._primary_type]
            self._primary = provider_class(model=self._model, **self._kwargs)
        return self._primary

    @property
    def fallback_provider(self) -> Optional[LLMProvider]:
        if not self.fallback_enabled:
            return None
        if self._fallback is None:
            provider_class = PROVIDER_REGISTRY[self._fallback_type]
            self._fallback = provider_class()  # Default model for fallback
        return self._fallback

    def generate(
        self,
        system_prompt: str,
        user_content: str,
        config: Optional[LLMConfig] = None,
        use_fallback: bool = True
    ) -> LLMResponse:
        """Generate a completion for one system/user exchange."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        return self.chat(messages, config=config, use_fallback=use_fallback)

    def chat(
        self,
        messages: List[Dict[str, str]],
        config: Optional[LLMConfig] = None,
        use_fallback: bool = True
    ) -> LLMResponse:
        """Run a message list through the primary provider, then the fallback."""
        response = self.primary_provider.chat(messages, config=config)
        if response.success:
            return response

        logger.warning(f"[llm_service] primary provider failed: {response.error}")

        if use_fallback and self.fallback_provider:
            logger.info(
                f"[llm_service] attempting fallback to {self.fallback_provider.PROVIDER_NAME}"
            )
            fallback_response = self.fallback_provider.chat(messages, config=config)
            if fallback_response.success:
                logger.info(f"[llm_service] fallback succeeded via {fallback_response.provider}")
                return fallback_response
            logger.error(f"[llm_service] fallback also failed: {fallback_response.error}")
            # A transient failure on either side means a retry could succeed
            if fallback_response.error_kind == ERROR_KIND_TRANSIENT:
                return fallback_response

        return response

    def is_available(self) -> bool:
        """Check if at least one provider is available."""
        if self.primary_provider.is_available():
            return True
        return bool(self.fallback_provider and self.fallback_provider.is_available())

    def get_available_providers(self) -> Dict[str, bool]:
        """Availability status of every registered provider."""
        status = {}
        for provider_type, provider_class in PROVIDER_REGISTRY.items():
            try:
                status[provider_type.value] = provider_class().is_available()
            except Exception:
                status[provider_type.value] = False
        return status


# Module-level singleton for convenience
_service_instance: Optional[LLMService] = None


def get_llm_service(**kwargs) -> LLMService:
    """Get or create the default LLM service instance.

    Pass kwargs to override default configuration (replaces the singleton).
    """
    global _service_instance

    if _service_instance is None or kwargs:
        _service_instance = LLMService(**kwargs)

    return _service_instance


def reset_llm_service() -> None:
    """Reset the singleton instance (useful for testing)."""
    global _service_instance
    _service_instance = None
