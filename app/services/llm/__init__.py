"""
LLM Service Module

Provides a unified interface for text-completion providers (OpenRouter,
OpenAI, Gemini) with optional fallback and configuration via environment
variables.

Configuration:
- LLM_PROVIDER: Primary provider ('openrouter', 'openai' or 'gemini', default: 'openrouter')
- LLM_MODEL: Specific model to use (optional, uses provider default)
- LLM_FALLBACK_ENABLED: Enable fallback to secondary provider (default: 'false')
- LLM_FALLBACK_PROVIDER: Secondary provider (default: 'gemini')

Credentials:
- OPENROUTER_API_KEY / OPENAI_API_KEY
- GOOGLE_CLOUD_PROJECT, GOOGLE_CLOUD_LOCATION (Gemini via Vertex AI)

Usage:
    from app.services.llm import get_llm_service, LLMConfig

    service = get_llm_service()
    response = service.generate(
        system_prompt="You are a wellness assistant.",
        user_content="Suggest a breathing exercise.",
        config=LLMConfig(temperature=0.8),
    )
    if response.success:
        print(response.text)
    else:
        print(f"{response.error_kind}: {response.error}")
"""

from .base import (
    LLMProvider,
    LLMResponse,
    LLMConfig,
    LLMConfigurationError,
    ERROR_KIND_CONFIGURATION,
    ERROR_KIND_TRANSIENT,
)
from .openai_provider import OpenAIProvider, OpenRouterProvider
from .gemini_provider import GeminiProvider
from .factory import (
    LLMService,
    LLMProviderType,
    get_llm_service,
    reset_llm_service,
    PROVIDER_REGISTRY,
)

__all__ = [
    # Base classes
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "LLMConfigurationError",
    "ERROR_KIND_CONFIGURATION",
    "ERROR_KIND_TRANSIENT",

    # Providers
    "OpenAIProvider",
    "OpenRouterProvider",
    "GeminiProvider",

    # Service
    "LLMService",
    "LLMProviderType",
    "get_llm_service",
    "reset_llm_service",
    "PROVIDER_REGISTRY",
]
