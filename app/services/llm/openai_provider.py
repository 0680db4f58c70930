"""
OpenAI-compatible LLM Providers

OpenAIProvider talks to api.openai.com; OpenRouterProvider reuses the same
SDK against OpenRouter's OpenAI-compatible endpoint.
"""

import os
import logging
from typing import Dict, List, Optional

from .base import LLMProvider, LLMConfig, LLMConfigurationError

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI GPT model provider."""

    PROVIDER_NAME = "openai"
    DEFAULT_MODEL = "gpt-4o-mini"
    API_KEY_ENV = "OPENAI_API_KEY"
    BASE_URL: Optional[str] = None

    # gpt-4o-mini: $0.15 input, $0.60 output
    INPUT_PRICE_PER_1M = 0.15
    OUTPUT_PRICE_PER_1M = 0.60

    MODEL_PRICING = {
        "gpt-4o-mini": {"input": 0.15, "output": 0.60},
        "gpt-4o": {"input": 2.50, "output": 10.00},
    }

    def _init_client(self, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs) -> None:
        """Initialize client settings; the SDK client itself is created lazily."""
        self._api_key = api_key or os.getenv(self.API_KEY_ENV)
        self._base_url = base_url or self.BASE_URL
        self._client = None

        if self.model in self.MODEL_PRICING:
            self.INPUT_PRICE_PER_1M = self.MODEL_PRICING[self.model]["input"]
            self.OUTPUT_PRICE_PER_1M = self.MODEL_PRICING[self.model]["output"]

    def _has_key(self) -> bool:
        return bool(self._api_key) and not self._api_key.startswith("your_")

    def _get_client(self):
        """Lazy load OpenAI client."""
        if self._client is None:
            if not self._has_key():
                raise LLMConfigurationError(f"{self.API_KEY_ENV} not configured")

            from openai import OpenAI
            kwargs = {"api_key": self._api_key}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = OpenAI(**kwargs)

        return self._client

    def _call_api(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig
    ) -> tuple[str, int, int]:
        """Make a chat completion call."""
        client = self._get_client()

        kwargs = {
            "model": self.model,
            "messages": messages,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "timeout": config.timeout_seconds,
        }
        response = client.chat.completions.create(**kwargs)

        raw_text = ""
        if response.choices:
            raw_text = (response.choices[0].message.content or "").strip()

        usage = response.usage
        prompt_tokens = usage.prompt_tokens if usage else 0
        completion_tokens = usage.completion_tokens if usage else 0

        return raw_text, prompt_tokens, completion_tokens

    def is_available(self) -> bool:
        if not self._has_key():
            return False
        try:
            self._get_client()
            return True
        except Exception:
            return False


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter (OpenAI-compatible) provider; free-tier models by default."""

    PROVIDER_NAME = "openrouter"
    DEFAULT_MODEL = "arcee-ai/trinity-large-preview:free"
    API_KEY_ENV = "OPENROUTER_API_KEY"
    BASE_URL = "https://openrouter.ai/api/v1"

    INPUT_PRICE_PER_1M = 0.0
    OUTPUT_PRICE_PER_1M = 0.0
    MODEL_PRICING: Dict[str, Dict[str, float]] = {}
