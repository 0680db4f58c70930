"""
Google Gemini LLM Provider

Implements the LLMProvider interface for Google Gemini models via Vertex AI
using the google-genai SDK. Used as the fallback provider for the chat
assistant.
"""

import os
import logging
from typing import Dict, List, Optional

from .base import LLMProvider, LLMConfig, LLMConfigurationError

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Google Gemini model provider via Vertex AI."""

    PROVIDER_NAME = "gemini"
    DEFAULT_MODEL = "gemini-2.5-flash"

    INPUT_PRICE_PER_1M = 0.30
    OUTPUT_PRICE_PER_1M = 2.50

    MODEL_PRICING = {
        "gemini-2.5-flash": {"input": 0.30, "output": 2.50},
        "gemini-2.5-flash-lite": {"input": 0.10, "output": 0.40},
        "gemini-2.5-pro": {"input": 1.25, "output": 10.00},
    }

    def _init_client(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        **kwargs
    ) -> None:
        self._project_id = project_id or os.getenv("GOOGLE_CLOUD_PROJECT")
        self._location = location or os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")
        self._client = None

        if self.model in self.MODEL_PRICING:
            self.INPUT_PRICE_PER_1M = self.MODEL_PRICING[self.model]["input"]
            self.OUTPUT_PRICE_PER_1M = self.MODEL_PRICING[self.model]["output"]

    def _get_client(self):
        """Lazy load Gemini client."""
        if self._client is None:
            if not self._project_id:
                raise LLMConfigurationError("GOOGLE_CLOUD_PROJECT not configured")
            try:
                from google import genai
                from google.genai import types
            except ImportError:
                raise LLMConfigurationError(
                    "google-genai package not installed. Install with: pip install google-genai"
                )
            self._client = genai.Client(
                vertexai=True,
                project=self._project_id,
                location=self._location
            )
            self._types = types

        return self._client

    def _call_api(
        self,
        messages: List[Dict[str, str]],
        config: LLMConfig
    ) -> tuple[str, int, int]:
        """Make Gemini API call."""
        client = self._get_client()

        # System turns go to system_instruction; the rest become contents
        system_parts = []
        contents = []
        for msg in messages:
            if msg["role"] == "system":
                system_parts.append(msg["content"])
                continue
            role = "model" if msg["role"] == "assistant" else "user"
            contents.append(
                self._types.Content(role=role, parts=[self._types.Part(text=msg["content"])])
            )

        gen_config = self._types.GenerateContentConfig(
            temperature=config.temperature,
            max_output_tokens=config.max_tokens,
            system_instruction="\n".join(system_parts) if system_parts else None,
            http_options=self._types.HttpOptions(timeout=config.timeout_seconds * 1000),
        )
        response = client.models.generate_content(
            model=self.model,
            contents=contents,
            config=gen_config,
        )

        if getattr(response, "candidates", None):
            finish_reason = getattr(response.candidates[0], "finish_reason", None)
            finish_reason_str = str(finish_reason).upper() if finish_reason else ""
            logger.debug(f"[gemini] finish_reason={finish_reason}")
            if any(x in finish_reason_str for x in ("MAX_TOKENS", "LENGTH")):
                raise ValueError(f"Response truncated due to max_tokens limit (finish_reason={finish_reason})")

        raw_text = (response.text or "").strip()

        prompt_tokens = 0
        completion_tokens = 0
        usage = getattr(response, "usage_metadata", None)
        if usage:
            prompt_tokens = getattr(usage, "prompt_token_count", 0) or 0
            completion_tokens = getattr(usage, "candidates_token_count", 0) or 0

        return raw_text, prompt_tokens, completion_tokens

    def is_available(self) -> bool:
        try:
            self._get_client()
            return True
        except Exception as e:
            logger.debug(f"Gemini not available: {e}")
            return False
