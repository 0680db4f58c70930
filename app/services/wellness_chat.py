"""CalmBot: the scoped wellness chat assistant."""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence

from app.core.settings import settings
from app.exceptions import GenerationTransient, GenerationUnavailable
from app.services.llm import ERROR_KIND_CONFIGURATION, LLMConfig, LLMService, get_llm_service

logger = logging.getLogger("app.wellness_chat")

MAX_HISTORY_TURNS = 20

REFUSAL_TEXT = (
    "I am designed to help with mental wellness and stress relief. I cannot assist with that "
    "topic, but I'm here if you'd like to talk about how you're feeling."
)

CHAT_SYSTEM_PROMPT = f"""You are CalmBot, a supportive and empathetic mental health and wellness AI assistant for the StressLess platform.
Your instructions are:
1. GOAL: Provide stress-relief tips, emotional support, and explain wellness concepts.
2. TONE: Be kind, encouraging, professional, and concise. Format responses for chat bubbles.
3. STRICT SCOPE RESTRICTION: You are strictly limited to mental health and wellness topics.
   - If a user asks about ANY other topic (e.g., programming, math, general facts), you MUST refuse to answer.
   - In these cases, reply ONLY with: "{REFUSAL_TEXT}"
4. SAFETY: If a user expresses severe distress or self-harm, gently suggest they consult a professional immediately."""

CHAT_LLM_CONFIG = LLMConfig(
    temperature=0.7,
    max_tokens=800,
    timeout_seconds=settings.llm_timeout_seconds,
    max_retries=1,
)


def build_chat_messages(message: str, history: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    """System prompt, the most recent history turns, then the new user message.

    History turns use the client's roles ('user' / 'model').
    """
    messages = [{"role": "system", "content": CHAT_SYSTEM_PROMPT}]
    for turn in list(history)[-MAX_HISTORY_TURNS:]:
        text = (turn.get("text") or "").strip()
        if not text:
            continue
        role = "assistant" if turn.get("role") == "model" else "user"
        messages.append({"role": role, "content": text})
    messages.append({"role": "user", "content": message})
    return messages


def reply(message: str, history: Sequence[Dict[str, str]] = (), service: Optional[LLMService] = None) -> str:
    service = service or get_llm_service()
    response = service.chat(
        build_chat_messages(message, history),
        config=CHAT_LLM_CONFIG,
        use_fallback=True,
    )
    if not response.success:
        if response.error_kind == ERROR_KIND_CONFIGURATION:
            raise GenerationUnavailable(f"AI provider not configured: {response.error}", provider=response.provider)
        raise GenerationTransient("Failed to get AI response. Please try again.", provider=response.provider)
    return response.text
