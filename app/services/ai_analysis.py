"""Personalized wellness analysis with a per-result cache.

``AnalysisCacheGate`` decides, for one stored assessment result, whether to
serve the previously generated narrative or to call the text generator:

- not cached, not forced  -> generate once, persist, return ``cached=False``
- cached, not forced      -> return the stored text, ``cached=True``, no call
- forced                  -> always generate; overwrite only on success

Exactly one generation attempt is made per call; retry cadence belongs to
the client. A storage write failure after a successful generation is logged
and the fresh text is still returned. Concurrent forced regenerations for
the same result are not serialized (last write wins).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from app.core.question_bank import (
    CATEGORIES,
    CATEGORY_DISPLAY_NAMES,
    CATEGORY_MAX_SCORE,
    OVERALL_LEVEL_SCALE,
    TOTAL_MAX_SCORE,
)
from app.core.settings import settings
from app.exceptions import ContractViolation, GenerationTransient, GenerationUnavailable
from app.services.audit import log_analysis_generated, log_analysis_cache_hit
from app.services.llm import (
    ERROR_KIND_CONFIGURATION,
    LLMConfig,
    LLMService,
    get_llm_service,
)
from app.services.stress_scoring import classify_level

logger = logging.getLogger("app.ai_analysis")

ANALYSIS_SYSTEM_PROMPT = (
    "You are a wellness AI specializing in stress management. Generate PERSONALIZED tips "
    "based on the user's specific stress categories (Medical, Financial, Relationship). "
    "Output ONLY the formatted review. No intro text, no explanations - just the formatted "
    "tips starting with the 🌱 emoji."
)

ANALYSIS_LLM_CONFIG = LLMConfig(
    temperature=0.8,
    max_tokens=1200,
    timeout_seconds=settings.llm_timeout_seconds,
    max_retries=1,
)


class TextGenerator(Protocol):
    def generate(self, system_prompt: str, user_prompt: str) -> str: ...


class AnalysisStore(Protocol):
    def read_analysis(self, result_id: str) -> Optional[str]: ...

    def write_analysis(self, result_id: str, text: str) -> None: ...


@dataclass(frozen=True)
class ScoreInputs:
    total: Optional[int]
    categorical_scores: Mapping[str, Optional[int]] = field(default_factory=dict)
    level: Optional[str] = None


@dataclass(frozen=True)
class AnalysisOutcome:
    text: str
    cached: bool


def _validate_inputs(inputs: ScoreInputs) -> Tuple[int, Dict[str, int], str]:
    """Return (total, categorical, level) or raise ContractViolation."""
    if inputs.total is None:
        raise ContractViolation("Missing required field: score")
    categorical = inputs.categorical_scores or {}
    missing = [c for c in CATEGORIES if categorical.get(c) is None]
    if missing:
        raise ContractViolation(f"Missing categorical scores: {', '.join(missing)}")
    values = {"score": inputs.total, **{c: categorical[c] for c in CATEGORIES}}
    bad = [k for k, v in values.items() if isinstance(v, bool) or not isinstance(v, int) or v < 0]
    if bad:
        raise ContractViolation(f"Scores must be non-negative integers: {', '.join(bad)}")
    level = inputs.level or classify_level(inputs.total, OVERALL_LEVEL_SCALE).value
    return inputs.total, {c: categorical[c] for c in CATEGORIES}, level


def rank_categories(categorical_scores: Mapping[str, int]) -> List[Tuple[str, int]]:
    """Categories by score, highest first; ties keep declaration order."""
    return sorted(
        ((c, categorical_scores[c]) for c in CATEGORIES),
        key=lambda item: item[1],
        reverse=True,
    )


def build_analysis_prompt(total: int, categorical_scores: Mapping[str, int], level: str) -> str:
    ranked = rank_categories(categorical_scores)
    (top_cat, top_score), (second_cat, second_score) = ranked[0], ranked[1]
    top_name = CATEGORY_DISPLAY_NAMES[top_cat]
    second_name = CATEGORY_DISPLAY_NAMES[second_cat]

    def cat_line(icon: str, label: str, category: str) -> str:
        score = categorical_scores[category]
        tier = classify_level(score, CATEGORY_MAX_SCORE).value
        return f"- {icon} {label}: {score}/{CATEGORY_MAX_SCORE} ({tier})"

    tips = []
    for n, (emoji, topic) in enumerate([
        ("1️⃣", f"related to {top_name}"),
        ("2️⃣", f"related to {second_name}"),
        ("3️⃣", "general wellness"),
        ("4️⃣", f"based on overall {level} level"),
        ("5️⃣", "self-care/support"),
    ], start=1):
        tips.append(f"{emoji} [Tip {n} title - {topic}]\n\n[Step 1]\n\n[Step 2]\n\n[Step 3]")

    return "\n".join([
        "You are a wellness AI. Generate a PERSONALIZED stress management review.",
        "",
        "ASSESSMENT RESULTS:",
        f"- Overall Level: {level} ({total}/{TOTAL_MAX_SCORE} total)",
        cat_line("🏥", "Medical/Health Stress", "medical"),
        cat_line("💰", "Financial Stress", "financial"),
        cat_line("💑", "Relationship Stress", "relationship"),
        "",
        f"HIGHEST STRESS AREA: {top_name} ({top_score}/{CATEGORY_MAX_SCORE})",
        f"SECOND HIGHEST: {second_name} ({second_score}/{CATEGORY_MAX_SCORE})",
        "",
        "IMPORTANT: Generate tips that SPECIFICALLY address the user's stress categories:",
        "- If Medical/Health stress is high: Include tips about sleep, exercise, health checkups, physical relaxation",
        "- If Financial stress is high: Include tips about budgeting, financial planning, reducing money anxiety, small savings habits",
        "- If Relationship stress is high: Include tips about communication, setting boundaries, quality time, conflict resolution",
        "",
        "OUTPUT FORMAT (follow exactly):",
        "",
        f"🌱 Personalized tips for your {level} stress",
        "",
        f"📊 Your highest stress area: {top_name}",
        "",
        "\n\n".join(tips),
        "",
        "💪 Remember: Small steps lead to big changes!",
        "",
        "RULES:",
        "- Use emojis 1️⃣ 2️⃣ 3️⃣ 4️⃣ 5️⃣",
        "- Title on same line as emoji number",
        "- Each step on separate line",
        "- Empty line between each tip",
        "- Make tips SPECIFIC to the stress categories shown above",
        "- Keep steps short and actionable",
        "",
        "Generate now:",
    ])


class LLMTextGenerator:
    """Adapts LLMService to the single-attempt text generator contract."""

    def __init__(self, service: Optional[LLMService] = None, config: LLMConfig = ANALYSIS_LLM_CONFIG):
        self._service = service
        self._config = config

    @property
    def service(self) -> LLMService:
        return self._service or get_llm_service()

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        response = self.service.generate(
            system_prompt=system_prompt,
            user_content=user_prompt,
            config=self._config,
            use_fallback=False,
        )
        if not response.success:
            if response.error_kind == ERROR_KIND_CONFIGURATION:
                raise GenerationUnavailable(
                    f"AI provider not configured: {response.error}", provider=response.provider
                )
            raise GenerationTransient(
                "AI service temporarily unavailable. Please try again later.",
                provider=response.provider,
            )
        return response.text


class AnalysisCacheGate:
    def __init__(self, store: AnalysisStore, generator: TextGenerator):
        self.store = store
        self.generator = generator

    def _cached_text(self, result_id: str) -> Optional[str]:
        try:
            return self.store.read_analysis(result_id)
        except Exception as e:
            # Treat an unreadable cache as a miss; generation can still succeed
            logger.error("Failed to read stored analysis for result=%s: %s", result_id, e)
            return None

    def _generate(self, prompt: str) -> str:
        text = self.generator.generate(ANALYSIS_SYSTEM_PROMPT, prompt)
        if not text or not text.strip():
            logger.error("AI returned empty analysis")
            raise GenerationTransient("AI returned empty response. Please try again.")
        return text.strip()

    def get_or_create_analysis(
        self,
        result_id: Optional[str],
        score_inputs: ScoreInputs,
        force_regenerate: bool = False,
        user_id: Optional[str] = None,
    ) -> AnalysisOutcome:
        total, categorical, level = _validate_inputs(score_inputs)

        if result_id and not force_regenerate:
            stored = self._cached_text(result_id)
            if stored:
                logger.info("Returning cached analysis for result=%s", result_id)
                log_analysis_cache_hit(user_id, result_id)
                return AnalysisOutcome(text=stored, cached=True)
            logger.info("No stored analysis for result=%s; generating", result_id)
        elif force_regenerate:
            logger.info("Forced regeneration requested for result=%s", result_id)

        text = self._generate(build_analysis_prompt(total, categorical, level))

        persisted = False
        if result_id:
            try:
                self.store.write_analysis(result_id, text)
                persisted = True
            except Exception as e:
                logger.error("Failed to save analysis for result=%s: %s", result_id, e)

        log_analysis_generated(user_id, result_id, forced=force_regenerate, persisted=persisted)
        return AnalysisOutcome(text=text, cached=False)
