"""Randomized, balanced question selection for a new assessment attempt.

Pure functions only: the per-session history of already served questions is
passed in and a fresh copy is handed back, so concurrent sessions never share
state. Every selection yields ``QUESTIONS_PER_CATEGORY`` questions for each
category (the whole pool when it is smaller), interleaved at random.
"""
from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from app.core.question_bank import (
    CATEGORIES,
    QUESTION_POOL,
    QUESTION_TO_CATEGORY,
    QUESTIONS_PER_CATEGORY,
)
from app.exceptions import ContractViolation

logger = logging.getLogger("app.question_selector")

QuestionHistory = Dict[str, List[str]]


@dataclass(frozen=True)
class QuestionItem:
    text: str
    category: str

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "category": self.category}


def empty_history() -> QuestionHistory:
    return {category: [] for category in CATEGORIES}


def _pick_for_category(
    category: str,
    pool: Sequence[str],
    used: Sequence[str],
    rng: random.Random,
) -> Tuple[List[str], List[str]]:
    """Return (chosen texts, updated history list) for one category.

    A pool with QUESTIONS_PER_CATEGORY or fewer texts resets on every call and
    serves all of them.
    """
    if not pool:
        raise ContractViolation(f"Pool '{category}' has no questions")
    used_set = set(used)
    available = [q for q in pool if q not in used_set]
    history = list(used)
    if len(available) < QUESTIONS_PER_CATEGORY:
        # Exhausted: forget what was served and allow repeats
        logger.info("Question pool exhausted for category=%s; resetting history", category)
        available = list(pool)
        history = []
    rng.shuffle(available)
    chosen = available[:QUESTIONS_PER_CATEGORY]
    history.extend(chosen)
    return chosen, history


def select_questions(
    pools: Mapping[str, Sequence[str]] = QUESTION_POOL,
    history: Optional[Mapping[str, Sequence[str]]] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[List[QuestionItem], QuestionHistory]:
    """Pick a fresh question set and return it with the updated history.

    ``history`` maps category -> texts already served in this session. Missing
    categories count as empty; categories not present in ``pools`` are dropped
    from the returned history. The input mapping is never mutated.
    """
    rng = rng or random.Random()
    history = history or {}

    selected: List[QuestionItem] = []
    updated: QuestionHistory = {}
    for category, pool in pools.items():
        chosen, updated[category] = _pick_for_category(
            category, list(pool), list(history.get(category) or []), rng
        )
        selected.extend(QuestionItem(text=t, category=category) for t in chosen)

    rng.shuffle(selected)
    logger.debug("Selected %d questions across %d categories", len(selected), len(pools))
    return selected, updated


def validate_question_set(questions: Sequence[QuestionItem]) -> None:
    """Check a client-submitted set is one this selector could have produced.

    Every text must come from the bank under the claimed category, no text may
    repeat, and each category must contribute exactly QUESTIONS_PER_CATEGORY.
    """
    seen = set()
    per_category = {category: 0 for category in CATEGORIES}
    for index, item in enumerate(questions):
        if QUESTION_TO_CATEGORY.get(item.text) != item.category:
            raise ContractViolation(f"Question at position {index} is not a known {item.category!r} question")
        if item.text in seen:
            raise ContractViolation(f"Question at position {index} is repeated")
        seen.add(item.text)
        per_category[item.category] += 1
    unbalanced = {c: n for c, n in per_category.items() if n != QUESTIONS_PER_CATEGORY}
    if unbalanced:
        raise ContractViolation(
            f"Each category needs exactly {QUESTIONS_PER_CATEGORY} questions; got {unbalanced}"
        )
