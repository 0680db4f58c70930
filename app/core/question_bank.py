"""Canonical stress assessment question pools.

Three fixed pools (medical, financial, relationship) of 30 questions each.
Category order in ``CATEGORIES`` is the declaration order used whenever
categories need a stable tie-break (prompt ranking, serialization).

Importing this module will raise if the pools are malformed.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

CATEGORIES: Tuple[str, ...] = ("medical", "financial", "relationship")

QUESTIONS_PER_CATEGORY = 5
ANSWER_MIN = 0
ANSWER_MAX = 4

CATEGORY_MAX_SCORE = QUESTIONS_PER_CATEGORY * ANSWER_MAX
TOTAL_MAX_SCORE = CATEGORY_MAX_SCORE * len(CATEGORIES)

# The overall level is read against a 120-point scale, so a total of 30 is Low
# and a full-marks 60 is Mild. Category levels use CATEGORY_MAX_SCORE.
OVERALL_LEVEL_SCALE = 120

# Likert labels shown next to each question (value -> label)
ANSWER_OPTIONS: List[Dict[str, object]] = [
    {"label": "Never", "value": 0},
    {"label": "Rarely", "value": 1},
    {"label": "Sometimes", "value": 2},
    {"label": "Often", "value": 3},
    {"label": "Always", "value": 4},
]

CATEGORY_DISPLAY_NAMES: Dict[str, str] = {
    "medical": "Medical/Health",
    "financial": "Financial",
    "relationship": "Relationship",
}

_POOLS: Dict[str, Tuple[str, ...]] = {
    "medical": (
        "Do you feel tired even after sleeping enough?",
        "Do you experience frequent headaches or migraines?",
        "Do you feel muscle tension in your neck or shoulders?",
        "Do you have trouble falling asleep?",
        "Do you wake up feeling unrefreshed?",
        "Do you feel physically weak without heavy activity?",
        "Do you experience sudden appetite changes?",
        "Do you feel mentally exhausted during the day?",
        "Do you find it hard to concentrate?",
        "Do you feel restless or unable to relax?",
        "Do you have stomach issues during stress?",
        "Do you feel dizzy or light-headed when stressed?",
        "Do you worry about your health frequently?",
        "Do you feel low energy most days?",
        "Do daily tasks feel overwhelming?",
        "Do you experience mood swings?",
        "Do you feel chest pressure during stress?",
        "Do you avoid exercise due to fatigue?",
        "Do you feel emotionally drained after work?",
        "Do health issues affect your productivity?",
        "Do you feel work-life imbalance?",
        "Do you feel nervous without clear reason?",
        "Do you feel burnout from responsibilities?",
        "Do emotional stress cause physical symptoms?",
        "Do you feel stress weakens your immunity?",
        "Do you rely on caffeine to function?",
        "Do you struggle to relax your body?",
        "Do you feel mentally overloaded?",
        "Do you feel stress even during rest?",
        "Do health stress reduce your happiness?",
    ),
    "financial": (
        "Do you worry about money regularly?",
        "Do you feel income is insufficient?",
        "Do you stress about financial future?",
        "Do unexpected expenses cause anxiety?",
        "Do you avoid checking your expenses?",
        "Do saving money stress you?",
        "Do you compare finances with others?",
        "Do you feel pressure to earn more?",
        "Do money worries affect sleep?",
        "Do you feel financially insecure?",
        "Do you struggle with monthly expenses?",
        "Do loans or debts stress you?",
        "Do you feel pressure to support family?",
        "Do you feel guilty spending money?",
        "Do you delay purchases due to stress?",
        "Do finances affect mental health?",
        "Do you feel anxious before payday?",
        "Do rising expenses stress you?",
        "Do money issues reduce confidence?",
        "Do finances affect work or studies?",
        "Do you feel no control over money?",
        "Do career income worries stress you?",
        "Do emergency savings worry you?",
        "Do social financial pressure stress you?",
        "Do you avoid money discussions?",
        "Do you feel financially dependent?",
        "Do future plans cause anxiety?",
        "Do finances limit life choices?",
        "Do money issues affect relationships?",
        "Do you feel trapped financially?",
    ),
    "relationship": (
        "Do you feel misunderstood by close people?",
        "Do family conflicts disturb your peace?",
        "Do arguments affect your whole day?",
        "Do you hesitate to express feelings?",
        "Do you feel emotionally unsupported?",
        "Do you feel lonely even in relationships?",
        "Do you replay arguments in your mind?",
        "Do you feel pressure to please others?",
        "Do communication gaps stress you?",
        "Do you feel ignored by loved ones?",
        "Do relationship issues affect sleep?",
        "Do conversations emotionally drain you?",
        "Do disagreements cause guilt?",
        "Do others’ expectations stress you?",
        "Do relationships affect your focus?",
        "Do you feel insecure in relationships?",
        "Do you fear losing close people?",
        "Do trust issues stress you?",
        "Do you feel emotionally dependent?",
        "Do you feel pressure to behave certain ways?",
        "Do you avoid difficult conversations?",
        "Do emotional issues lower motivation?",
        "Do social comparisons stress you?",
        "Do you feel ignored in groups?",
        "Do people take your emotions lightly?",
        "Do uncertain relationships stress you?",
        "Do small comments hurt deeply?",
        "Do emotions affect productivity?",
        "Do social obligations overwhelm you?",
        "Do relationship stress lower confidence?",
    ),
}

QUESTION_POOL: Mapping[str, Tuple[str, ...]] = MappingProxyType(_POOLS)

# Reverse lookup used to validate submitted question sets
QUESTION_TO_CATEGORY: Dict[str, str] = {
    text: category for category, texts in _POOLS.items() for text in texts
}


def _validate_integrity() -> None:
    if tuple(_POOLS.keys()) != CATEGORIES:
        raise ValueError(f"Pool categories {tuple(_POOLS.keys())} do not match {CATEGORIES}")
    for category, texts in _POOLS.items():
        if len(texts) < QUESTIONS_PER_CATEGORY:
            raise ValueError(f"Pool '{category}' has fewer than {QUESTIONS_PER_CATEGORY} questions")
        if len(set(texts)) != len(texts):
            raise ValueError(f"Duplicate question text in pool '{category}'")
    if len(QUESTION_TO_CATEGORY) != sum(len(t) for t in _POOLS.values()):
        raise ValueError("Question text shared between categories")

_validate_integrity()

__all__ = [
    "CATEGORIES",
    "QUESTION_POOL",
    "QUESTION_TO_CATEGORY",
    "QUESTIONS_PER_CATEGORY",
    "ANSWER_MIN",
    "ANSWER_MAX",
    "ANSWER_OPTIONS",
    "CATEGORY_MAX_SCORE",
    "TOTAL_MAX_SCORE",
    "OVERALL_LEVEL_SCALE",
    "CATEGORY_DISPLAY_NAMES",
]
