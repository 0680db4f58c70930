"""Stress assessment scoring (linear, unweighted sum).

Each answer is an integer severity 0-4. The total and per-category subtotals
are plain sums; the severity tier is derived from percentage bands of the
maximum attainable score. Category subtotals are banded against 20 points;
the overall level is banded against a 120-point scale.
"""
from __future__ import annotations
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence, Union

from app.core.question_bank import (
    ANSWER_MAX,
    ANSWER_MIN,
    CATEGORIES,
    CATEGORY_MAX_SCORE,
    OVERALL_LEVEL_SCALE,
)
from app.exceptions import ContractViolation
from app.services.question_selector import QuestionItem

logger = logging.getLogger("app.stress_scoring")


class StressLevel(str, enum.Enum):
    low = "Low"
    mild = "Mild"
    moderate = "Moderate"
    high = "High"


# (upper bound in quarters of max, level); bounds are inclusive
_BANDS = (
    (1, StressLevel.low),
    (2, StressLevel.mild),
    (3, StressLevel.moderate),
)


@dataclass(frozen=True)
class ScoreResult:
    total: int
    categorical_scores: Dict[str, int] = field(default_factory=dict)
    level: StressLevel = StressLevel.low

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.total,
            "categorical_scores": dict(self.categorical_scores),
            "level": self.level.value,
        }


def classify_level(score: int, max_score: int = OVERALL_LEVEL_SCALE) -> StressLevel:
    """Map a score to a tier using 25/50/75% bands of ``max_score``.

    Integer comparison (score * 4 vs max * quarter) keeps boundaries exact:
    5 of 20 is Low, 6 of 20 is Mild, 30 of 120 is Low and 31 of 120 is Mild.
    """
    if max_score <= 0:
        raise ContractViolation("max_score must be positive")
    for quarter, level in _BANDS:
        if score * 4 <= max_score * quarter:
            return level
    return StressLevel.high


def category_levels(categorical_scores: Mapping[str, int]) -> Dict[str, StressLevel]:
    return {
        category: classify_level(categorical_scores.get(category, 0), CATEGORY_MAX_SCORE)
        for category in CATEGORIES
    }


def _item_category(item: Union[QuestionItem, Mapping[str, Any]]) -> Any:
    if isinstance(item, QuestionItem):
        return item.category
    return item.get("category")


def score_answers(
    answers: Sequence[int],
    question_set: Sequence[Union[QuestionItem, Mapping[str, Any]]],
) -> ScoreResult:
    """Reduce aligned answers/questions to a ScoreResult.

    Raises ContractViolation when the sequences differ in length, an answer
    is outside 0-4, or a question carries an unknown category.
    """
    if len(answers) != len(question_set):
        raise ContractViolation(
            f"Answer count ({len(answers)}) does not match question count ({len(question_set)})"
        )

    total = 0
    categorical = {category: 0 for category in CATEGORIES}
    for index, (answer, item) in enumerate(zip(answers, question_set)):
        if isinstance(answer, bool) or not isinstance(answer, int) or not ANSWER_MIN <= answer <= ANSWER_MAX:
            raise ContractViolation(f"Answer at position {index} must be an integer 0-4")
        category = _item_category(item)
        if category not in categorical:
            raise ContractViolation(f"Question at position {index} has unknown category {category!r}")
        total += answer
        categorical[category] += answer

    result = ScoreResult(
        total=total,
        categorical_scores=categorical,
        level=classify_level(total, OVERALL_LEVEL_SCALE),
    )
    logger.info("Scored assessment: total=%d level=%s", total, result.level.value)
    return result
