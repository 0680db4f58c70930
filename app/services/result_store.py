"""SQLAlchemy-backed storage for assessment results and their AI analysis.

Thin adapter so the analysis cache gate and routes talk to a small storage
contract instead of the ORM directly. Write failures surface as
``PersistTransient``; the session is rolled back before raising.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import PersistTransient
from app.models.test_result import TestResult
from app.services.stress_scoring import ScoreResult, StressLevel

logger = logging.getLogger("app.result_store")


@dataclass(frozen=True)
class StoredResult:
    id: str
    user_id: str
    score: ScoreResult
    timestamp: datetime
    ai_analysis: Optional[str] = None


def _to_stored(row: TestResult) -> StoredResult:
    return StoredResult(
        id=row.id,
        user_id=row.user_id,
        score=ScoreResult(
            total=row.score,
            categorical_scores=dict(row.categorical_scores or {}),
            level=StressLevel(row.level),
        ),
        timestamp=row.timestamp,
        ai_analysis=row.ai_analysis,
    )


class ResultStore:
    def __init__(self, db: Session):
        self.db = db

    def write_result(self, user_id: str, result: ScoreResult) -> str:
        row = TestResult(
            id=str(uuid.uuid4()),
            user_id=user_id,
            score=result.total,
            categorical_scores=dict(result.categorical_scores),
            level=result.level.value,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistTransient(f"Failed to store result: {e}") from e
        self.db.refresh(row)
        logger.info("Stored result id=%s user=%s total=%d", row.id, user_id, result.total)
        return row.id

    def read_result(self, result_id: str) -> Optional[StoredResult]:
        row = self.db.query(TestResult).filter(TestResult.id == result_id).first()
        return _to_stored(row) if row else None

    def read_analysis(self, result_id: str) -> Optional[str]:
        row = (
            self.db.query(TestResult.ai_analysis)
            .filter(TestResult.id == result_id)
            .first()
        )
        return row[0] if row else None

    def write_analysis(self, result_id: str, text: str) -> None:
        """Overwrite the stored analysis; raises PersistTransient if nothing was written."""
        try:
            updated = (
                self.db.query(TestResult)
                .filter(TestResult.id == result_id)
                .update({TestResult.ai_analysis: text}, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistTransient(f"Failed to store analysis for {result_id}: {e}") from e
        if not updated:
            raise PersistTransient(f"No result {result_id} to attach analysis to")

    def list_results(
        self,
        user_id: str,
        limit: int = 20,
        before: Optional[Tuple[datetime, str]] = None,
    ) -> Tuple[List[StoredResult], bool]:
        """Newest-first page of a user's results and whether more remain."""
        query = self.db.query(TestResult).filter(TestResult.user_id == user_id)
        if before:
            ts, rid = before
            query = query.filter(
                (TestResult.timestamp < ts) | ((TestResult.timestamp == ts) & (TestResult.id < rid))
            )
        rows = (
            query.order_by(TestResult.timestamp.desc(), TestResult.id.desc())
            .limit(limit + 1)
            .all()
        )
        has_more = len(rows) > limit
        return [_to_stored(r) for r in rows[:limit]], has_more
