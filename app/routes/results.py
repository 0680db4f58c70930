from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import base64, json
import logging

from app.core.question_bank import ANSWER_OPTIONS
from app.db import get_db
from app.exceptions import NotFoundException
from app.models.appointment import Appointment
from app.models.user import User
from app.schemas.assessment import (
    HistoryPage,
    QuestionSetRequest,
    QuestionSetResponse,
    ScoreResultOut,
    SubmitResultRequest,
)
from app.services.audit import log_result_submit, log_result_view
from app.services.auth import get_current_user
from app.services.question_selector import QuestionItem, select_questions, validate_question_set
from app.services.result_store import ResultStore, StoredResult
from app.services.stress_scoring import category_levels, score_answers

logger = logging.getLogger("app.results")
router = APIRouter(tags=["Results"])


def _encode_cursor(timestamp: datetime, result_id: str) -> str:
    payload = {"ts": timestamp.isoformat(), "id": result_id}
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def _decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        data = json.loads(raw)
        return datetime.fromisoformat(data["ts"]), data["id"]
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid cursor")


def _result_out(stored: StoredResult, include_analysis: bool = False) -> ScoreResultOut:
    score = stored.score
    return ScoreResultOut(
        id=stored.id,
        score=score.total,
        categorical_scores=dict(score.categorical_scores),
        category_levels={c: lvl.value for c, lvl in category_levels(score.categorical_scores).items()},
        level=score.level.value,
        timestamp=stored.timestamp,
        ai_analysis=stored.ai_analysis if include_analysis else None,
    )


@router.post("/assessments/questions", response_model=QuestionSetResponse)
def get_question_set(
    payload: QuestionSetRequest,
    current_user: User = Depends(get_current_user),
):
    """Serve a fresh balanced question set, avoiding what this session has seen."""
    questions, history = select_questions(history=payload.history)
    return {
        "questions": [q.to_dict() for q in questions],
        "history": history,
        "answer_options": ANSWER_OPTIONS,
    }


@router.post("/results", response_model=ScoreResultOut, status_code=201)
def submit_result(
    payload: SubmitResultRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    questions = [QuestionItem(text=q.text, category=q.category) for q in payload.questions]
    validate_question_set(questions)
    result = score_answers(payload.answers, questions)

    store = ResultStore(db)
    result_id = store.write_result(current_user.id, result)
    log_result_submit(current_user.id, result_id, result.total, result.level.value)
    return _result_out(store.read_result(result_id))


@router.get("/results/{result_id}", response_model=ScoreResultOut)
def get_result(
    result_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    stored = ResultStore(db).read_result(result_id)
    # Someone else's result is indistinguishable from a missing one
    if not stored or stored.user_id != current_user.id:
        raise NotFoundException("Result not found")
    log_result_view(current_user.id, result_id)
    return _result_out(stored, include_analysis=True)


@router.get("/history", response_model=HistoryPage)
def get_history(
    limit: int = Query(20, ge=1, le=100),
    cursor: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Results newest first, one page at a time, plus the user's appointments."""
    before = _decode_cursor(cursor) if cursor else None
    results, has_more = ResultStore(db).list_results(current_user.id, limit=limit, before=before)
    next_cursor = _encode_cursor(results[-1].timestamp, results[-1].id) if has_more and results else None

    appointments = (
        db.query(Appointment)
        .filter(Appointment.user_id == current_user.id)
        .order_by(Appointment.timestamp.desc())
        .all()
    )
    return {
        "results": [_result_out(r, include_analysis=True) for r in results],
        "appointments": appointments,
        "next_cursor": next_cursor,
    }
