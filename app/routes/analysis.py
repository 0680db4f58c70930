from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.db import get_db
from app.exceptions import NotFoundException
from app.models.user import User
from app.schemas.assessment import AnalysisRequest, AnalysisResponse
from app.services.ai_analysis import AnalysisCacheGate, LLMTextGenerator, ScoreInputs
from app.services.auth import get_current_user
from app.services.result_store import ResultStore

logger = logging.getLogger("app.analysis")
router = APIRouter(tags=["AI Analysis"])


def get_text_generator() -> LLMTextGenerator:
    return LLMTextGenerator()


@router.post("/ai-analysis", response_model=AnalysisResponse)
def create_ai_analysis(
    payload: AnalysisRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    generator: LLMTextGenerator = Depends(get_text_generator),
):
    """Return the stored analysis for a result, or generate (and cache) one.

    Without ``result_id`` the analysis is generated for the posted scores and
    nothing is stored.
    """
    store = ResultStore(db)
    if payload.result_id:
        stored = store.read_result(payload.result_id)
        if not stored or stored.user_id != current_user.id:
            raise NotFoundException("Result not found")

    categorical = payload.categorical_scores.model_dump() if payload.categorical_scores else {}
    gate = AnalysisCacheGate(store=store, generator=generator)
    outcome = gate.get_or_create_analysis(
        payload.result_id,
        ScoreInputs(total=payload.score, categorical_scores=categorical, level=payload.level),
        force_regenerate=payload.force_regenerate,
        user_id=current_user.id,
    )
    return {"analysis": outcome.text, "cached": outcome.cached}
