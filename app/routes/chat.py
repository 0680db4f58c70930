from fastapi import APIRouter, Depends
import logging

from app.models.user import User
from app.schemas.assessment import ChatRequest, ChatResponse
from app.services import wellness_chat
from app.services.auth import get_current_user

logger = logging.getLogger("app.chat")
router = APIRouter(tags=["Chat"])


@router.post("/chat", response_model=ChatResponse)
def chat(payload: ChatRequest, current_user: User = Depends(get_current_user)):
    history = [turn.model_dump() for turn in payload.history]
    text = wellness_chat.reply(payload.message, history)
    logger.info(f"CalmBot replied to user={current_user.id} turns={len(history)}")
    return {"text": text}
