from pydantic import BaseModel, Field
from typing import Dict, Optional, List, Literal
from datetime import datetime
from app.schemas.appointment import AppointmentOut


class QuestionItemIn(BaseModel):
    text: str = Field(..., min_length=1)
    category: str


class QuestionItemOut(BaseModel):
    text: str
    category: str


class AnswerOption(BaseModel):
    value: int
    label: str


class QuestionSetRequest(BaseModel):
    # category -> texts already served in this client session
    history: Dict[str, List[str]] = Field(default_factory=dict)


class QuestionSetResponse(BaseModel):
    questions: List[QuestionItemOut]
    history: Dict[str, List[str]]
    answer_options: List[AnswerOption]


class SubmitResultRequest(BaseModel):
    answers: List[int]
    questions: List[QuestionItemIn]


class ScoreResultOut(BaseModel):
    id: str
    score: int
    categorical_scores: Dict[str, int]
    category_levels: Dict[str, str]
    level: str
    timestamp: datetime
    ai_analysis: Optional[str] = None


class HistoryPage(BaseModel):
    results: List[ScoreResultOut]
    appointments: List[AppointmentOut]
    next_cursor: Optional[str] = None


class CategoricalScoresIn(BaseModel):
    medical: Optional[int] = None
    financial: Optional[int] = None
    relationship: Optional[int] = None


class AnalysisRequest(BaseModel):
    """Score snapshot to analyse; accepts the web client's camelCase keys too."""
    result_id: Optional[str] = Field(default=None, alias="resultId")
    score: Optional[int] = None
    categorical_scores: Optional[CategoricalScoresIn] = Field(default=None, alias="categoricalScores")
    level: Optional[str] = None
    force_regenerate: bool = Field(default=False, alias="forceRegenerate")

    model_config = {
        'populate_by_name': True
    }


class AnalysisResponse(BaseModel):
    analysis: str
    cached: bool


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    history: List[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    text: str
