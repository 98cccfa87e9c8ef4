# duell/core/schemas.py
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from typing import Annotated, List, Optional, Any
from datetime import datetime
import json

from duell.core.constants import (
    MIN_HINTS, MIN_RATING, MAX_RATING, DEFAULT_STARTING_MONEY, DEFAULT_TIMER_DURATION
)
from duell.core.models import Category, QuestionStatus


def _strip_required(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("darf nicht leer sein")
    return v


NonBlankStr = Annotated[str, AfterValidator(_strip_required)]


# --- Auth Schemas ---
class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=6)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str


class AdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str


# --- Hint Schemas ---
class HintIn(BaseModel):
    hint_text: NonBlankStr


class HintOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_index: int
    hint_text: str


# --- Question Schemas ---
class QuestionSubmit(BaseModel):
    category: Category
    question_text: NonBlankStr
    answer_value: float
    answer_unit: Optional[str] = None
    explanation: Optional[str] = None
    source_url: NonBlankStr
    hints: List[HintIn] = Field(min_length=MIN_HINTS)
    contributor_name: Optional[str] = None
    captcha_token: NonBlankStr


class QuestionUpdate(BaseModel):
    category: Optional[Category] = None
    question_text: Optional[str] = None
    answer_value: Optional[float] = None
    answer_unit: Optional[str] = None
    explanation: Optional[str] = None
    source_url: Optional[str] = None
    hints: Optional[List[HintIn]] = None
    contributor_name: Optional[str] = None

    # omitted fields stay untouched; an explicit null would violate NOT NULL columns
    @field_validator("category", "question_text", "answer_value", "hints")
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("darf nicht null sein")
        return v

    @field_validator("question_text")
    @classmethod
    def _question_text_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: Category
    question_text: str
    answer_value: float
    answer_unit: Optional[str] = None
    explanation: Optional[str] = None
    source_url: Optional[str] = None
    status: QuestionStatus
    contributor_name: Optional[str] = None
    rejection_reason: Optional[str] = None
    played_count: int = 0
    rating_sum: int = 0
    rating_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    hints: List[HintOut] = []


class RandomQuestionOut(BaseModel):
    success: bool
    message: Optional[str] = None
    question: Optional[QuestionOut] = None


class SubmitResult(BaseModel):
    success: bool = True
    message: str
    question_id: str


class RateQuestion(BaseModel):
    question_id: str
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)


class ActionResult(BaseModel):
    success: bool = True
    message: str


class CaptchaChallenge(BaseModel):
    challenge_id: str
    question: str


class QuestionCount(BaseModel):
    count: int


# --- Admin Schemas ---
class RejectQuestion(BaseModel):
    reason: Optional[str] = None


class DashboardStats(BaseModel):
    pending: int
    approved: int
    rejected: int
    total: int


class ExportHint(BaseModel):
    order_index: int
    hint_text: NonBlankStr


class ExportQuestion(BaseModel):
    question_text: NonBlankStr
    category: Category = Category.MISC
    answer_value: float
    answer_unit: Optional[str] = None
    explanation: Optional[str] = None
    source_url: Optional[str] = None
    contributor_name: Optional[str] = None
    status: Optional[QuestionStatus] = None
    hints: List[ExportHint] = Field(min_length=1)


class QuestionExport(BaseModel):
    exported_at: Optional[str] = None
    version: Optional[str] = None
    questions: List[ExportQuestion] = Field(min_length=1)


class ImportResult(BaseModel):
    success: bool = True
    imported: int
    skipped: int
    errors: List[str]
    message: str


class SeedQuestion(BaseModel):
    question_text: NonBlankStr
    category: str = "Sonstiges"  # German display name or enum value
    answer: NonBlankStr  # German number format, e.g. "2,25 Milliarden Tassen"
    hints: List[NonBlankStr] = Field(min_length=MIN_HINTS)
    explanation: Optional[str] = None
    source_url: Optional[str] = None


class SeedFile(BaseModel):
    version: Optional[str] = None
    questions: List[SeedQuestion]


# --- Game Session Schemas ---
class SessionCreate(BaseModel):
    player_count: int = Field(ge=2, le=8)
    player_names: List[str] = Field(min_length=2)
    starting_money: int = Field(default=DEFAULT_STARTING_MONEY, ge=100)
    timer_duration: int = Field(default=DEFAULT_TIMER_DURATION, ge=0)  # seconds, 0 = no timer


class SessionUpdate(BaseModel):
    current_state: Optional[str] = None
    used_questions: Optional[List[str]] = None


def _load_json(v: Any, default: Any) -> Any:
    if isinstance(v, str):
        try:
            return json.loads(v or "null") or default
        except json.JSONDecodeError:
            raise ValueError("invalid JSON string")
    return v if v is not None else default


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    settings: dict
    used_questions: List[str]
    current_state: str
    is_active: bool
    created_at: Optional[datetime] = None

    @field_validator("settings", mode="before")
    @classmethod
    def _parse_settings(cls, v: Any) -> Any:
        return _load_json(v, {})

    @field_validator("used_questions", mode="before")
    @classmethod
    def _parse_used_questions(cls, v: Any) -> Any:
        return _load_json(v, [])


class NextQuestionOut(RandomQuestionOut):
    pass


# --- Health ---
class HealthStatus(BaseModel):
    status: str
    timestamp: str
    database: str
    database_type: str
