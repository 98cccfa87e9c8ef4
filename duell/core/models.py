# duell/core/models.py

import json
import enum
import uuid
from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLAlchemyEnum, Text, Boolean, Float, \
    UniqueConstraint, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from duell.core.constants import INITIAL_GAME_STATE

Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


class Category(str, enum.Enum):
    SCIENCE = "SCIENCE"
    HISTORY = "HISTORY"
    GEOGRAPHY = "GEOGRAPHY"
    SPORTS = "SPORTS"
    TECHNOLOGY = "TECHNOLOGY"
    POP_CULTURE = "POP_CULTURE"
    MISC = "MISC"
    EVERYDAY = "EVERYDAY"
    ANIMALS = "ANIMALS"
    FOOD = "FOOD"
    HEALTH = "HEALTH"
    MUSIC = "MUSIC"
    ASTRONOMY = "ASTRONOMY"


class QuestionStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AdminUser(Base):
    __tablename__ = "admin_users"
    id = Column(String(32), primary_key=True, default=_new_id)
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Question(Base):
    __tablename__ = "questions"
    id = Column(String(32), primary_key=True, default=_new_id)
    category = Column(SQLAlchemyEnum(Category), nullable=False, default=Category.MISC)
    question_text = Column(Text, nullable=False)
    answer_value = Column(Float, nullable=False)
    answer_unit = Column(String, nullable=True)
    explanation = Column(Text, nullable=True)
    source_url = Column(String, nullable=True)
    contributor_name = Column(String, nullable=True)
    status = Column(SQLAlchemyEnum(QuestionStatus), nullable=False, default=QuestionStatus.PENDING, index=True)
    rejection_reason = Column(Text, nullable=True)
    played_count = Column(Integer, nullable=False, default=0)
    rating_sum = Column(Integer, nullable=False, default=0)
    rating_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    hints = relationship(
        "Hint",
        back_populates="question",
        order_by="Hint.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    ratings = relationship("QuestionRating", cascade="all, delete-orphan", passive_deletes=True)


class Hint(Base):
    __tablename__ = "hints"
    id = Column(String(32), primary_key=True, default=_new_id)
    question_id = Column(String(32), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    order_index = Column(Integer, nullable=False)
    hint_text = Column(Text, nullable=False)

    question = relationship("Question", back_populates="hints")
    __table_args__ = (Index("idx_hints_question_order", "question_id", "order_index"),)


class QuestionRating(Base):
    __tablename__ = "question_ratings"
    id = Column(String(32), primary_key=True, default=_new_id)
    question_id = Column(String(32), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    ip_hash = Column(String(64), nullable=False)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    __table_args__ = (UniqueConstraint("question_id", "ip_hash", name="uq_rating_question_ip"),)


class GameSession(Base):
    __tablename__ = "game_sessions"
    id = Column(String(32), primary_key=True, default=_new_id)
    settings = Column(String, default="{}")
    used_questions = Column(String, default="[]")
    current_state = Column(String, nullable=False, default=INITIAL_GAME_STATE)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def settings_data(self) -> dict:
        return json.loads(self.settings or "{}")

    @property
    def used_question_ids(self) -> list[str]:
        return json.loads(self.used_questions or "[]")
