# duell/core/crud.py

import json
from sqlalchemy import func, update
from sqlalchemy.orm import Session, selectinload
from typing import Iterable, List, Optional

from duell.core import models, schemas
from duell.core.models import Category, QuestionStatus
from duell.core.security import get_password_hash
from duell.core.selection import RatedQuestion


# --- Admin CRUD ---
def get_admin_by_id(db: Session, admin_id: str) -> Optional[models.AdminUser]:
    return db.query(models.AdminUser).filter(models.AdminUser.id == admin_id).first()


def get_admin_by_username(db: Session, username: str) -> Optional[models.AdminUser]:
    return db.query(models.AdminUser).filter(models.AdminUser.username == username).first()


def upsert_admin(db: Session, username: str, password: str) -> tuple[models.AdminUser, bool]:
    """Create the admin or reset its password. Returns (admin, created)."""
    hashed_password = get_password_hash(password)
    admin = get_admin_by_username(db, username)
    created = admin is None
    if created:
        admin = models.AdminUser(username=username, hashed_password=hashed_password)
        db.add(admin)
    else:
        admin.hashed_password = hashed_password
    db.commit()
    db.refresh(admin)
    return admin, created


# --- Question CRUD ---
def _question_query(db: Session):
    return db.query(models.Question).options(selectinload(models.Question.hints))


def get_question(db: Session, question_id: str) -> Optional[models.Question]:
    return _question_query(db).filter(models.Question.id == question_id).first()


def find_question_by_text(db: Session, question_text: str, exclude_id: Optional[str] = None) -> Optional[models.Question]:
    # case-insensitive duplicate detection
    q = db.query(models.Question).filter(func.lower(models.Question.question_text) == question_text.lower())
    if exclude_id is not None:
        q = q.filter(models.Question.id != exclude_id)
    return q.first()


def create_question(db: Session, *, category: Category, question_text: str, answer_value: float,
                    hints: Iterable[tuple[int, str]], status: QuestionStatus = QuestionStatus.PENDING,
                    answer_unit: Optional[str] = None, explanation: Optional[str] = None,
                    source_url: Optional[str] = None, contributor_name: Optional[str] = None,
                    commit: bool = True) -> models.Question:
    question = models.Question(
        category=category,
        question_text=question_text,
        answer_value=answer_value,
        answer_unit=answer_unit,
        explanation=explanation,
        source_url=source_url,
        contributor_name=contributor_name,
        status=status,
    )
    question.hints = [models.Hint(order_index=idx, hint_text=text) for idx, text in hints]
    db.add(question)
    if commit:
        db.commit()
        db.refresh(question)
    return question


def list_questions(db: Session, *, status: Optional[QuestionStatus] = None, category: Optional[Category] = None,
                   search: Optional[str] = None, newest_first: bool = True) -> List[models.Question]:
    q = _question_query(db)
    if status is not None:
        q = q.filter(models.Question.status == status)
    if category is not None:
        q = q.filter(models.Question.category == category)
    if search:
        q = q.filter(models.Question.question_text.ilike(f"%{search.strip()}%"))
    order = models.Question.created_at.desc() if newest_first else models.Question.created_at.asc()
    return q.order_by(order, models.Question.id).all()


def count_questions(db: Session, status: Optional[QuestionStatus] = None) -> int:
    q = db.query(func.count(models.Question.id))
    if status is not None:
        q = q.filter(models.Question.status == status)
    return q.scalar() or 0


def set_question_status(db: Session, question: models.Question, status: QuestionStatus,
                        rejection_reason: Optional[str] = None) -> models.Question:
    question.status = status
    question.rejection_reason = rejection_reason
    db.commit()
    db.refresh(question)
    return question


def update_question_fields(db: Session, question: models.Question, payload: schemas.QuestionUpdate) -> models.Question:
    data = payload.model_dump(exclude_unset=True, exclude={"hints"})
    for key, value in data.items():
        setattr(question, key, value)
    if payload.hints is not None:
        # delete-orphan removes the previous hints on flush
        question.hints = [models.Hint(order_index=idx, hint_text=h.hint_text)
                          for idx, h in enumerate(payload.hints, start=1)]
    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question: models.Question) -> None:
    db.delete(question)
    db.commit()


# --- Selection support ---
def list_selection_candidates(db: Session, exclude_ids: Iterable[str] = ()) -> List[RatedQuestion]:
    """Approved questions outside ``exclude_ids``, projected to their rating totals."""
    q = db.query(models.Question.id, models.Question.rating_sum, models.Question.rating_count) \
        .filter(models.Question.status == QuestionStatus.APPROVED)
    exclude_ids = [i for i in exclude_ids if i]
    if exclude_ids:
        q = q.filter(models.Question.id.notin_(exclude_ids))
    rows = q.order_by(models.Question.created_at.asc(), models.Question.id.asc()).all()
    return [RatedQuestion(id=row.id, rating_sum=row.rating_sum or 0, rating_count=row.rating_count or 0)
            for row in rows]


def increment_played_count(db: Session, question_id: str) -> None:
    db.execute(
        update(models.Question)
        .where(models.Question.id == question_id)
        .values(played_count=models.Question.played_count + 1)
    )
    db.commit()


# --- Rating CRUD ---
def get_rating(db: Session, question_id: str, ip_hash: str) -> Optional[models.QuestionRating]:
    return db.query(models.QuestionRating).filter(
        models.QuestionRating.question_id == question_id,
        models.QuestionRating.ip_hash == ip_hash,
    ).first()


def add_rating(db: Session, question_id: str, ip_hash: str, rating: int) -> None:
    """Insert the rating row and bump the totals in one transaction."""
    try:
        db.add(models.QuestionRating(question_id=question_id, ip_hash=ip_hash, rating=rating))
        db.execute(
            update(models.Question)
            .where(models.Question.id == question_id)
            .values(rating_sum=models.Question.rating_sum + rating,
                    rating_count=models.Question.rating_count + 1)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise


# --- Game session CRUD ---
def create_game_session(db: Session, settings: dict) -> models.GameSession:
    session = models.GameSession(settings=json.dumps(settings, ensure_ascii=False), used_questions="[]")
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_game_session(db: Session, session_id: str) -> Optional[models.GameSession]:
    return db.query(models.GameSession).filter(models.GameSession.id == session_id).first()


def update_game_session(db: Session, session: models.GameSession, *, current_state: Optional[str] = None,
                        used_questions: Optional[List[str]] = None, is_active: Optional[bool] = None) -> models.GameSession:
    if current_state is not None:
        session.current_state = current_state
    if used_questions is not None:
        session.used_questions = json.dumps(list(used_questions))
    if is_active is not None:
        session.is_active = is_active
    db.commit()
    db.refresh(session)
    return session
