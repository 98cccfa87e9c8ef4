# duell/services/game_service.py
"""Game session bookkeeping.

The server only stores the session: settings, the state name the frontend
reports and the ids of questions already shown. Betting and hint progression
happen client side.
"""

import random
from typing import Optional

from sqlalchemy.orm import Session

from duell.core import crud, models, schemas
from duell.services import question_service


class SessionNotFound(LookupError):
    pass


def create_session(db: Session, payload: schemas.SessionCreate) -> models.GameSession:
    return crud.create_game_session(db, payload.model_dump())


def get_session(db: Session, session_id: str) -> models.GameSession:
    session = crud.get_game_session(db, session_id)
    if session is None:
        raise SessionNotFound("Spielsitzung nicht gefunden")
    return session


def update_session(db: Session, session_id: str, payload: schemas.SessionUpdate) -> models.GameSession:
    session = get_session(db, session_id)
    return crud.update_game_session(
        db, session,
        current_state=payload.current_state or None,
        used_questions=payload.used_questions,
    )


def get_next_question(db: Session, session_id: str,
                      rng: Optional[random.Random] = None) -> schemas.NextQuestionOut:
    session = get_session(db, session_id)
    used = session.used_question_ids

    question = question_service.get_random_approved_question(db, used, rng=rng)
    if question is None:
        return schemas.NextQuestionOut(success=False, message=question_service.NO_MORE_QUESTIONS_MESSAGE)

    out = schemas.QuestionOut.model_validate(question)
    crud.update_game_session(db, session, used_questions=[*used, question.id])
    return schemas.NextQuestionOut(success=True, question=out)


def end_session(db: Session, session_id: str) -> models.GameSession:
    return crud.update_game_session(db, get_session(db, session_id), is_active=False)
