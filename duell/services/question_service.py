# duell/services/question_service.py

import random
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from duell.core import crud, models, schemas
from duell.core.captcha import CaptchaService, captcha_service
from duell.core.logger import logger
from duell.core.models import QuestionStatus
from duell.core.selection import select_weighted
from duell.core.utils import hash_ip

NO_MORE_QUESTIONS_MESSAGE = "Keine weiteren genehmigten Fragen verfügbar"


class QuestionError(ValueError):
    """Rejected request; the message is shown to the user."""


def submit_question(db: Session, payload: schemas.QuestionSubmit,
                    captcha: CaptchaService = captcha_service) -> schemas.SubmitResult:
    if not captcha.verify_captcha(payload.captcha_token):
        raise QuestionError("CAPTCHA-Überprüfung fehlgeschlagen")

    if crud.find_question_by_text(db, payload.question_text):
        raise QuestionError("Eine ähnliche Frage existiert bereits")

    question = crud.create_question(
        db,
        category=payload.category,
        question_text=payload.question_text,
        answer_value=payload.answer_value,
        answer_unit=payload.answer_unit,
        explanation=payload.explanation,
        source_url=payload.source_url,
        contributor_name=payload.contributor_name,
        status=QuestionStatus.PENDING,
        hints=[(idx, h.hint_text) for idx, h in enumerate(payload.hints, start=1)],
    )
    logger.info(f"Neue Frage eingereicht | id={question.id} category={question.category.value}")
    return schemas.SubmitResult(
        message="Frage erfolgreich eingereicht! Sie wird von einem Admin überprüft.",
        question_id=question.id,
    )


def get_random_approved_question(db: Session, exclude_ids: Iterable[str] = (),
                                 rng: Optional[random.Random] = None) -> Optional[models.Question]:
    """Weighted draw among approved questions not in ``exclude_ids``.

    Returns None once the pool is exhausted. The chosen question's
    ``played_count`` is incremented before it is returned.
    """
    candidates = crud.list_selection_candidates(db, exclude_ids)
    selected_id = select_weighted(candidates, rng=rng)
    if selected_id is None:
        return None

    crud.increment_played_count(db, selected_id)
    return crud.get_question(db, selected_id)


def random_question_response(question: Optional[models.Question]) -> schemas.RandomQuestionOut:
    if question is None:
        return schemas.RandomQuestionOut(success=False, message=NO_MORE_QUESTIONS_MESSAGE, question=None)
    return schemas.RandomQuestionOut(success=True, question=schemas.QuestionOut.model_validate(question))


def count_approved_questions(db: Session) -> int:
    return crud.count_questions(db, QuestionStatus.APPROVED)


def rate_question(db: Session, question_id: str, rating: int, ip_address: str) -> schemas.ActionResult:
    if crud.get_question(db, question_id) is None:
        raise QuestionError("Frage nicht gefunden")

    ip_hash = hash_ip(ip_address)
    if crud.get_rating(db, question_id, ip_hash) is not None:
        raise QuestionError("Du hast diese Frage bereits bewertet")

    try:
        crud.add_rating(db, question_id, ip_hash, rating)
    except IntegrityError:
        # a concurrent request from the same client won the unique constraint
        raise QuestionError("Du hast diese Frage bereits bewertet")
    return schemas.ActionResult(message="Bewertung gespeichert")
