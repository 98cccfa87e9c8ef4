# duell/services/admin_service.py

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from duell.core import crud, models, schemas
from duell.core.constants import EXPORT_FORMAT_VERSION, MIN_HINTS
from duell.core.logger import logger
from duell.core.models import Category, QuestionStatus


class QuestionNotFound(LookupError):
    pass


def _get_or_404(db: Session, question_id: str) -> models.Question:
    question = crud.get_question(db, question_id)
    if question is None:
        raise QuestionNotFound("Frage nicht gefunden")
    return question


def get_dashboard_stats(db: Session) -> schemas.DashboardStats:
    return schemas.DashboardStats(
        pending=crud.count_questions(db, QuestionStatus.PENDING),
        approved=crud.count_questions(db, QuestionStatus.APPROVED),
        rejected=crud.count_questions(db, QuestionStatus.REJECTED),
        total=crud.count_questions(db),
    )


def get_question(db: Session, question_id: str) -> models.Question:
    return _get_or_404(db, question_id)


def approve_question(db: Session, question_id: str) -> models.Question:
    question = crud.set_question_status(db, _get_or_404(db, question_id), QuestionStatus.APPROVED)
    logger.info(f"Frage genehmigt | id={question_id}")
    return question


def reject_question(db: Session, question_id: str, reason: Optional[str] = None) -> models.Question:
    question = crud.set_question_status(db, _get_or_404(db, question_id), QuestionStatus.REJECTED, reason)
    logger.info(f"Frage abgelehnt | id={question_id} reason={reason!r}")
    return question


def update_question(db: Session, question_id: str, payload: schemas.QuestionUpdate) -> models.Question:
    question = _get_or_404(db, question_id)

    if payload.question_text and payload.question_text != question.question_text:
        if crud.find_question_by_text(db, payload.question_text, exclude_id=question_id):
            raise ValueError("Eine ähnliche Frage existiert bereits")

    if payload.hints is not None and len(payload.hints) < MIN_HINTS:
        raise ValueError(f"Mindestens {MIN_HINTS} Hinweise sind erforderlich")

    return crud.update_question_fields(db, question, payload)


def delete_question(db: Session, question_id: str) -> schemas.ActionResult:
    crud.delete_question(db, _get_or_404(db, question_id))
    logger.info(f"Frage gelöscht | id={question_id}")
    return schemas.ActionResult(message="Frage erfolgreich gelöscht")


def export_questions(db: Session) -> dict:
    """All questions without ids, oldest first, for moving between installations."""
    questions = crud.list_questions(db, newest_first=False)
    return {
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "version": EXPORT_FORMAT_VERSION,
        "questions": [
            {
                "question_text": q.question_text,
                "category": q.category.value,
                "answer_value": q.answer_value,
                "answer_unit": q.answer_unit,
                "explanation": q.explanation,
                "source_url": q.source_url,
                "contributor_name": q.contributor_name,
                "status": q.status.value,
                "hints": [{"order_index": h.order_index, "hint_text": h.hint_text} for h in q.hints],
            }
            for q in questions
        ],
    }


def import_questions(db: Session, payload: schemas.QuestionExport, skip_duplicates: bool = True) -> schemas.ImportResult:
    imported, skipped = 0, 0
    errors: list[str] = []

    for item in payload.questions:
        try:
            if crud.find_question_by_text(db, item.question_text):
                if skip_duplicates:
                    skipped += 1
                else:
                    errors.append(f'Duplikat übersprungen: "{item.question_text[:50]}..."')
                continue

            crud.create_question(
                db,
                category=item.category or Category.MISC,
                question_text=item.question_text,
                answer_value=item.answer_value,
                answer_unit=item.answer_unit,
                explanation=item.explanation,
                source_url=item.source_url,
                contributor_name=item.contributor_name,
                status=item.status or QuestionStatus.APPROVED,
                hints=[(h.order_index, h.hint_text) for h in item.hints],
            )
            imported += 1
        except Exception as e:
            db.rollback()
            logger.warning(f"Import fehlgeschlagen | {item.question_text[:30]!r}: {e}")
            errors.append(f'Fehler bei "{item.question_text[:30]}...": {e}')

    logger.info(f"Import abgeschlossen | imported={imported} skipped={skipped} errors={len(errors)}")
    return schemas.ImportResult(
        imported=imported,
        skipped=skipped,
        errors=errors,
        message=f"Import abgeschlossen: {imported} importiert, {skipped} übersprungen (Duplikate)",
    )
