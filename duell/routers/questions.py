# duell/routers/questions.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from duell.core import schemas
from duell.core.captcha import captcha_service
from duell.core.database import get_db
from duell.core.utils import get_client_ip
from duell.services import question_service

router = APIRouter(
    prefix="/api/questions",
    tags=["Questions"],
)


def _parse_exclude(exclude: Optional[str]) -> list[str]:
    if not exclude:
        return []
    return [i.strip() for i in exclude.split(",") if i.strip()]


@router.post("/submit", response_model=schemas.SubmitResult)
def submit_question(payload: schemas.QuestionSubmit, db: Session = Depends(get_db)):
    try:
        return question_service.submit_question(db, payload)
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.get("/random", response_model=schemas.RandomQuestionOut)
def get_random_question(exclude: Optional[str] = Query(default=None, description="Komma-getrennte Fragen-IDs"),
                        db: Session = Depends(get_db)):
    """Weighted random approved question. An exhausted pool is answered with success=false, not an error."""
    question = question_service.get_random_approved_question(db, _parse_exclude(exclude))
    return question_service.random_question_response(question)


@router.get("/count", response_model=schemas.QuestionCount)
def get_questions_count(db: Session = Depends(get_db)):
    return {"count": question_service.count_approved_questions(db)}


@router.get("/captcha", response_model=schemas.CaptchaChallenge)
def get_captcha_challenge():
    return captcha_service.generate_challenge()


@router.post("/rate", response_model=schemas.ActionResult)
def rate_question(payload: schemas.RateQuestion, request: Request, db: Session = Depends(get_db)):
    try:
        return question_service.rate_question(db, payload.question_id, payload.rating, get_client_ip(request))
    except ValueError as e:
        raise HTTPException(400, str(e))
