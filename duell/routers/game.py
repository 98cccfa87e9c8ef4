# duell/routers/game.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from duell.core import schemas
from duell.core.database import get_db
from duell.services import game_service

router = APIRouter(
    prefix="/api/game",
    tags=["Game"],
)


@router.post("/session", status_code=status.HTTP_201_CREATED, response_model=schemas.SessionOut)
def create_session(payload: schemas.SessionCreate, db: Session = Depends(get_db)):
    return game_service.create_session(db, payload)


@router.get("/session/{session_id}", response_model=schemas.SessionOut)
def get_session(session_id: str, db: Session = Depends(get_db)):
    try:
        return game_service.get_session(db, session_id)
    except game_service.SessionNotFound as e:
        raise HTTPException(404, str(e))


@router.put("/session/{session_id}", response_model=schemas.SessionOut)
def update_session(session_id: str, payload: schemas.SessionUpdate, db: Session = Depends(get_db)):
    try:
        return game_service.update_session(db, session_id, payload)
    except game_service.SessionNotFound as e:
        raise HTTPException(404, str(e))


@router.get("/session/{session_id}/next-question", response_model=schemas.NextQuestionOut)
def get_next_question(session_id: str, db: Session = Depends(get_db)):
    try:
        return game_service.get_next_question(db, session_id)
    except game_service.SessionNotFound as e:
        raise HTTPException(404, str(e))


@router.post("/session/{session_id}/end", response_model=schemas.SessionOut)
def end_session(session_id: str, db: Session = Depends(get_db)):
    try:
        return game_service.end_session(db, session_id)
    except game_service.SessionNotFound as e:
        raise HTTPException(404, str(e))
