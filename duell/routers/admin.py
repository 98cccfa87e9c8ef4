# duell/routers/admin.py

import json
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from duell.core import crud, schemas
from duell.core.auth import get_current_admin
from duell.core.database import get_db
from duell.core.models import Category, QuestionStatus
from duell.services import admin_service

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/dashboard", response_model=schemas.DashboardStats)
def get_dashboard(db: Session = Depends(get_db)):
    return admin_service.get_dashboard_stats(db)


@router.get("/questions/pending", response_model=list[schemas.QuestionOut])
def get_pending_questions(db: Session = Depends(get_db)):
    return crud.list_questions(db, status=QuestionStatus.PENDING)


@router.get("/questions", response_model=list[schemas.QuestionOut])
def get_all_questions(status: Optional[QuestionStatus] = Query(default=None),
                      category: Optional[Category] = Query(default=None),
                      search: Optional[str] = Query(default=None),
                      db: Session = Depends(get_db)):
    return crud.list_questions(db, status=status, category=category, search=search)


@router.get("/questions/{question_id}", response_model=schemas.QuestionOut)
def get_question(question_id: str, db: Session = Depends(get_db)):
    try:
        return admin_service.get_question(db, question_id)
    except admin_service.QuestionNotFound as e:
        raise HTTPException(404, str(e))


@router.post("/questions/{question_id}/approve", response_model=schemas.QuestionOut)
def approve_question(question_id: str, db: Session = Depends(get_db)):
    try:
        return admin_service.approve_question(db, question_id)
    except admin_service.QuestionNotFound as e:
        raise HTTPException(404, str(e))


@router.post("/questions/{question_id}/reject", response_model=schemas.QuestionOut)
def reject_question(question_id: str, payload: Optional[schemas.RejectQuestion] = None,
                    db: Session = Depends(get_db)):
    reason = payload.reason if payload else None
    try:
        return admin_service.reject_question(db, question_id, reason)
    except admin_service.QuestionNotFound as e:
        raise HTTPException(404, str(e))


@router.put("/questions/{question_id}", response_model=schemas.QuestionOut)
def update_question(question_id: str, payload: schemas.QuestionUpdate, db: Session = Depends(get_db)):
    try:
        return admin_service.update_question(db, question_id, payload)
    except admin_service.QuestionNotFound as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.delete("/questions/{question_id}", response_model=schemas.ActionResult)
def delete_question(question_id: str, db: Session = Depends(get_db)):
    try:
        return admin_service.delete_question(db, question_id)
    except admin_service.QuestionNotFound as e:
        raise HTTPException(404, str(e))


@router.get("/export")
def export_questions(db: Session = Depends(get_db)):
    data = admin_service.export_questions(db)
    filename = f"questions-export-{date.today().isoformat()}.json"
    return Response(
        content=json.dumps(data, ensure_ascii=False, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=schemas.ImportResult)
def import_questions(payload: schemas.QuestionExport,
                     skip_duplicates: bool = Query(default=True),
                     db: Session = Depends(get_db)):
    return admin_service.import_questions(db, payload, skip_duplicates=skip_duplicates)
