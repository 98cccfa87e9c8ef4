# duell/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from duell.core import models, schemas
from duell.core.auth import get_current_admin
from duell.core.database import get_db
from duell.core.responses import error, ErrorCodes, retry_after_headers
from duell.core.utils import get_client_ip
from duell.services import auth_service

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
)


@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.LoginRequest, request: Request, db: Session = Depends(get_db)):
    try:
        return auth_service.login(db, payload.username, payload.password, get_client_ip(request))
    except auth_service.LoginRejected as e:
        if e.locked:
            raise HTTPException(
                status.HTTP_429_TOO_MANY_REQUESTS,
                error(ErrorCodes.RATE_LIMITED, e.message, retry_after=e.retry_after),
                headers=retry_after_headers(e.retry_after),
            )
        headers = {"WWW-Authenticate": "Bearer", **(retry_after_headers(e.retry_after) or {})}
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            error(ErrorCodes.INVALID_CREDENTIALS, e.message, retry_after=e.retry_after),
            headers=headers,
        )


@router.get("/me", response_model=schemas.AdminOut)
async def read_current_admin(current_admin: models.AdminUser = Depends(get_current_admin)):
    return current_admin
