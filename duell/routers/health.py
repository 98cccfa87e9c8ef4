# duell/routers/health.py

from datetime import datetime, timezone

from fastapi import APIRouter

from duell.core import schemas
from duell.core.constants import SQLALCHEMY_DATABASE_URL
from duell.core.database import ping_database
from duell.core.utils import detect_database_type

router = APIRouter(
    prefix="/api",
    tags=["System"],
)


@router.get("/health", response_model=schemas.HealthStatus)
def health_check():
    db_ok = ping_database()
    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "ok" if db_ok else "error",
        "database_type": detect_database_type(SQLALCHEMY_DATABASE_URL),
    }
