from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from db.database import get_db
from db import crud

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/health",
    tags=["health"]
)

DATABASE_UNAVAILABLE = {"status": "database_error", "detail": "Cannot connect to database."}

@router.get(
    "/live",
    summary="Liveness Probe",
    description="Returns 200 while the process is up. Touches no dependencies.",
    status_code=status.HTTP_200_OK,
)
async def liveness_check():
    return {"status": "alive"}

@router.get(
    "/ready",
    summary="Readiness Probe",
    description="Returns 200 once the photo cache database answers queries, 503 otherwise.",
    status_code=status.HTTP_200_OK,
    responses={
        status.HTTP_503_SERVICE_UNAVAILABLE: {
            "content": {"application/json": {"example": {"detail": DATABASE_UNAVAILABLE}}},
            "description": "The database is unreachable."
        }
    }
)
def readiness_check(db: Session = Depends(get_db)):
    try:
        cached_photos = crud.count_photos(db)
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed, database unreachable: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DATABASE_UNAVAILABLE)
    return {"status": "ready", "detail": "Database connection successful.", "cached_photos": cached_photos}
