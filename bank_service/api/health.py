"""
Health check endpoint.

Reports whether the service is up and whether the accounts
database answers a trivial query.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bank_service.config import get_settings
from bank_service.logging_config import get_logger
from bank_service.models.base import get_db

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "bank-service"


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return service health and database connectivity.

    A database failure degrades the status instead of failing
    the request, so monitors can tell the two apart.
    """
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError as e:
        logger.error("health_database_unreachable", error=str(e))
        database = "unhealthy"

    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "service": SERVICE_NAME,
        "version": get_settings().APP_VERSION,
        "database": database,
    }
