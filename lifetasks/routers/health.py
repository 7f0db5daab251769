"""Health check router."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.config import settings
from lifetasks.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Lightweight health endpoint with a DB ping."""

    db_ok = False
    try:
        await db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as exc:
        logger.warning("Health check DB ping failed: %s", exc)
        await db.rollback()

    return {
        "api_ok": True,
        "db_ok": db_ok,
        "environment": settings.ENVIRONMENT,
        "ai_enabled": settings.ai_available,
    }
