import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from localegen.api.deps import get_session_factory
from localegen.core.database import check_database

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/healthz")
async def healthcheck() -> dict[str, str]:
    """Lightweight health endpoint for liveness probes."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/database")
async def database_healthcheck(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> dict[str, str]:
    """Run ``SELECT 1`` against the translation memory database."""
    try:
        await check_database(session_factory)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database health check failed", exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {exc}",
        ) from exc
    return {"status": "ok", "database": "healthy"}
