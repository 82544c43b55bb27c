# This project was developed with assistance from AI tools.
"""Liveness and database health."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..db.database import get_db
from ..schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[HealthResponse])
async def health(session: AsyncSession = Depends(get_db)) -> list[HealthResponse]:
    """Report API liveness and whether the rate snapshot database answers."""
    api = HealthResponse(name="API", status="healthy", message="API is running", version=__version__)
    try:
        await session.execute(text("SELECT 1"))
        db = HealthResponse(name="Database", status="healthy", message="PostgreSQL reachable")
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        db = HealthResponse(
            name="Database",
            status="degraded",
            message="PostgreSQL unreachable; rate snapshot step will be skipped",
        )
    return [api, db]
