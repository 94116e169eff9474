"""Health check endpoint for service monitoring."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src import __version__
from src.core.dependencies import get_session_factory

logger = structlog.get_logger(__name__)

health_router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    database: str = "ok"


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns the health status of the service and its ledger database.",
    responses={503: {"model": HealthResponse, "description": "Ledger database unreachable"}},
)
async def health_check(
    response: Response,
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> HealthResponse:
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("health_database_unreachable", error=str(e))
        response.status_code = 503
        return HealthResponse(status="degraded", version=__version__, database="unreachable")

    return HealthResponse(status="healthy", version=__version__)
