"""System router providing health check and operational endpoints."""

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text

from lockbox.schemas.jsonapi import JSONAPIResource, JSONAPISingleResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=JSONAPISingleResponse)
async def health_check(request: Request) -> JSONAPISingleResponse:
    """Return system health status including database connectivity.

    Returns a JSON:API formatted response with type ``system-health``,
    reporting the overall status as ``healthy`` or ``degraded`` (database
    unreachable).
    """
    db_ok = False
    try:
        session_factory = request.app.state.session_factory
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.warning("Database health check failed", exc_info=True)

    return JSONAPISingleResponse(
        data=JSONAPIResource(
            type="system-health",
            id="current",
            attributes={
                "status": "healthy" if db_ok else "degraded",
                "database": "connected" if db_ok else "disconnected",
            },
        )
    )
