"""Health domain router.

Health check endpoint for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from cocoon.core.constants import Routes
from cocoon.core.deps import DatabaseDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.HEALTH.prefix, tags=[Routes.HEALTH.tag])


@router.get("")
async def health(db: DatabaseDep):
    """Health check endpoint with database connectivity verification."""
    try:
        db.command("ping")
    except PyMongoError:
        logger.warning("Health check: database ping failed", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "error"},
        )
    return {"status": "ok", "database": "ok"}
