"""
Health check endpoint.

Answers 200 while the database responds and 503 otherwise, so load
balancers and the process supervisor can tell a live instance from a
broken one.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from people_api.app.core.exceptions import StorageError
from people_api.app.schemas.person import ResponseStatus
from people_api.app.services.person_service import PersonService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=ResponseStatus)
async def health() -> ResponseStatus:
    try:
        await PersonService.ping()
    except StorageError as e:
        logger.error("health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Storage unavailable"
        ) from e
    return ResponseStatus.ok()
