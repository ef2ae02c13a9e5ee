import logging
from fastapi import HTTPException, status

from backend.app.core.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    SchedulingError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE = "Could not reach the schedule store. Please try again."

def to_http_error(error: SchedulingError) -> HTTPException:
    """Translate a domain error into the one response the caller sees."""
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{error}. Reload the latest version before saving.",
        )
    if isinstance(error, PersistenceError):
        # The cause is already logged by the repository; callers get one generic notice
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE)
    logger.error("Unhandled scheduling error: %s", error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
