"""
Translation of service-layer errors into HTTP responses
"""

from fastapi import HTTPException, status
import structlog

from menuhost.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalFailureError,
    MenuHostError,
    NotFoundError,
    ValidationFailedError,
)

logger = structlog.get_logger(__name__)

STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    ValidationFailedError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InternalFailureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: MenuHostError) -> HTTPException:
    status_code = STATUS_CODES.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Internal failure", error=error.message, rolled_back=error.rolled_back)
        detail = {"message": "Internal server error"}
    else:
        detail = {"message": error.message}
        if error.field:
            detail["field"] = error.field

    if error.rolled_back:
        detail["rolled_back"] = True

    return HTTPException(status_code=status_code, detail=detail)
