"""Map service-layer failures to DRF responses."""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from services.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    RideShareError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def status_for(exc: RideShareError) -> int:
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def service_exception_handler(exc, context):
    """DRF EXCEPTION_HANDLER: typed service errors first, DRF defaults otherwise."""
    if isinstance(exc, RideShareError):
        view = context.get("view")
        logger.info(
            "%s in %s: %s",
            exc.__class__.__name__,
            view.__class__.__name__ if view else "unknown view",
            exc.message,
        )
        body = {
            "error": exc.code,
            "message": exc.message,
            "retryable": exc.retryable,
        }
        body.update(exc.extra)
        return Response(body, status=status_for(exc))

    return exception_handler(exc, context)
