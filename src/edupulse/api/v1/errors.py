# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mapping of domain errors to HTTP errors for v1 routes."""

import logging

from fastapi import HTTPException, status

from edupulse.core.exceptions import (
    EduPulseError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: EduPulseError) -> HTTPException:
    """Convert a domain error into an HTTPException.

    ValidationError maps to 400, NotFoundError to 404 and
    PersistenceError to 503. Any other domain error is a 500.

    Args:
        error: Error raised by a domain service.

    Returns:
        HTTPException to raise from the route.
    """
    if isinstance(error, ValidationError):
        detail = {"message": error.message, "field": error.field, **error.details}
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)

    if isinstance(error, PersistenceError):
        logger.error("Storage failure: %s", error)
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage temporarily unavailable",
        )

    logger.error("Unhandled domain error: %s", error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message,
    )
