"""
Turns domain errors raised by the service layer into HTTP responses.

Services raise the types in ``core.domain.exceptions`` and never build
responses themselves.  This hook is set as DRF's ``EXCEPTION_HANDLER``
in ``civicdesk/settings.py``; it defers to DRF for DRF's own exceptions
and answers the domain ones with ``{"detail": <message>}``.
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidTransition,
    InvalidValue,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

# Checked in order; DomainError must stay last.
DOMAIN_ERROR_STATUSES: tuple[tuple[type[DomainError], int], ...] = (
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (Conflict, status.HTTP_409_CONFLICT),
    (InvalidValue, status.HTTP_400_BAD_REQUEST),
    (DomainError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: DomainError) -> int:
    for exc_class, status_code in DOMAIN_ERROR_STATUSES:
        if isinstance(exc, exc_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    response = drf_default_handler(exc, context)
    if response is not None or not isinstance(exc, DomainError):
        return response

    view = context.get("view")
    logger.warning(
        "%s raised by %s: %s",
        type(exc).__name__,
        type(view).__name__ if view is not None else "unknown view",
        exc,
    )
    return Response({"detail": str(exc)}, status=status_for(exc))
