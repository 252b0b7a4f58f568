"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import DomainError, InternalError

logger = logging.getLogger(__name__)


def _error_body(message, code: str) -> dict:
    return {"detail": message, "code": code}


def _django_validation_messages(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return exc.messages


def api_exception_handler(exc, context):  # type: ignore
    """Render ``DomainError`` subclasses, fall back to DRF for the rest.

    Unexpected exceptions are logged with the full traceback and reported to
    the caller as a generic 500.
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc.__class__.__name__}: {exc.message}", exc_info=exc)
        else:
            logger.info(f"{view_name}: {exc.__class__.__name__}: {exc.message}")
        return Response(_error_body(exc.message, exc.code), status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response(
            _error_body(_django_validation_messages(exc), "validation_error"),
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        return response

    logger.error(f"Unhandled error in {view_name}: {exc}", exc_info=exc)
    return Response(
        _error_body(InternalError.default_message, InternalError.default_code),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
