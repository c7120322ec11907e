"""
Academy Error Taxonomy

This module defines the error classes raised by the session lifecycle and its
collaborators, plus the DRF exception handler that renders them. Every error
carries a machine-stable ``error_code`` and a human-readable message, so the
frontend can branch on the code and show the message.

Hierarchy:
- AcademyError (base, DRF APIException)
  - NotFoundError          404  not_found
  - ForbiddenError         403  forbidden
  - ConflictError          409  conflict
  - InvalidStateError      409  invalid_state
  - DeadlineExceededError  409  deadline_exceeded
  - ValidationError        400  validation_error
  - ServiceUnavailableError 503 service_unavailable (retryable)

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Optional

from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AcademyError(APIException):
    """
    Base class for all domain errors of the academy app.

    Subclasses only override ``status_code``, ``default_code`` and
    ``default_detail``. Raising them anywhere below a DRF view produces a
    structured response through ``api_exception_handler``.

    Attributes:
        message (str): Human-readable error message
        error_code (str): Machine-stable error kind
        details (Dict[str, Any]): Additional error context
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "error"
    default_detail = "Request could not be processed."
    retryable = False

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or str(self.default_detail)
        self.error_code = self.default_code
        self.details = details or {}
        super().__init__(detail=self.message, code=self.default_code)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to the response body shape.

        Returns:
            Dictionary with error kind, message and optional details
        """
        body: Dict[str, Any] = {"error": self.error_code, "detail": self.message}
        if self.details:
            body["details"] = self.details
        if self.retryable:
            body["retryable"] = True
        return body


class NotFoundError(AcademyError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_detail = "Resource not found."


class ForbiddenError(AcademyError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "forbidden"
    default_detail = "Your role(s) does not have the permission to perform this action."


class ConflictError(AcademyError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_detail = "An ongoing session for this quiz already exists."


class InvalidStateError(AcademyError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "invalid_state"
    default_detail = "The session is already finished."


class DeadlineExceededError(AcademyError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "deadline_exceeded"
    default_detail = "The session deadline has passed."


class ValidationError(AcademyError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "validation_error"
    default_detail = "Malformed request payload."


class ServiceUnavailableError(AcademyError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "service_unavailable"
    default_detail = "Storage is temporarily unavailable, please retry."
    retryable = True


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """
    DRF exception handler producing ``{"error": ..., "detail": ...}`` bodies.

    Domain errors are rendered from ``to_dict``. Database connectivity errors
    are turned into a retryable 503 instead of a 500. Everything else is
    delegated to DRF's default handler and reshaped when it produced a
    response.

    Args:
        exc: The raised exception
        context: DRF handler context (view, request, ...)

    Returns:
        Response or None if the exception is not handled
    """
    if isinstance(exc, (OperationalError, InterfaceError)):
        view = context.get("view")
        logger.error(f"Database unavailable in {view.__class__.__name__ if view else 'unknown view'}: {exc}")
        exc = ServiceUnavailableError()

    if isinstance(exc, AcademyError):
        response = Response(exc.to_dict(), status=exc.status_code)
        if exc.retryable:
            response["Retry-After"] = "5"
        return response

    response = exception_handler(exc, context)
    if response is None:
        return None

    codes = exc.get_codes() if isinstance(exc, APIException) else None
    error_code = codes if isinstance(codes, str) else "validation_error" if response.status_code == 400 else "error"
    data = response.data
    if isinstance(data, dict) and set(data.keys()) == {"detail"}:
        response.data = {"error": error_code, "detail": data["detail"]}
    else:
        response.data = {"error": error_code, "detail": data}
    return response
