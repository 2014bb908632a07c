"""Mapping of domain and framework errors to HTTP responses.

Every error response has the shape ``{"error": {"code": ..., "message": ...}}``.
Internal details never reach the client.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ticketing.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

HTTP_STATUS = {
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_TYPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RECIPIENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.AUTHENTICATION_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.EVENT_HAS_TICKETS: status.HTTP_409_CONFLICT,
    ErrorCode.SOLD_OUT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_USED: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

FRAMEWORK_CODES = {
    exceptions.NotAuthenticated: ErrorCode.AUTHENTICATION_REQUIRED,
    exceptions.AuthenticationFailed: ErrorCode.AUTHENTICATION_REQUIRED,
    exceptions.PermissionDenied: ErrorCode.FORBIDDEN,
    exceptions.ValidationError: ErrorCode.INVALID_REQUEST,
    exceptions.ParseError: ErrorCode.INVALID_REQUEST,
}


def error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


def domain_exception_handler(exc, context):
    """DRF exception handler that understands DomainError."""
    if isinstance(exc, DomainError):
        http_status = HTTP_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if http_status >= 500:
            logger.warning("Request failed with %s", exc.code.value)
        else:
            logger.info("Request rejected: %s", exc)
        return Response(error_body(exc.code.value, exc.message), status=http_status)

    response = exception_handler(exc, context)
    if response is None:
        return None

    code = FRAMEWORK_CODES.get(type(exc))
    if isinstance(exc, exceptions.ValidationError):
        response.data = error_body(
            ErrorCode.INVALID_REQUEST.value, "Invalid input", fields=response.data
        )
    elif isinstance(exc, exceptions.APIException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.default_detail)
        response.data = error_body(
            code.value if code else str(exc.default_code).upper(), str(detail)
        )
    return response
