# core/exceptions.py
import logging
import uuid

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.utils import timezone

logger = logging.getLogger(__name__)


def _error_body(code, message, details, error_id):
    return {
        "error": True,
        "code": code,
        "message": message,
        "details": details,
        "error_id": error_id,
        "timestamp": timezone.now().isoformat(),
    }


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent error format
    """
    error_id = str(uuid.uuid4())[:8]

    request = context.get("request")
    user = getattr(request, "user", None)
    path = getattr(request, "path", "unknown")
    method = getattr(request, "method", "unknown")

    # Business errors raised by the billing services
    if isinstance(exc, APIError):
        logger.warning(
            f"Business error [{error_id}]: {exc.code} - {method} {path}",
            extra={
                "error_id": error_id,
                "code": exc.code,
                "status_code": exc.status_code,
                "action": "api_business_error",
            },
        )
        return Response(
            _error_body(exc.code, exc.message, exc.details, error_id),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)

    if response is not None:
        logger.error(
            f"API Error [{error_id}]: {exc.__class__.__name__} - "
            f"{method} {path} - User: {user} - Status: {response.status_code}"
        )
        response.data = _error_body(
            get_error_code(exc),
            get_error_message(response.data),
            format_error_details(response.data),
            error_id,
        )
        return response

    if isinstance(exc, Http404):
        response = Response(
            _error_body(
                "RESOURCE_NOT_FOUND",
                "The requested resource was not found.",
                None,
                error_id,
            ),
            status=status.HTTP_404_NOT_FOUND,
        )
    elif isinstance(exc, DjangoValidationError):
        response = Response(
            _error_body(
                "VALIDATION_ERROR",
                "Validation failed.",
                exc.message_dict if hasattr(exc, "message_dict") else str(exc),
                error_id,
            ),
            status=status.HTTP_400_BAD_REQUEST,
        )
    else:
        response = Response(
            _error_body(
                "INTERNAL_SERVER_ERROR",
                "An internal server error occurred.",
                None,
                error_id,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.error(
        f"Unhandled Exception [{error_id}]: {exc.__class__.__name__} - "
        f"{method} {path} - User: {user}",
        exc_info=True,
    )
    return response


def get_error_code(exc):
    """
    Generate appropriate error code based on exception type
    """
    error_codes = {
        "ValidationError": "VALIDATION_ERROR",
        "PermissionDenied": "PERMISSION_DENIED",
        "NotAuthenticated": "AUTHENTICATION_REQUIRED",
        "AuthenticationFailed": "AUTHENTICATION_FAILED",
        "NotFound": "RESOURCE_NOT_FOUND",
        "MethodNotAllowed": "METHOD_NOT_ALLOWED",
        "ParseError": "PARSE_ERROR",
        "UnsupportedMediaType": "UNSUPPORTED_MEDIA_TYPE",
    }
    return error_codes.get(exc.__class__.__name__, "UNKNOWN_ERROR")


def get_error_message(data):
    """
    Extract human-readable error message from DRF error data
    """
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        if data.get("non_field_errors"):
            return str(data["non_field_errors"][0])
        for key, value in data.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
            if isinstance(value, str):
                return value
        return "Validation error"
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def format_error_details(data):
    """
    Format error details for consistent structure
    """
    if isinstance(data, dict):
        details = {k: v for k, v in data.items() if k != "detail"}
        return details or None
    if isinstance(data, list):
        return data
    return None


class APIError(Exception):
    """
    Custom API exception class for business logic errors
    """

    def __init__(
        self, message, code=None, status_code=status.HTTP_400_BAD_REQUEST, details=None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "API_ERROR"
        self.status_code = status_code
        self.details = details

    def as_dict(self):
        """Compact representation used for per-group error reports"""
        out = {"code": self.code, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(APIError):
    """
    Request rejected before any persistence (missing ids, empty groups, missing pay shares)
    """

    def __init__(self, message, code=None, details=None):
        super().__init__(
            message=message,
            code=code or "VALIDATION_ERROR",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class NotFoundError(APIError):
    """
    Unknown operation, group, bill or worker schedule row
    """

    def __init__(self, message, code=None, details=None):
        super().__init__(
            message=message,
            code=code or "RESOURCE_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class ConflictError(APIError):
    """
    State conflict: completed bill mutation, duplicate bill, mismatched group
    """

    def __init__(self, message, code=None, details=None):
        super().__init__(
            message=message,
            code=code or "CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )
