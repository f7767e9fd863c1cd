"""
API exception handlers.

Maps domain exceptions to HTTP responses of the form
{"error": {"code": ..., "message": ...}}.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    BillingConfigurationError,
    BillingProviderError,
    DomainException,
    LicenseNotFoundError,
    WebhookSignatureError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = (
    (LicenseNotFoundError, status.HTTP_404_NOT_FOUND),
    (WebhookSignatureError, status.HTTP_400_BAD_REQUEST),
    (BillingProviderError, status.HTTP_502_BAD_GATEWAY),
    (BillingConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def error_response(code: str, message: str, status_code: int) -> Response:
    """Build the standard error body."""
    return Response({"error": {"code": code, "message": message}}, status=status_code)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, context, trace_id)
    elif isinstance(exc, ValidationError):
        response = exception_handler(exc, context)
        response.data = {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request",
                "details": response.data,
            }
        }
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        detail = getattr(exc, "detail", exc.default_detail)
        response.data = {
            "error": {
                "code": str(exc.default_code).upper().replace("-", "_"),
                "message": str(detail),
            }
        }
    elif isinstance(exc, Http404):
        response = error_response("NOT_FOUND", "Resource not found", status.HTTP_404_NOT_FOUND)
    else:
        response = _handle_unexpected_exception(exc, context, trace_id)

    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _endpoint(context: Dict[str, Any]) -> str:
    view = context.get("view")
    return view.__class__.__name__ if view else "unknown"


def _handle_domain_exception(
    exc: DomainException, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    status_code = status.HTTP_400_BAD_REQUEST
    for exc_type, mapped_status in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_type):
            status_code = mapped_status
            break

    errors_total.labels(error_type=exc.code, endpoint=_endpoint(context)).inc()
    if status_code >= 500:
        logger.error("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    else:
        logger.warning("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return error_response(exc.code, exc.message, status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    errors_total.labels(error_type=type(exc).__name__, endpoint=_endpoint(context)).inc()
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return error_response(
        "INTERNAL_ERROR", "An internal error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
