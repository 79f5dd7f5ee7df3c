# accounting/api/errors.py

"""
Maps engine errors onto HTTP responses.

Payload shape is always {"detail": <message>, "code": <kind>} so clients can
branch on `code` without parsing messages.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    ConcurrencyConflictError,
    NotFoundError,
)


def error_response(exc: Exception) -> Response:
    if isinstance(exc, NotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConcurrencyConflictError):
        http_status = status.HTTP_409_CONFLICT
    else:
        http_status = status.HTTP_400_BAD_REQUEST

    payload = {
        "detail": str(exc),
        "code": getattr(exc, "code", None) or "validation_error",
    }
    if isinstance(exc, DjangoValidationError):
        payload["detail"] = "; ".join(exc.messages)
    if getattr(exc, "missing_codes", None):
        payload["missing_codes"] = exc.missing_codes

    return Response(payload, status=http_status)


ENGINE_ERRORS = (AccountingServiceError, DjangoValidationError)
