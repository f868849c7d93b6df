"""API exception taxonomy and the project-wide DRF exception handler.

NotFound -> 404, PermissionDenied -> 403, ValidationError -> 400, Conflict -> 409.
Anything else is logged and answered with a 500 carrying the generic message the
view declares for the current action.
"""

import logging
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Internal server error"


class Conflict(APIException):
    """The requested transition clashes with the current state of the resource."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting state."
    default_code = "conflict"


def error_message_for(view: Any) -> str:
    """Return the generic 500 message a view declares for its current action."""
    if view is None:
        return DEFAULT_ERROR_MESSAGE
    messages = getattr(view, "error_messages", None) or {}
    action = getattr(view, "action", None)
    if action in messages:
        return messages[action]
    return getattr(view, "error_message", DEFAULT_ERROR_MESSAGE)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        exc = ValidationError(detail=detail)
    elif isinstance(exc, IntegrityError):
        exc = Conflict(detail="Resource already exists.")

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", type(view).__name__ if view else "unknown view", exc_info=exc)
    return Response({"error": error_message_for(view)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
