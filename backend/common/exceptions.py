"""
REST framework exception handler.

Every error leaves the API as ``{"error": <kind>, "message": <text>}`` so
clients can tell an already-taken offer apart from a system failure.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from services.repair_management.exceptions import LifecycleError

logger = logging.getLogger(__name__)

_DRF_KINDS = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def api_exception_handler(exc, context):
    if isinstance(exc, LifecycleError):
        logger.info("%s in %s: %s", exc.kind, context.get("view").__class__.__name__, exc)
        return Response(
            {"error": exc.kind, "message": str(exc)},
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    kind = _DRF_KINDS.get(response.status_code, "error")
    if isinstance(exc, ValidationError):
        response.data = {
            "error": kind,
            "message": "Invalid input",
            "details": response.data,
        }
    else:
        detail = response.data.get("detail", "") if isinstance(response.data, dict) else response.data
        response.data = {"error": kind, "message": str(detail)}
    return response
