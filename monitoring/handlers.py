import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    DRF's default handler, plus a 503 for storage failures.

    Database errors are never retried. Anything else DRF does not know
    about is left to Django and ends up as a 500.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DatabaseError):
        logger.exception(
            "Storage failure while handling %s", context["request"].path,
        )
        return Response(
            {"error": "Storage unavailable."},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return None
