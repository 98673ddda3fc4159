"""
Django REST Framework exception handler integration.
"""
import logging

from rest_framework.views import exception_handler as drf_exception_handler

from django_surveillance.errors import Abort
from django_surveillance.reporter import get_reporter
from django_surveillance.services import error_response

logger = logging.getLogger(__name__)


def reporting_exception_handler(exc, context):
    """
    DRF exception handler that reports unhandled exceptions to Sentry.

    This handler:
    - Calls DRF's default handler first and returns its response as-is
    - Answers ``Abort`` with a JSON error (it was reported when raised)
    - Captures any other unhandled exception and answers with a JSON error

    Settings:
        REST_FRAMEWORK = {
            "EXCEPTION_HANDLER": "django_surveillance.drf.exception_handler.reporting_exception_handler",
        }

    Args:
        exc: The exception that occurred.
        context: The view context dictionary from DRF.

    Returns:
        Response | None: The response to return to the client.
    """
    response = drf_exception_handler(exc, context)
    if response is not None:
        return response

    if not isinstance(exc, Abort):
        get_reporter().capture(exc)

    view = context.get("view")
    logger.debug("Unhandled exception in %s converted to an error response", type(view).__name__)
    return error_response()
