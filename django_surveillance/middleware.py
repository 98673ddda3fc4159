"""
Middleware for request ID tracking, Sentry capture and abort recovery.

Recommended MIDDLEWARE order:
    MIDDLEWARE = [
        # ... security, sessions, etc. ...
        "django_surveillance.middleware.RequestIDMiddleware",
        "django_surveillance.middleware.AbortRecoveryMiddleware",
        "django_surveillance.middleware.SentryCaptureMiddleware",
        # ... everything else ...
    ]

Django calls ``process_exception`` hooks innermost first, so the exception
is reported by SentryCaptureMiddleware before AbortRecoveryMiddleware
answers for it. Without AbortRecoveryMiddleware an aborted request ends in
Django's own 500 page; the Sentry SDK is initialised with a ``before_send``
hook that keeps it from reporting the ``Abort`` a second time.
"""
import logging

from django.utils.deprecation import MiddlewareMixin

from django_surveillance.conf import get_conf
from django_surveillance.context import (
    get_event_id,
    get_request_id,
    new_request_id,
    set_event_id,
    set_request_id,
)
from django_surveillance.errors import Abort
from django_surveillance.reporter import Enabled, get_reporter
from django_surveillance.services import error_response

logger = logging.getLogger(__name__)


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware to track request IDs and add X-Request-ID header to responses.

    Sets a unique request ID per request using context variables, clears the
    event ID left by a previous request and optionally adds the event ID of
    an error captured while serving this one as X-Sentry-Event-ID.
    """

    def process_request(self, request):
        """
        Set request ID from incoming header or generate new one.

        Args:
            request: The Django request object.
        """
        incoming_rid = request.META.get("HTTP_X_REQUEST_ID")
        request_id = incoming_rid or new_request_id()

        set_request_id(request_id)
        set_event_id(None)

        request.surveillance_request_id = request_id

    def process_response(self, request, response):
        """
        Add X-Request-ID and X-Sentry-Event-ID headers to response.

        Args:
            request: The Django request object.
            response: The HTTP response object.

        Returns:
            The response with the headers added.
        """
        config = get_conf()

        if config.ADD_REQUEST_ID_HEADER:
            rid = get_request_id()
            if rid:
                response["X-Request-ID"] = rid

        if config.ADD_EVENT_ID_HEADER:
            event_id = get_event_id()
            if event_id:
                response["X-Sentry-Event-ID"] = event_id

        return response


class SentryCaptureMiddleware(MiddlewareMixin):
    """
    Middleware reporting exceptions raised by views to Sentry.

    Django turns view exceptions into responses before they reach the
    ``__call__`` of an outer middleware, so reporting happens in
    ``process_exception``. It always returns None and leaves the response
    to Django or to the middlewares above. Inert when the reporter is
    disabled.
    """

    def __init__(self, get_response, reporter=None):
        """Initialize middleware with the process reporter unless one is given."""
        super().__init__(get_response)
        self.reporter = reporter or get_reporter()

    def process_exception(self, request, exception):
        """
        Report the exception.

        Args:
            request: The Django request object.
            exception: The exception that was raised.

        Returns:
            None
        """
        mode = self.reporter.mode
        if isinstance(mode, Enabled):
            mode.instrumentation.report(exception, request)
        return None


class AbortRecoveryMiddleware(MiddlewareMixin):
    """
    Recovery boundary for ``Abort``.

    Converts an ``Abort`` raised by ``ErrorReporter.capture(err, abort=True)``
    into a JSON error response so only the current request fails. Other
    exceptions are left to Django.
    """

    def process_exception(self, request, exception):
        """
        Build an error response for aborted requests.

        Args:
            request: The Django request object.
            exception: The exception that was raised.

        Returns:
            JsonResponse | None: The error response, or None for other exceptions.
        """
        if not isinstance(exception, Abort):
            return None

        logger.debug(
            "Recovered aborted request %s %s: %s",
            request.method,
            request.path,
            exception.error,
        )
        return error_response()
