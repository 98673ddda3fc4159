"""
Error responses returned once an aborted request has been recovered.
"""
from typing import Any

from django.http import JsonResponse

from django_surveillance.conf import get_conf
from django_surveillance.context import get_event_id, get_request_id


def error_response(
    message: str | None = None,
    event_id: str | None = None,
    status: int = 500,
) -> JsonResponse:
    """
    Build a JSON error response.

    Args:
        message: The error message to display (defaults to GENERIC_ERROR_MESSAGE).
        event_id: The Sentry event ID to include (defaults to the last one
            captured in this context).
        status: The HTTP status code.

    Returns:
        JsonResponse: A JSON error response.
    """
    config = get_conf()

    if event_id is None:
        event_id = get_event_id()

    body: dict[str, Any] = {"detail": message or config.GENERIC_ERROR_MESSAGE}

    if config.INCLUDE_EVENT_ID_IN_BODY and event_id:
        body["event_id"] = str(event_id)

    request_id = get_request_id()
    if config.INCLUDE_REQUEST_ID_IN_BODY and request_id:
        body["request_id"] = str(request_id)

    return JsonResponse(body, status=status)
