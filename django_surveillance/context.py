"""
Per-request identifiers kept in context variables.

The request ID comes from X-Request-ID or is generated; the event ID is the
one Sentry returned for the last error captured while serving the request.
Both are isolated per thread and per asyncio task.
"""
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str | None] = ContextVar("django_surveillance_request_id", default=None)
_event_id: ContextVar[str | None] = ContextVar("django_surveillance_event_id", default=None)


def get_request_id() -> str | None:
    """Get the ID of the request being served, if any."""
    return _request_id.get()


def set_request_id(value: str | None) -> None:
    """
    Bind the request ID to the current context.

    Args:
        value: The incoming X-Request-ID or a generated one.
    """
    _request_id.set(value)


def new_request_id() -> str:
    return str(uuid.uuid4())


def get_event_id() -> str | None:
    """Get the ID of the last event captured in this context."""
    return _event_id.get()


def set_event_id(value: str | None) -> None:
    """
    Remember the ID of the event just captured, or clear it with None.

    Args:
        value: The Sentry event ID.
    """
    _event_id.set(value)
