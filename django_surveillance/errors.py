"""
Error values understood by the reporter.

Any exception may carry ``extras`` (structured annotations), ``tags``
(string to string) and a preformatted ``stacktrace``. ``ReportableError``
is a ready-made exception carrying all three.
"""
import traceback
from collections.abc import Mapping
from typing import Any


class ReportableError(Exception):
    """
    Exception annotated with extras and tags for error reporting.

    Usage:
        from django_surveillance.errors import ReportableError

        try:
            charge(order)
        except GatewayTimeout as e:
            raise ReportableError(
                "Payment gateway timed out",
                extras={"order_id": order.pk},
                tags={"gateway": "stripe"},
            ) from e
    """

    def __init__(
        self,
        message: str,
        *,
        extras: Mapping[str, Any] | None = None,
        tags: Mapping[str, str] | None = None,
    ):
        super().__init__(message)
        self.extras: dict[str, Any] = dict(extras or {})
        self.tags: dict[str, str] = dict(tags or {})

    def with_extra(self, key: str, value: Any) -> "ReportableError":
        self.extras[key] = value
        return self

    def with_tag(self, key: str, value: str) -> "ReportableError":
        self.tags[key] = value
        return self


class Abort(Exception):
    """
    Raised by ``ErrorReporter.capture(err, abort=True)`` once ``err`` has
    been logged and reported.

    It unwinds the current request only; ``AbortRecoveryMiddleware`` and the
    DRF exception handler turn it into an error response.
    """

    def __init__(self, error: BaseException):
        super().__init__(str(error))
        self.error = error


def _chain(err: BaseException):
    """Yield ``err`` followed by its explicit causes, outermost first."""
    seen = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def extras_of(err: BaseException) -> dict[str, Any] | None:
    """
    Collect the extras set on ``err`` and its causes.

    Returns:
        dict | None: The merged extras (outermost error wins), or None
        when no error in the chain carries any.
    """
    merged: dict[str, Any] = {}
    for item in reversed(list(_chain(err))):
        extras = getattr(item, "extras", None)
        if isinstance(extras, Mapping):
            merged.update(extras)
    return merged or None


def tags_of(err: BaseException) -> dict[str, str]:
    """Collect the tags set on ``err`` and its causes as strings."""
    merged: dict[str, str] = {}
    for item in reversed(list(_chain(err))):
        tags = getattr(item, "tags", None)
        if isinstance(tags, Mapping):
            merged.update({str(k): str(v) for k, v in tags.items()})
    return merged


def stacktrace_of(err: BaseException) -> str:
    """
    Get the stack trace of ``err``.

    A ``stacktrace`` string attribute takes precedence over the traceback.
    """
    stacktrace = getattr(err, "stacktrace", None)
    if isinstance(stacktrace, str):
        return stacktrace
    return "".join(traceback.format_exception(type(err), err, err.__traceback__))
