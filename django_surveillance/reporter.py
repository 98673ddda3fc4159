"""
Error reporter forwarding exceptions to Sentry and logging them locally.

The reporter runs in one of two modes fixed at construction:

- ``Enabled``: ``sentry_sdk`` was initialised with a DSN; exceptions are
  reported remotely and logged with their event ID.
- ``Disabled``: no DSN was configured or ``sentry_sdk`` rejected it;
  exceptions are only logged and the HTTP wrappers are no-ops.
"""
import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

import sentry_sdk
from sentry_sdk.utils import BadDsn

from django_surveillance.conf import Config, get_conf
from django_surveillance.context import get_request_id, set_event_id
from django_surveillance.errors import Abort, extras_of, stacktrace_of, tags_of

logger = logging.getLogger(__name__)


class SentryClient:
    """Handle on the client set up by ``sentry_sdk.init``."""

    def capture(self, error: BaseException, extras: dict[str, Any], tags: dict[str, str]) -> str | None:
        """
        Submit ``error`` with its own scope.

        The scope is forked per call so extras and tags of concurrent
        captures never leak into each other. Delivery happens on the SDK's
        background transport.

        Returns:
            str | None: The Sentry event ID.
        """
        with sentry_sdk.new_scope() as scope:
            for key, value in extras.items():
                scope.set_extra(key, value)
            for key, value in tags.items():
                scope.set_tag(key, value)
            return sentry_sdk.capture_exception(error)

    def flush(self, timeout: float | None = None) -> None:
        sentry_sdk.flush(timeout=timeout)


def drop_aborts(event, hint):
    """
    ``before_send`` hook discarding ``Abort``.

    The wrapped error was reported by ``ErrorReporter.capture`` before the
    abort was raised, so integrations catching it again (e.g. Django's
    ``got_request_exception``) must not send a second event.
    """
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], Abort):
        return None
    return event


def _payload(error: BaseException) -> tuple[dict[str, Any], dict[str, str]]:
    """Build the extras (always carrying the stack trace) and tags sent for ``error``."""
    extras = dict(extras_of(error) or {})
    extras["stacktrace"] = stacktrace_of(error)
    return extras, tags_of(error)


class Instrumentation:
    """
    Reports exceptions escaping HTTP handlers.

    With ``repanic`` the exception is re-raised after reporting so Django
    (or an outer middleware) keeps handling it; without it a JSON error
    response is returned instead.
    """

    def __init__(self, client: SentryClient, repanic: bool = True):
        self.client = client
        self.repanic = repanic

    def report(self, error: BaseException, request: Any = None) -> str | None:
        """
        Report an exception raised while serving ``request``.

        ``Abort`` is not reported again: ``ErrorReporter.capture`` already
        did so before raising it.
        """
        if isinstance(error, Abort):
            return None

        extras, tags = _payload(error)
        if request is not None:
            extras["request"] = {
                "method": getattr(request, "method", None),
                "path": getattr(request, "path", None),
            }
        request_id = get_request_id()
        if request_id:
            tags.setdefault("request_id", request_id)

        event_id = self.client.capture(error, extras, tags)
        if event_id:
            set_event_id(event_id)
        logger.debug("Unhandled exception captured in sentry with the event ID `%s`", event_id)
        return event_id

    def _recover(self, error: BaseException, event_id: str | None):
        if self.repanic or isinstance(error, Abort):
            raise error
        from django_surveillance.services import error_response

        return error_response(event_id=event_id)

    def handle_func(self, view: Callable) -> Callable:
        """Wrap a Django function view (sync or async)."""
        if inspect.iscoroutinefunction(view):

            @functools.wraps(view)
            async def async_wrapped(request, *args, **kwargs):
                try:
                    return await view(request, *args, **kwargs)
                except Exception as exc:
                    return self._recover(exc, self.report(exc, request))

            return async_wrapped

        @functools.wraps(view)
        def wrapped(request, *args, **kwargs):
            try:
                return view(request, *args, **kwargs)
            except Exception as exc:
                return self._recover(exc, self.report(exc, request))

        return wrapped

    def handle_routed(self, view_class: type) -> type:
        """
        Subclass a DRF ``APIView`` so exceptions DRF leaves unhandled are
        reported before they propagate.
        """
        from rest_framework.views import APIView

        if not (isinstance(view_class, type) and issubclass(view_class, APIView)):
            raise TypeError(f"{view_class!r} is not a rest_framework APIView subclass")

        instrumentation = self

        class Instrumented(view_class):
            def handle_exception(self, exc):
                try:
                    return super().handle_exception(exc)
                except Exception as uncaught:
                    event_id = instrumentation.report(uncaught, self.request)
                    return instrumentation._recover(uncaught, event_id)

        Instrumented.__name__ = view_class.__name__
        Instrumented.__qualname__ = view_class.__qualname__
        Instrumented.__module__ = view_class.__module__
        Instrumented.__doc__ = view_class.__doc__
        return Instrumented


@dataclass(frozen=True)
class Enabled:
    client: SentryClient
    instrumentation: Instrumentation


@dataclass(frozen=True)
class Disabled:
    pass


Mode = Enabled | Disabled


class ErrorReporter:
    """
    Captures exceptions on Sentry and logs them locally.

    Build one per process with ``ErrorReporter.from_config()`` (the app
    config does so in ``ready()``) and hand it to whoever needs it, see
    ``get_reporter()``.
    """

    def __init__(self, mode: Mode, suppress_key: str = "custom_service"):
        self.mode = mode
        self.suppress_key = suppress_key

    @classmethod
    def from_config(cls, config: Config | None = None) -> "ErrorReporter":
        """
        Initialise sentry_sdk from configuration.

        A missing DSN, or one sentry_sdk rejects, yields a disabled reporter
        and a warning; it never fails.
        """
        config = config or get_conf()

        if not config.SENTRY_DSN:
            logger.warning("Could not initialize sentry: SENTRY_DSN is not set")
            return cls(Disabled(), suppress_key=config.SUPPRESS_EXTRA_KEY)

        try:
            sentry_sdk.init(
                dsn=config.SENTRY_DSN,
                environment=config.ENVIRONMENT or None,
                release=config.RELEASE or None,
                debug=config.DEBUG,
                before_send=drop_aborts,
            )
        except BadDsn as e:
            logger.warning("Could not initialize sentry with the configured DSN: %s", e)
            return cls(Disabled(), suppress_key=config.SUPPRESS_EXTRA_KEY)

        client = SentryClient()
        return cls(
            Enabled(client=client, instrumentation=Instrumentation(client, repanic=config.REPANIC)),
            suppress_key=config.SUPPRESS_EXTRA_KEY,
        )

    @property
    def is_enabled(self) -> bool:
        return isinstance(self.mode, Enabled)

    def capture(self, err: BaseException | None, abort: bool = False) -> None:
        """
        Report an error on Sentry and log it.

        Errors whose extras carry the suppression key set to True are kept
        away from Sentry and not logged.

        Args:
            err: The error to handle. None is a no-op.
            abort: Raise ``Abort`` once the error has been handled.

        Raises:
            Abort: When ``abort`` is true, chained from ``err``.
        """
        if err is None:
            return

        if isinstance(self.mode, Enabled):
            extras = extras_of(err)
            if not (extras and extras.get(self.suppress_key) is True):
                extras, tags = _payload(err)
                event_id = self.mode.client.capture(err, extras, tags)
                if event_id:
                    # A dropped event keeps the ID of the one already captured
                    set_event_id(event_id)
                    logger.error("Error captured in sentry with the event ID `%s`", event_id, exc_info=err)
                else:
                    logger.error("Error dropped by sentry: %s", err, exc_info=err)
        else:
            logger.error("%s", err, exc_info=err)

        if abort:
            raise Abort(err) from err

    def handle_func(self, view: Callable) -> Callable:
        """
        Instrument a Django function view.

        Returns the view itself when the reporter is disabled.
        """
        if isinstance(self.mode, Enabled):
            return self.mode.instrumentation.handle_func(view)
        return view

    def handle_routed(self, view_class: type) -> type:
        """
        Instrument a DRF view class.

        Returns the class itself when the reporter is disabled.
        """
        if isinstance(self.mode, Enabled):
            return self.mode.instrumentation.handle_routed(view_class)
        return view_class

    def middleware(self, get_response: Callable) -> Callable:
        """Wrap the next handler of a middleware chain."""

        def call_next(request):
            return get_response(request)

        return self.handle_func(call_next)

    def flush(self, timeout: float | None = None) -> None:
        """Block until queued events are sent (no-op when disabled)."""
        if isinstance(self.mode, Enabled):
            self.mode.client.flush(timeout=timeout)


def get_reporter() -> ErrorReporter:
    """Get the reporter built by the django_surveillance app config."""
    from django.apps import apps

    return apps.get_app_config("django_surveillance").reporter
