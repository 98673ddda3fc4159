"""
Test doubles for the Sentry client.
"""
import threading

import sentry_sdk
from sentry_sdk.transport import Transport

from django_surveillance.reporter import Enabled, ErrorReporter, Instrumentation


class FakeSentryClient:
    """
    Records captures instead of sending them.

    With ``drop_repeats`` an error object captured before is dropped and
    None is returned, as sentry_sdk's DedupeIntegration does.
    """

    def __init__(self, drop_repeats=False):
        self.captures = []
        self.flushed = []
        self.drop_repeats = drop_repeats
        self._lock = threading.Lock()

    def capture(self, error, extras, tags):
        with self._lock:
            if self.drop_repeats and any(c["error"] is error for c in self.captures):
                return None
            self.captures.append({"error": error, "extras": dict(extras), "tags": dict(tags)})
            return f"event-{len(self.captures)}"

    def flush(self, timeout=None):
        self.flushed.append(timeout)


def enabled_reporter(client=None, repanic=True):
    """Build an enabled reporter around a fake client."""
    client = client or FakeSentryClient()
    return ErrorReporter(Enabled(client=client, instrumentation=Instrumentation(client, repanic=repanic)))


class RecordingTransport(Transport):
    """sentry_sdk transport keeping events in memory."""

    def __init__(self, options=None):
        super().__init__(options)
        self._lock = threading.Lock()
        self.events = []

    def capture_envelope(self, envelope):
        event = envelope.get_event()
        if event is not None:
            with self._lock:
                self.events.append(event)


def init_sentry(testcase, **options):
    """
    Initialise the real sentry_sdk with a RecordingTransport for one test.

    Returns:
        RecordingTransport: The transport receiving the events.
    """
    transport = RecordingTransport()
    sentry_sdk.init(
        dsn="https://key@o0.ingest.sentry.io/1",
        transport=transport,
        default_integrations=False,
        auto_enabling_integrations=False,
        **options,
    )

    def close():
        sentry_sdk.get_client().close()
        sentry_sdk.get_global_scope().set_client(None)

    testcase.addCleanup(close)
    return transport
