"""
Management command to check the error reporter setup.
"""
from django.core.management.base import BaseCommand

from django_surveillance.conf import get_conf
from django_surveillance.context import get_event_id
from django_surveillance.errors import ReportableError
from django_surveillance.reporter import get_reporter


class Command(BaseCommand):
    """Show whether Sentry reporting is enabled and optionally send a test event."""

    help = "Show the error reporter mode and optionally capture a test error on Sentry"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--send-test-event",
            action="store_true",
            help="Capture a test error and wait for it to be delivered",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=5.0,
            help="Seconds to wait for the test event to be delivered (default 5)",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        config = get_conf()
        reporter = get_reporter()

        if not reporter.is_enabled:
            self.stdout.write(
                self.style.WARNING("Sentry reporting is disabled; errors are only logged locally.")
            )
        else:
            environment = config.ENVIRONMENT or "<unset>"
            self.stdout.write(
                self.style.SUCCESS(f"Sentry reporting is enabled (environment: {environment}).")
            )

        if not options["send_test_event"]:
            return

        if not reporter.is_enabled:
            self.stdout.write(self.style.WARNING("Not sending a test event."))
            return

        error = ReportableError(
            "django-surveillance test event",
            tags={"surveillance_check": "true"},
        )
        reporter.capture(error)
        reporter.flush(timeout=options["timeout"])

        self.stdout.write(self.style.SUCCESS(f"Test event sent with the event ID `{get_event_id()}`."))
