"""
Tests for DRF exception handler.
"""
from unittest.mock import patch

from django.apps import apps
from django.test import Client, SimpleTestCase
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory

from django_surveillance.drf.exception_handler import reporting_exception_handler
from tests.fakes import FakeSentryClient, enabled_reporter


class DRFExceptionHandlerTest(SimpleTestCase):
    """Test DRF exception handler integration."""

    def setUp(self):
        """Set up test."""
        self.factory = APIRequestFactory()
        self.fake = FakeSentryClient()
        self.patcher = patch.object(
            apps.get_app_config("django_surveillance"), "reporter", enabled_reporter(self.fake)
        )
        self.patcher.start()
        self.addCleanup(self.patcher.stop)

    def test_4xx_returned_as_is(self):
        """Test that 4xx responses are returned unchanged and not reported."""
        request = self.factory.post("/api/test/", {"invalid": "data"})

        class TestView:
            pass

        context = {"request": request, "view": TestView()}

        response = reporting_exception_handler(ValidationError(), context)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.fake.captures, [])

    def test_unhandled_exception_reported(self):
        """Test that unhandled exceptions are captured and answered with JSON."""
        with self.assertLogs("django_surveillance.reporter", level="ERROR"):
            response = Client().get("/api/boom/")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["event_id"], "event-1")
        self.assertEqual(len(self.fake.captures), 1)
        self.assertEqual(str(self.fake.captures[0]["error"]), "api boom")

    def test_abort_not_reported_twice(self):
        """Test that Abort raised in a DRF view is answered without a second report."""
        with self.assertLogs("django_surveillance.reporter", level="ERROR"):
            response = Client().get("/api/abort/")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["event_id"], "event-1")
        self.assertEqual(len(self.fake.captures), 1)
