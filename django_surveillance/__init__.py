"""
Django Surveillance - Report exceptions to Sentry and recover aborted requests.
"""

__version__ = "0.1.0"

from django_surveillance.errors import Abort, ReportableError
from django_surveillance.reporter import ErrorReporter, get_reporter

__all__ = ["Abort", "ErrorReporter", "ReportableError", "get_reporter"]
