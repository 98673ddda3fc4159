from django.apps import AppConfig


class DjangoSurveillanceConfig(AppConfig):
    """App configuration for django_surveillance."""

    name = "django_surveillance"
    verbose_name = "Django Surveillance"
    reporter = None

    def ready(self):
        """Build the process error reporter before any request is served."""
        from .conf import get_conf
        from .reporter import ErrorReporter

        self.reporter = ErrorReporter.from_config(get_conf())
