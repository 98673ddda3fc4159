"""
Configuration accessor for django-surveillance.
Reads SENTRY_DSN / ENVIRONMENT from the process environment and the
DJANGO_SURVEILLANCE dict from Django settings, with sane defaults.
"""
import os
from dataclasses import dataclass


@dataclass
class Config:
    """Configuration dataclass with defaults."""

    SENTRY_DSN: str = ""
    ENVIRONMENT: str = ""
    RELEASE: str = ""
    # Passed to sentry_sdk.init to check connectivity
    DEBUG: bool = False
    # Re-raise exceptions after the HTTP instrumentation reported them
    REPANIC: bool = True
    # Extras key whose True value keeps an error away from Sentry
    SUPPRESS_EXTRA_KEY: str = "custom_service"
    ADD_REQUEST_ID_HEADER: bool = True
    ADD_EVENT_ID_HEADER: bool = True
    GENERIC_ERROR_MESSAGE: str = "Something broke on our side. We've reported it. Share the Event ID with support."
    INCLUDE_EVENT_ID_IN_BODY: bool = True
    INCLUDE_REQUEST_ID_IN_BODY: bool = True


_config: Config | None = None


def get_conf() -> Config:
    """
    Get the current configuration, loading from the environment and
    Django settings if needed.

    Returns:
        Config: The current configuration instance.
    """
    global _config
    if _config is None:
        _reload_config()
    return _config


def _reload_config():
    """Reload configuration from the environment and Django settings."""
    global _config

    try:
        from django.conf import settings
        user_settings = getattr(settings, "DJANGO_SURVEILLANCE", {})
    except ImportError:
        user_settings = {}

    defaults = {
        "SENTRY_DSN": os.environ.get("SENTRY_DSN", ""),
        "ENVIRONMENT": os.environ.get("ENVIRONMENT", ""),
        "RELEASE": os.environ.get("SENTRY_RELEASE", ""),
    }

    config_dict = {**defaults, **user_settings}
    _config = Config(**config_dict)


def reset_config():
    """Reset the cached configuration (useful for testing)."""
    global _config
    _config = None
