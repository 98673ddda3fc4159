"""
Django settings for the django-surveillance test suite.
"""
SECRET_KEY = "django-surveillance-tests"

DEBUG = False

ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "django_surveillance",
]

MIDDLEWARE = [
    "django_surveillance.middleware.RequestIDMiddleware",
    "django_surveillance.middleware.AbortRecoveryMiddleware",
    "django_surveillance.middleware.SentryCaptureMiddleware",
]

ROOT_URLCONF = "tests.urls"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "django_surveillance.drf.exception_handler.reporting_exception_handler",
}

# Never talk to a real Sentry project from the test suite
DJANGO_SURVEILLANCE = {
    "SENTRY_DSN": "",
    "ENVIRONMENT": "test",
}
