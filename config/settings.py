import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [
    h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h
]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "recall.apps.RecallConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("RECALL_DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("RECALL_DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("RECALL_DB_USER", ""),
        "PASSWORD": os.environ.get("RECALL_DB_PASSWORD", ""),
        "HOST": os.environ.get("RECALL_DB_HOST", ""),
        "PORT": os.environ.get("RECALL_DB_PORT", ""),
    }
}

if DATABASES["default"]["ENGINE"].endswith("sqlite3"):
    # SQLite has no row locks. BEGIN IMMEDIATE takes the write lock up front
    # so concurrent reviews queue on the busy timeout instead of failing
    # with "database is locked" when a read lock is upgraded.
    DATABASES["default"]["OPTIONS"] = {
        "transaction_mode": "IMMEDIATE",
        "timeout": int(os.environ.get("RECALL_DB_TIMEOUT", "20")),
    }
    # Shared-cache in-memory databases ignore the busy timeout
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_recall.sqlite3")}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Day boundaries for due dates, streaks and daily aggregates are UTC days.
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

REST_FRAMEWORK = {
    # Authentication belongs to the outer CRUD layer
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "EXCEPTION_HANDLER": "recall.api.exceptions.review_exception_handler",
}

# Reject a second concurrent review of the same card instead of waiting.
RECALL_LOCK_NOWAIT = env_bool("RECALL_LOCK_NOWAIT", True)
RECALL_LOG_LEVEL = os.environ.get("RECALL_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {"handlers": ["console"], "level": RECALL_LOG_LEVEL},
}
