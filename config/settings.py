"""Django settings for the cinema client core."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("CINEMA_SECRET_KEY", "insecure-local-only")

DEBUG = os.environ.get("CINEMA_DEBUG", "0") == "1"

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "rest_framework",
    "cinema",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("CINEMA_DB_PATH", BASE_DIR / "cinema.sqlite3"),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True

TIME_ZONE = "UTC"

CINEMA = {
    "TICKET_UNIT_PRICE_CENTS": 1000,
    "AUTH_TIMEOUT_SECONDS": 5.0,
    "LEDGER_KEY": "TICKETS_v2",
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "cinema": {
            "handlers": ["console"],
            "level": os.environ.get("CINEMA_LOG_LEVEL", "INFO"),
        },
    },
}
