"""
Testing settings.
"""
from .base import *

DEBUG = False

# File-backed so threaded tests share one database across connections.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
        "OPTIONS": SQLITE_OPTIONS,
        "TEST": {"NAME": BASE_DIR / "test_db.sqlite3"},
    }
}

COIN_RATE = 5
MONEY_RATE = 1000000
MTA_TOKEN = "test-consumer-token"

PAYPAL_CLIENT_ID = "test-client"
PAYPAL_CLIENT_SECRET = "test-secret"

CORS_ALLOW_ALL_ORIGINS = True

LOGGING["loggers"]["donations"]["level"] = "CRITICAL"
