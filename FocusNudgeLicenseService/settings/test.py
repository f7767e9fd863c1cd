"""
Test settings for FocusNudgeLicenseService.
"""

import os

from .base import *  # noqa: F403, F401

DEBUG = False

# Use PostgreSQL in CI (from DATABASE_URL), SQLite in-memory for local tests
DATABASE_URL = os.environ.get("DATABASE_URL")
if DATABASE_URL and DATABASE_URL.startswith("postgresql"):
    import urllib.parse

    parsed = urllib.parse.urlparse(DATABASE_URL)
    db_name = parsed.path.lstrip("/")
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": db_name,
            "USER": parsed.username or "postgres",
            "PASSWORD": parsed.password or "",
            "HOST": parsed.hostname or "localhost",
            "PORT": parsed.port or 5432,
            "TEST": {"NAME": db_name + "_test"},
        }
    }
else:
    # Django runs in-memory test databases with a shared cache, so
    # sync_to_async worker threads see the same tables
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

# Use in-memory cache for tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

STRIPE_SECRET_KEY = "sk_test_focus_nudge"
STRIPE_PUBLISHABLE_KEY = "pk_test_focus_nudge"
STRIPE_WEBHOOK_SECRET = "whsec_test_focus_nudge"
STRIPE_PRICE_ID = "price_test_pro"
BACKEND_URL = "https://licenses.test"

OBSERVABILITY_ENABLED = False

# Disable logging during tests
LOGGING_CONFIG = None
