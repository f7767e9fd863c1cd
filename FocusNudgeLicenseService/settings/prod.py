"""
Production settings for FocusNudgeLicenseService.
"""
import os

from .base import *  # noqa: F403, F401
from .logging import get_logging_config

DEBUG = False

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")

# Security settings
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# Health probes arrive over plain HTTP inside the cluster
SECURE_REDIRECT_EXEMPT = [r"^health/", r"^ready/$", r"^metrics/$"]

LOGGING = get_logging_config("production")
