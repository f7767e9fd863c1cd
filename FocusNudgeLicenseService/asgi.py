"""
ASGI config for FocusNudgeLicenseService.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "FocusNudgeLicenseService.settings.prod")

application = get_asgi_application()
