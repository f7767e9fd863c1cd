"""
WSGI config for FocusNudgeLicenseService.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "FocusNudgeLicenseService.settings.prod")

application = get_wsgi_application()
