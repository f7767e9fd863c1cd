"""
App configuration for Focus Nudge License Service.
"""
import logging
import os

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class FocusNudgeLicenseServiceConfig(AppConfig):
    """App configuration for FocusNudgeLicenseService."""

    name = "FocusNudgeLicenseService"
    verbose_name = "Focus Nudge License Service"

    def ready(self):
        """Register event handlers and, when enabled, tracing."""
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()

        # Django's autoreloader imports the project twice
        if os.environ.get("RUN_MAIN") == "false":
            return

        if getattr(settings, "OBSERVABILITY_ENABLED", False) and not hasattr(self, "_initialized"):
            from core.instrumentation import setup_opentelemetry

            logger.info("Setting up observability...")
            setup_opentelemetry()
            self._initialized = True
