"""
Django management command to register event handlers.

Handlers are registered at startup by the project AppConfig; this command
re-runs registration and lists what is subscribed.
"""
from django.core.management.base import BaseCommand

from core.infrastructure.event_handlers import LICENSE_EVENTS, register_event_handlers


class Command(BaseCommand):
    """Command to register event handlers."""

    help = "Register event handlers with the event bus"

    def handle(self, *args, **options):
        register_event_handlers()
        for event_type in LICENSE_EVENTS:
            self.stdout.write(f"  - {event_type.__name__}")
        self.stdout.write(self.style.SUCCESS("Event handlers registered successfully"))
