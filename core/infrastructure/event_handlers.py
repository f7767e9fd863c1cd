"""
Event handlers for domain events.

Side effects of license changes: audit logging, verification cache
invalidation and business metrics.
"""

import logging

from core.domain.events import DomainEvent, EventHandler
from core.metrics import license_status_changes_total, licenses_activated_total
from licenses.domain.events import LicenseActivated, LicenseStatusChanged

logger = logging.getLogger(__name__)

LICENSE_EVENTS = (LicenseActivated, LicenseStatusChanged)


class AuditLogEventHandler(EventHandler):
    """Writes every license event to the audit logger."""

    async def handle(self, event: DomainEvent) -> None:
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )


class LicenseCacheInvalidationHandler(EventHandler):
    """Drops the cached verification snapshot of the affected user."""

    async def handle(self, event: DomainEvent) -> None:
        from licenses.application.services.license_cache_service import LicenseCacheService

        await LicenseCacheService.invalidate_snapshot(event.aggregate_id)


class LicenseMetricsHandler(EventHandler):
    """Counts activations and status transitions."""

    async def handle(self, event: DomainEvent) -> None:
        if isinstance(event, LicenseActivated):
            licenses_activated_total.inc()
        elif isinstance(event, LicenseStatusChanged):
            license_status_changes_total.labels(status=event.status).inc()


def license_event_handlers():
    """Handler instances run for every license event."""
    return [AuditLogEventHandler(), LicenseCacheInvalidationHandler(), LicenseMetricsHandler()]


def register_event_handlers():
    """Register all event handlers with the event bus. Safe to call twice."""
    from core.infrastructure.events import event_bus

    for event_type in LICENSE_EVENTS:
        for handler in license_event_handlers():
            event_bus.subscribe(event_type, handler)

    logger.info("Event handlers registered")
