"""
Celery tasks for background processing.

Periodic license status sync and RabbitMQ event processing.
"""
import logging
from dataclasses import asdict

from asgiref.sync import async_to_sync

from FocusNudgeLicenseService.celery import app

logger = logging.getLogger(__name__)


@app.task
def sync_license_statuses_task(limit: int = 100):
    """
    Re-align active licenses with their Stripe subscriptions.

    Args:
        limit: Maximum number of licenses checked per run
    """
    from billing.application.commands.sync_license_statuses import SyncLicenseStatusesCommand
    from billing.infrastructure.factories import build_sync_license_statuses_handler
    from core.domain.exceptions import BillingConfigurationError

    handler = build_sync_license_statuses_handler()
    try:
        result = async_to_sync(handler.handle)(SyncLicenseStatusesCommand(limit=limit))
    except BillingConfigurationError as exc:
        logger.error("License status sync skipped: %s", exc.message)
        return None
    return asdict(result)


@app.task
def process_event_from_rabbitmq(event_data: dict):
    """
    Process event from RabbitMQ queue.

    Args:
        event_data: Event envelope published by RabbitMQEventBus
    """
    from core.infrastructure.event_handlers import license_event_handlers
    from licenses.domain.events import event_from_dict

    event = event_from_dict(event_data.get("data", {}))
    if event is None:
        logger.warning("Unknown event type from RabbitMQ: %s", event_data.get("event_type"))
        return

    for handler in license_event_handlers():
        try:
            async_to_sync(handler.handle)(event)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Handler %s failed: %s", handler.__class__.__name__, e, exc_info=True)
