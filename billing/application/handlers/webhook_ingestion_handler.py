"""
WebhookIngestionHandler.

Turns verified billing provider events into license mutations.
"""
import logging

from billing.application.commands.ingest_webhook_event import IngestWebhookEventCommand
from billing.application.dto.billing_dto import (
    ACTIVATED,
    DROPPED,
    DUPLICATE,
    IGNORED,
    UNCHANGED,
    UPDATED,
    WebhookResult,
)
from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription
from billing.domain.webhook_event import (
    CHECKOUT_SESSION_COMPLETED,
    SUBSCRIPTION_DELETED,
    SUBSCRIPTION_EVENTS,
)
from billing.ports.billing_gateway import BillingGateway
from core.domain.value_objects import UserId
from core.metrics import webhook_events_total
from licenses.domain.services import LicenseLifecycleManager
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class WebhookIngestionHandler:
    """
    Handler for IngestWebhookEventCommand.

    Deliveries are at-least-once and unordered. Every write is derived from
    the provider's current subscription state rather than from the event
    payload alone, so replays and reorderings converge to the same record.
    """

    def __init__(
        self,
        billing_gateway: BillingGateway,
        license_repository: LicenseRepository,
        lifecycle_manager: LicenseLifecycleManager,
        webhook_secret: str,
    ):
        """Initialize handler with gateway, store and lifecycle manager."""
        self.billing_gateway = billing_gateway
        self.license_repository = license_repository
        self.lifecycle_manager = lifecycle_manager
        self.webhook_secret = webhook_secret

    async def handle(self, command: IngestWebhookEventCommand) -> WebhookResult:
        """
        Verify and dispatch one webhook delivery.

        Args:
            command: IngestWebhookEventCommand

        Returns:
            WebhookResult describing what happened

        Raises:
            WebhookSignatureError: If verification fails (nothing is mutated)
            BillingConfigurationError: If no signing secret is configured
            BillingProviderError: If the provider cannot be reached; the
                caller should answer 5xx so the event is re-delivered
        """
        event = self.billing_gateway.verify_signature(
            command.payload, command.signature_header, self.webhook_secret
        )
        logger.info("Received webhook event %s (%s)", event.id, event.type)

        if event.type == CHECKOUT_SESSION_COMPLETED:
            outcome = await self._handle_checkout_completed(event.data_object)
        elif event.type in SUBSCRIPTION_EVENTS:
            outcome = await self._handle_subscription_change(event.type, event.data_object)
        else:
            logger.info("Unhandled webhook event type: %s", event.type)
            outcome = IGNORED

        webhook_events_total.labels(event_type=event.type, outcome=outcome).inc()
        return WebhookResult(event_id=event.id, event_type=event.type, outcome=outcome)

    async def _handle_checkout_completed(self, session: CheckoutSession) -> str:
        if not session.is_subscription:
            return IGNORED

        user_id = session.correlated_user_id
        if not user_id:
            logger.warning("Checkout session %s carries no user id", session.id)
            return IGNORED
        try:
            UserId(user_id)
        except ValueError as e:
            logger.warning("Checkout session %s carries an unusable user id: %s", session.id, e)
            return IGNORED
        if not session.subscription_id:
            logger.warning("Checkout session %s has no subscription", session.id)
            return IGNORED

        subscription = await self.billing_gateway.get_subscription(session.subscription_id)
        customer_id = self.billing_gateway.get_customer_id(subscription) or session.customer_id

        existing = await self.license_repository.find_by_user_id(user_id)
        if not subscription.is_entitling:
            # Subscription already ended; never activate on a late checkout.
            if existing is None:
                await self.lifecycle_manager.record_ended_license(
                    user_id, customer_id, subscription.id, subscription.status
                )
                return UPDATED
            changed = await self.lifecycle_manager.apply_subscription_status(
                user_id, subscription.status
            )
            return UPDATED if changed else DUPLICATE
        if existing and existing.is_active:
            return DUPLICATE

        await self.lifecycle_manager.create_or_get_license(user_id, customer_id, subscription.id)
        await self.lifecycle_manager.apply_subscription_status(user_id, subscription.status)
        return ACTIVATED

    async def _handle_subscription_change(
        self, event_type: str, subscription: Subscription
    ) -> str:
        customer_id = self.billing_gateway.get_customer_id(subscription)
        user_id = await self.license_repository.find_user_id_by_customer_id(customer_id)
        if not user_id:
            logger.warning(
                "Subscription %s event for unknown customer %s dropped",
                subscription.id,
                customer_id,
            )
            return DROPPED

        status = subscription.status
        if event_type != SUBSCRIPTION_DELETED:
            # An older update may arrive after a newer one; read current state.
            current = await self.billing_gateway.get_subscription(subscription.id)
            status = current.status

        changed = await self.lifecycle_manager.apply_subscription_status(user_id, status)
        return UPDATED if changed else UNCHANGED
