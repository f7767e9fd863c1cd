"""
Unit tests for WebhookIngestionHandler.
"""
import pytest

from billing.application.commands.ingest_webhook_event import IngestWebhookEventCommand
from billing.application.dto.billing_dto import (
    ACTIVATED,
    DROPPED,
    DUPLICATE,
    IGNORED,
    UNCHANGED,
    UPDATED,
)
from billing.application.handlers.webhook_ingestion_handler import WebhookIngestionHandler
from billing.domain.webhook_event import (
    CHECKOUT_SESSION_COMPLETED,
    SUBSCRIPTION_DELETED,
    SUBSCRIPTION_UPDATED,
)
from conftest import VALID_SIGNATURE, webhook_payload
from core.domain.exceptions import BillingProviderError, WebhookSignatureError
from core.domain.value_objects import LicenseStatus


def checkout_completed(user_id="U1", subscription="S1", customer="C1", mode="subscription", **extra):
    session = {
        "id": "cs_1",
        "object": "checkout.session",
        "mode": mode,
        "payment_status": "paid",
        "client_reference_id": user_id,
        "subscription": subscription,
        "customer": customer,
        "metadata": {"userId": user_id} if user_id else {},
    }
    session.update(extra)
    return IngestWebhookEventCommand(
        payload=webhook_payload(CHECKOUT_SESSION_COMPLETED, session, event_id="evt_checkout"),
        signature_header=VALID_SIGNATURE,
    )


def subscription_event(event_type, status, subscription="S1", customer="C1", event_id="evt_sub"):
    payload = {"id": subscription, "object": "subscription", "status": status, "customer": customer}
    return IngestWebhookEventCommand(
        payload=webhook_payload(event_type, payload, event_id=event_id),
        signature_header=VALID_SIGNATURE,
    )


@pytest.fixture
def handler(fake_gateway, memory_repository, lifecycle_manager):
    """Fixture for WebhookIngestionHandler with S1/C1 active at the provider."""
    fake_gateway.add_subscription("S1", "C1", status="active")
    return WebhookIngestionHandler(
        fake_gateway, memory_repository, lifecycle_manager, webhook_secret="whsec_test"
    )


class TestCheckoutCompleted:
    """Tests for checkout.session.completed."""

    @pytest.mark.asyncio
    async def test_activates_license(self, handler, memory_repository):
        """Test a paid subscription checkout creates an active license."""
        result = await handler.handle(checkout_completed())

        assert result.outcome == ACTIVATED
        assert result.event_id == "evt_checkout"
        license = memory_repository.records["U1"]
        assert license.status == LicenseStatus.ACTIVE
        assert license.customer_id == "C1"
        assert license.subscription_id == "S1"

    @pytest.mark.asyncio
    async def test_replay_is_duplicate(self, handler, memory_repository, recording_bus):
        """Test re-delivery keeps the same key and emits no second activation."""
        await handler.handle(checkout_completed())
        key = memory_repository.records["U1"].license_key

        result = await handler.handle(checkout_completed())

        assert result.outcome == DUPLICATE
        assert memory_repository.records["U1"].license_key == key
        assert len(recording_bus.of_type("LicenseActivated")) == 1

    @pytest.mark.asyncio
    async def test_user_from_metadata(self, handler, memory_repository):
        """Test metadata userId is used when there is no correlation id."""
        result = await handler.handle(checkout_completed(client_reference_id=None))

        assert result.outcome == ACTIVATED
        assert "U1" in memory_repository.records

    @pytest.mark.asyncio
    async def test_payment_mode_ignored(self, handler, memory_repository):
        """Test one-off payment sessions do not create licenses."""
        result = await handler.handle(checkout_completed(mode="payment"))

        assert result.outcome == IGNORED
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_session_without_user_ignored(self, handler, memory_repository):
        """Test sessions without any user correlation are skipped."""
        result = await handler.handle(checkout_completed(user_id=None))

        assert result.outcome == IGNORED
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_oversized_user_id_ignored(self, handler, memory_repository):
        """Test a user id longer than the stored column is skipped, not retried forever."""
        result = await handler.handle(
            checkout_completed(user_id="u" * 256, client_reference_id=None)
        )

        assert result.outcome == IGNORED
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_ended_subscription_recorded_without_activation(
        self, handler, fake_gateway, memory_repository, recording_bus
    ):
        """Test a checkout whose subscription already ended stores a canceled record only."""
        fake_gateway.set_subscription_status("S1", "canceled")

        result = await handler.handle(checkout_completed())

        assert result.outcome == UPDATED
        license = memory_repository.records["U1"]
        assert license.status == LicenseStatus.CANCELED
        assert license.customer_id == "C1"
        assert recording_bus.of_type("LicenseActivated") == []
        assert recording_bus.of_type("LicenseStatusChanged") == []

    @pytest.mark.asyncio
    async def test_late_checkout_does_not_reactivate(
        self, handler, fake_gateway, memory_repository
    ):
        """Test a checkout delivered after deletion leaves the license canceled."""
        await handler.handle(checkout_completed())
        fake_gateway.set_subscription_status("S1", "canceled")
        await handler.handle(subscription_event(SUBSCRIPTION_DELETED, "canceled"))

        result = await handler.handle(checkout_completed())

        assert result.outcome == DUPLICATE
        assert memory_repository.records["U1"].status == LicenseStatus.CANCELED

    @pytest.mark.asyncio
    async def test_checkout_reactivates_with_same_key(
        self, handler, fake_gateway, memory_repository
    ):
        """Test a new subscription after cancellation re-activates the same key."""
        await handler.handle(checkout_completed())
        key = memory_repository.records["U1"].license_key
        fake_gateway.set_subscription_status("S1", "canceled")
        await handler.handle(subscription_event(SUBSCRIPTION_DELETED, "canceled"))
        fake_gateway.add_subscription("S2", "C1", status="active")

        result = await handler.handle(checkout_completed(subscription="S2"))

        assert result.outcome == ACTIVATED
        license = memory_repository.records["U1"]
        assert license.status == LicenseStatus.ACTIVE
        assert license.license_key == key
        assert license.subscription_id == "S2"

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, handler, fake_gateway, memory_repository):
        """Test provider outages surface so the delivery is retried."""
        fake_gateway.unavailable = True

        with pytest.raises(BillingProviderError):
            await handler.handle(checkout_completed())
        assert memory_repository.records == {}


class TestSubscriptionEvents:
    """Tests for customer.subscription.* events."""

    @pytest.mark.asyncio
    async def test_deleted_cancels(self, handler, fake_gateway, memory_repository):
        """Test subscription deletion cancels the license and keeps the key."""
        await handler.handle(checkout_completed())
        key = memory_repository.records["U1"].license_key

        result = await handler.handle(subscription_event(SUBSCRIPTION_DELETED, "canceled"))

        assert result.outcome == UPDATED
        assert memory_repository.records["U1"].status == LicenseStatus.CANCELED
        assert memory_repository.records["U1"].license_key == key

    @pytest.mark.asyncio
    async def test_updated_uses_current_provider_status(
        self, handler, fake_gateway, memory_repository
    ):
        """Test a stale update payload is overridden by the provider's current state."""
        await handler.handle(checkout_completed())
        fake_gateway.set_subscription_status("S1", "past_due")

        result = await handler.handle(subscription_event(SUBSCRIPTION_UPDATED, "active"))

        assert result.outcome == UPDATED
        assert memory_repository.records["U1"].status == LicenseStatus.CANCELED

    @pytest.mark.asyncio
    async def test_same_status_unchanged(self, handler):
        """Test an update that matches the stored status is a no-op."""
        await handler.handle(checkout_completed())

        result = await handler.handle(subscription_event(SUBSCRIPTION_UPDATED, "active"))

        assert result.outcome == UNCHANGED

    @pytest.mark.asyncio
    async def test_unknown_customer_dropped(self, handler, memory_repository):
        """Test events that race ahead of the checkout are dropped."""
        result = await handler.handle(subscription_event(SUBSCRIPTION_DELETED, "canceled"))

        assert result.outcome == DROPPED
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_out_of_order_delivery_converges(
        self, handler, fake_gateway, memory_repository, recording_bus
    ):
        """Test update-then-checkout ends in the same state as checkout-then-update."""
        fake_gateway.set_subscription_status("S1", "past_due")

        first = await handler.handle(subscription_event(SUBSCRIPTION_UPDATED, "past_due"))
        second = await handler.handle(checkout_completed())
        # Re-delivered update after the license exists
        third = await handler.handle(subscription_event(SUBSCRIPTION_UPDATED, "past_due"))

        assert first.outcome == DROPPED
        assert second.outcome == UPDATED
        assert third.outcome == UNCHANGED
        assert memory_repository.records["U1"].status == LicenseStatus.CANCELED
        assert recording_bus.of_type("LicenseActivated") == []


class TestVerification:
    """Tests for signature handling and unrelated events."""

    @pytest.mark.asyncio
    async def test_bad_signature_mutates_nothing(self, handler, memory_repository):
        """Test an invalid signature raises before any write."""
        command = checkout_completed()
        command = IngestWebhookEventCommand(payload=command.payload, signature_header="t=1,v1=bad")

        with pytest.raises(WebhookSignatureError):
            await handler.handle(command)
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_unhandled_type_ignored(self, handler):
        """Test unrelated event types are acknowledged and ignored."""
        command = IngestWebhookEventCommand(
            payload=webhook_payload("invoice.paid", {"id": "in_1"}, event_id="evt_inv"),
            signature_header=VALID_SIGNATURE,
        )

        result = await handler.handle(command)

        assert result.outcome == IGNORED
        assert result.event_type == "invoice.paid"
