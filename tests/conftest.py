"""
Pytest configuration and shared fixtures.
"""

import json
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription
from billing.infrastructure.stripe_mappers import extract_customer_id, map_webhook_event
from billing.ports.billing_gateway import BillingGateway
from core.domain.events import EventBus
from core.domain.exceptions import BillingProviderError, WebhookSignatureError
from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License
from licenses.domain.services import LicenseLifecycleManager
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.ports.license_repository import LicenseRepository

VALID_SIGNATURE = "t=1,v1=valid"


class InMemoryLicenseRepository(LicenseRepository):
    """LicenseRepository keeping records in a dict, with the same upsert rules."""

    def __init__(self):
        self.records: Dict[str, License] = {}

    async def find_by_user_id(self, user_id: str) -> Optional[License]:
        return self.records.get(user_id)

    async def find_by_license_key(self, license_key: str) -> Optional[License]:
        for license in self.records.values():
            if license.license_key == license_key:
                return license
        return None

    async def find_user_id_by_customer_id(self, customer_id: str) -> Optional[str]:
        if not customer_id:
            return None
        matches = sorted(
            (l for l in self.records.values() if l.customer_id == customer_id),
            key=lambda l: l.created_at,
        )
        return matches[0].user_id if matches else None

    async def upsert(self, license: License) -> License:
        existing = self.records.get(license.user_id)
        if existing:
            license = replace(
                license, license_key=existing.license_key, created_at=existing.created_at
            )
        self.records[license.user_id] = license
        return license

    async def update_status(self, user_id: str, status: LicenseStatus) -> bool:
        existing = self.records.get(user_id)
        if existing is None or existing.status == status:
            return False
        self.records[user_id] = replace(
            existing, status=status, updated_at=datetime.now(timezone.utc)
        )
        return True

    async def find_by_status(self, status: LicenseStatus, limit: int = 100) -> List[License]:
        matches = [l for l in self.records.values() if l.status == status]
        return sorted(matches, key=lambda l: l.updated_at)[:limit]


class RecordingEventBus(EventBus):
    """EventBus that only records what was published."""

    def __init__(self):
        self.published = []

    async def publish(self, event) -> None:
        self.published.append(event)

    def subscribe(self, event_type, handler) -> None:
        pass

    def of_type(self, event_type: str):
        return [e for e in self.published if e.event_type == event_type]


class FakeBillingGateway(BillingGateway):
    """
    In-memory billing provider.

    Webhook payloads are plain JSON event bodies; the signature header must
    equal VALID_SIGNATURE.
    """

    def __init__(self):
        self.sessions: Dict[str, CheckoutSession] = {}
        self.subscriptions: Dict[str, Subscription] = {}
        self.created_checkouts: List[dict] = []
        self.calls: List[str] = []
        self.unavailable = False

    # Test setup helpers

    def add_subscription(self, subscription_id, customer_id, status="active", metadata=None):
        self.subscriptions[subscription_id] = Subscription(
            id=subscription_id,
            status=status,
            customer_id=customer_id,
            metadata=metadata or {},
        )
        return self.subscriptions[subscription_id]

    def set_subscription_status(self, subscription_id, status):
        self.subscriptions[subscription_id] = replace(
            self.subscriptions[subscription_id], status=status
        )

    def add_session(
        self,
        session_id,
        subscription_id=None,
        customer_id=None,
        client_reference_id=None,
        metadata=None,
        payment_status="paid",
        mode="subscription",
    ):
        self.sessions[session_id] = CheckoutSession(
            id=session_id,
            mode=mode,
            payment_status=payment_status,
            status="complete" if payment_status == "paid" else "open",
            client_reference_id=client_reference_id,
            subscription_id=subscription_id,
            customer_id=customer_id,
            metadata=metadata or {},
        )
        return self.sessions[session_id]

    def _record(self, operation):
        self.calls.append(operation)
        if self.unavailable:
            raise BillingProviderError(f"Stripe {operation} failed", operation=operation)

    # BillingGateway

    def verify_signature(self, payload, signature_header, secret):
        if signature_header != VALID_SIGNATURE:
            raise WebhookSignatureError()
        try:
            event = json.loads(payload)
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid webhook payload: {e}") from e
        return map_webhook_event(event)

    async def get_checkout_session(self, session_id):
        self._record("checkout_session.retrieve")
        return self.sessions[session_id]

    async def list_checkout_sessions(self, limit=100):
        self._record("checkout_session.list")
        return list(reversed(list(self.sessions.values())))[:limit]

    async def get_subscription(self, subscription_id):
        self._record("subscription.retrieve")
        return self.subscriptions[subscription_id]

    async def list_subscriptions(self, status="active", limit=100):
        self._record("subscription.list")
        subscriptions = list(reversed(list(self.subscriptions.values())))
        return [s for s in subscriptions if s.status == status][:limit]

    def get_customer_id(self, provider_object):
        return extract_customer_id(provider_object)

    async def create_checkout_session(
        self, user_id, price_id, success_url, cancel_url, metadata=None
    ):
        self._record("checkout_session.create")
        self.created_checkouts.append(
            {
                "user_id": user_id,
                "price_id": price_id,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )
        return CheckoutSession(
            id="cs_created",
            mode="subscription",
            payment_status="unpaid",
            client_reference_id=user_id,
            url="https://checkout.stripe.test/cs_created",
        )

    async def create_portal_session(self, customer_id, return_url):
        self._record("portal_session.create")
        return f"https://billing.stripe.test/{customer_id}"


def webhook_payload(event_type: str, data_object: dict, event_id: str = "evt_1") -> bytes:
    """Serialize a Stripe-shaped event body."""
    return json.dumps(
        {"id": event_id, "object": "event", "type": event_type, "data": {"object": data_object}}
    ).encode()


@pytest.fixture
def fake_gateway():
    """Fixture for FakeBillingGateway."""
    return FakeBillingGateway()


@pytest.fixture
def memory_repository():
    """Fixture for InMemoryLicenseRepository."""
    return InMemoryLicenseRepository()


@pytest.fixture
def recording_bus():
    """Fixture for RecordingEventBus."""
    return RecordingEventBus()


@pytest.fixture
def lifecycle_manager(memory_repository, recording_bus):
    """Fixture for LicenseLifecycleManager over the in-memory store."""
    return LicenseLifecycleManager(memory_repository, event_bus=recording_bus)


@pytest.fixture
def license_repository():
    """Fixture for DjangoLicenseRepository."""
    return DjangoLicenseRepository()


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache(settings):
    """Verification snapshots must not leak between tests."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()
