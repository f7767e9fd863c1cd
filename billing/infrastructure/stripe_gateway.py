"""
Stripe implementation of BillingGateway port.

The stripe SDK is synchronous; calls run in worker threads that are not
pinned to the request thread, so lookups for different users never queue
behind each other.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import stripe
from asgiref.sync import sync_to_async

from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription
from billing.domain.webhook_event import WebhookEvent
from billing.infrastructure.stripe_mappers import (
    extract_customer_id,
    map_checkout_session,
    map_subscription,
    map_webhook_event,
)
from billing.ports.billing_gateway import BillingGateway
from core.domain.exceptions import (
    BillingConfigurationError,
    BillingProviderError,
    WebhookSignatureError,
)
from core.metrics import billing_provider_call_duration_seconds, billing_provider_calls_total

logger = logging.getLogger(__name__)

# Used when no catalog price is configured
DEFAULT_PRICE_DATA = {
    "currency": "usd",
    "product_data": {
        "name": "Focus Nudge Pro",
        "description": "Unlock customizable nudges and advanced features",
    },
    "unit_amount": 999,
    "recurring": {"interval": "month"},
}


class StripeBillingGateway(BillingGateway):
    """Stripe API adapter."""

    def __init__(self, api_key: str, timeout: float = 10.0):
        """
        Initialize gateway.

        Args:
            api_key: Stripe secret key (may be empty; calls then fail fast)
            timeout: Per-request network timeout in seconds
        """
        self.api_key = api_key
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    def verify_signature(
        self, payload: bytes, signature_header: str, secret: str
    ) -> WebhookEvent:
        """
        Verify the Stripe-Signature header and map the event.

        Raises:
            BillingConfigurationError: If no signing secret is configured
            WebhookSignatureError: If the header is missing or invalid, or
                the payload is not a valid event
        """
        if not secret:
            raise BillingConfigurationError("Webhook signing secret is not configured")
        if not signature_header:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        try:
            event = stripe.Webhook.construct_event(payload, signature_header, secret)
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid webhook payload: {e}") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(f"Invalid webhook signature: {e}") from e

        return map_webhook_event(event)

    async def get_checkout_session(self, session_id: str) -> CheckoutSession:
        session = await self._call(
            "checkout_session.retrieve", stripe.checkout.Session.retrieve, session_id
        )
        return map_checkout_session(session)

    async def list_checkout_sessions(self, limit: int = 100) -> List[CheckoutSession]:
        """List the newest checkout sessions on the account."""
        page = await self._call(
            "checkout_session.list", stripe.checkout.Session.list, limit=limit
        )
        return [map_checkout_session(item) for item in page.data]

    async def get_subscription(self, subscription_id: str) -> Subscription:
        subscription = await self._call(
            "subscription.retrieve", stripe.Subscription.retrieve, subscription_id
        )
        return map_subscription(subscription)

    async def list_subscriptions(
        self, status: str = "active", limit: int = 100
    ) -> List[Subscription]:
        page = await self._call(
            "subscription.list", stripe.Subscription.list, status=status, limit=limit
        )
        return [map_subscription(item) for item in page.data]

    def get_customer_id(self, provider_object: Any) -> Optional[str]:
        return extract_customer_id(provider_object)

    async def create_checkout_session(
        self,
        user_id: str,
        price_id: Optional[str],
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> CheckoutSession:
        """
        Create a subscription checkout correlated to the user.

        The user id is written to client_reference_id and to both session
        and subscription metadata, so every fallback lookup can find it.
        """
        correlation = {"userId": user_id, **(metadata or {})}
        if price_id:
            line_items = [{"price": price_id, "quantity": 1}]
        else:
            line_items = [{"price_data": DEFAULT_PRICE_DATA, "quantity": 1}]
        session = await self._call(
            "checkout_session.create",
            stripe.checkout.Session.create,
            mode="subscription",
            line_items=line_items,
            success_url=success_url,
            cancel_url=cancel_url,
            client_reference_id=user_id,
            metadata=correlation,
            subscription_data={"metadata": correlation},
        )
        return map_checkout_session(session)

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = await self._call(
            "portal_session.create",
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
        return session.url

    async def _call(self, operation: str, func: Callable, *args, **kwargs) -> Any:
        """
        Run one Stripe API call in a worker thread.

        Raises:
            BillingConfigurationError: If no API key is configured
            BillingProviderError: On any Stripe or network error
        """
        if not self.api_key:
            raise BillingConfigurationError("Stripe secret key is not configured")

        kwargs["api_key"] = self.api_key
        start_time = time.time()
        try:
            result = await sync_to_async(func, thread_sensitive=False)(*args, **kwargs)
        except stripe.StripeError as e:
            billing_provider_calls_total.labels(operation=operation, outcome="error").inc()
            logger.error("Stripe call %s failed: %s", operation, e)
            raise BillingProviderError(f"Stripe {operation} failed: {e}", operation=operation) from e
        finally:
            billing_provider_call_duration_seconds.labels(operation=operation).observe(
                time.time() - start_time
            )

        billing_provider_calls_total.labels(operation=operation, outcome="success").inc()
        return result
