"""
BillingGateway port (interface).

This defines the contract for billing provider access.
Infrastructure layer implements this interface.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription
from billing.domain.webhook_event import WebhookEvent


class BillingGateway(ABC):
    """
    Port for billing provider operations.

    Every call is a round trip to the provider; implementations raise
    BillingProviderError on transport or API failures.
    """

    @abstractmethod
    def verify_signature(
        self, payload: bytes, signature_header: str, secret: str
    ) -> WebhookEvent:
        """
        Verify a webhook payload against its signature header.

        Args:
            payload: Raw request body, byte-exact
            signature_header: Value of the provider's signature header
            secret: Webhook signing secret

        Returns:
            Verified WebhookEvent

        Raises:
            WebhookSignatureError: If the signature or payload is invalid
        """
        pass

    @abstractmethod
    async def get_checkout_session(self, session_id: str) -> CheckoutSession:
        """Retrieve one checkout session by id."""
        pass

    @abstractmethod
    async def list_checkout_sessions(self, limit: int = 100) -> List[CheckoutSession]:
        """
        List recent checkout sessions, newest first.

        Args:
            limit: Page size requested from the provider

        Returns:
            List of CheckoutSession value objects
        """
        pass

    @abstractmethod
    async def get_subscription(self, subscription_id: str) -> Subscription:
        """Retrieve one subscription by id."""
        pass

    @abstractmethod
    async def list_subscriptions(
        self, status: str = "active", limit: int = 100
    ) -> List[Subscription]:
        """List subscriptions in a status, newest first."""
        pass

    @abstractmethod
    def get_customer_id(self, provider_object: Any) -> Optional[str]:
        """
        Extract a customer id from a provider object.

        The customer field may be a bare id or an expanded object.
        """
        pass

    @abstractmethod
    async def create_checkout_session(
        self,
        user_id: str,
        price_id: Optional[str],
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> CheckoutSession:
        """Create a subscription checkout session correlated to a user."""
        pass

    @abstractmethod
    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        """
        Create a billing-portal session.

        Returns:
            URL of the hosted portal
        """
        pass
