"""
Checkout and billing-portal session handlers.
"""
import logging
from urllib.parse import quote

from billing.application.commands.create_checkout_session import CreateCheckoutSessionCommand
from billing.application.commands.create_portal_session import CreatePortalSessionCommand
from billing.application.dto.billing_dto import CheckoutSessionDTO
from billing.application.services.reconciliation_resolver import ReconciliationResolver
from billing.ports.billing_gateway import BillingGateway
from core.domain.exceptions import LicenseNotFoundError

logger = logging.getLogger(__name__)


def _is_web_url(url: str) -> bool:
    """Stripe can only redirect to http(s) pages, never extension pages."""
    return bool(url) and url.startswith("http") and "chrome-extension" not in url


class CreateCheckoutSessionHandler:
    """Handler for CreateCheckoutSessionCommand."""

    def __init__(self, billing_gateway: BillingGateway, backend_url: str, price_id: str = ""):
        """Initialize handler with gateway, public base URL and catalog price."""
        self.billing_gateway = billing_gateway
        self.backend_url = backend_url.rstrip("/")
        self.price_id = price_id

    async def handle(self, command: CreateCheckoutSessionCommand) -> CheckoutSessionDTO:
        """
        Start a subscription checkout correlated to the user.

        Args:
            command: CreateCheckoutSessionCommand

        Returns:
            CheckoutSessionDTO with the hosted checkout URL
        """
        success_url = command.success_url
        if not _is_web_url(success_url):
            success_url = (
                f"{self.backend_url}/success?session_id={{CHECKOUT_SESSION_ID}}"
                f"&userId={quote(command.user_id)}"
            )
        cancel_url = command.cancel_url
        if not _is_web_url(cancel_url):
            cancel_url = f"{self.backend_url}/cancel"

        logger.info("Creating checkout session for user %s", command.user_id)
        session = await self.billing_gateway.create_checkout_session(
            user_id=command.user_id,
            price_id=self.price_id,
            success_url=success_url,
            cancel_url=cancel_url,
        )
        return CheckoutSessionDTO(session_id=session.id, url=session.url)


class CreatePortalSessionHandler:
    """Handler for CreatePortalSessionCommand."""

    def __init__(
        self,
        billing_gateway: BillingGateway,
        resolver: ReconciliationResolver,
        backend_url: str,
    ):
        """Initialize handler with gateway, resolver and public base URL."""
        self.billing_gateway = billing_gateway
        self.resolver = resolver
        self.backend_url = backend_url.rstrip("/")

    async def handle(self, command: CreatePortalSessionCommand) -> str:
        """
        Open the billing portal for the user's customer.

        Returns:
            Portal URL

        Raises:
            LicenseNotFoundError: If no customer is known for the user
        """
        customer_id = await self.resolver.find_customer_id(command.user_id)
        if not customer_id:
            raise LicenseNotFoundError("No active subscription found")

        return_url = command.return_url if _is_web_url(command.return_url) else self.backend_url
        return await self.billing_gateway.create_portal_session(customer_id, return_url)
