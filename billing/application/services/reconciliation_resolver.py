"""
Reconciliation resolver.

Answers "does this caller have Pro?" when the local record may lag behind
the billing provider, e.g. the checkout webhook has not been delivered yet.
"""
import logging
from typing import Optional, Tuple

from billing.application.dto.billing_dto import (
    DIRECT_LOOKUP,
    EXISTING_CUSTOMER,
    LICENSE_KEY,
    SESSION_CORRELATION,
    SESSION_SCAN,
    SUBSCRIPTION_SCAN,
    LicenseResolution,
)
from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription
from billing.ports.billing_gateway import BillingGateway
from core.metrics import reconciliation_resolutions_total
from licenses.domain.services import LicenseLifecycleManager
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class ReconciliationResolver:
    """
    Resolve a license through an ordered list of strategies.

    1. direct_lookup: local record by user id
    2. license_key: local record by presented key
    3. session_correlation: checkout sessions whose correlation id is the user
    4. session_scan: recent sessions whose metadata names the user
    5. subscription_scan: active subscriptions whose metadata names the user

    The first strategy that yields an entitlement wins. Provider strategies
    need a user id and only accept active or trialing subscriptions. A
    discovered customer already mapped to another user resolves to that
    user's record; one payer never gets two licenses.
    """

    def __init__(
        self,
        license_repository: LicenseRepository,
        billing_gateway: BillingGateway,
        lifecycle_manager: LicenseLifecycleManager,
        scan_page_size: int = 100,
    ):
        """Initialize resolver with store, gateway and lifecycle manager."""
        self.license_repository = license_repository
        self.billing_gateway = billing_gateway
        self.lifecycle_manager = lifecycle_manager
        self.scan_page_size = scan_page_size

    async def resolve_license(self, user_id: str) -> LicenseResolution:
        """Resolve by client identity."""
        return await self.resolve(user_id=user_id)

    async def resolve_license_by_key(self, license_key: str) -> LicenseResolution:
        """Resolve by license key. Never consults the provider."""
        return await self.resolve(license_key=license_key)

    async def resolve(
        self, user_id: Optional[str] = None, license_key: Optional[str] = None
    ) -> LicenseResolution:
        """
        Run the strategies in order.

        Args:
            user_id: Client identity
            license_key: Previously issued license key

        Returns:
            LicenseResolution; absent() if nothing grants Pro

        Raises:
            BillingProviderError: If a provider lookup fails
        """
        if user_id:
            license = await self.license_repository.find_by_user_id(user_id)
            if self.lifecycle_manager.is_entitled(license):
                return self._resolved(license, DIRECT_LOOKUP)

        if license_key:
            license = await self.license_repository.find_by_license_key(license_key)
            if self.lifecycle_manager.is_entitled(license):
                return self._resolved(license, LICENSE_KEY)

        if not user_id:
            return LicenseResolution.absent()

        discovered = await self._discover_subscription(user_id)
        if discovered is None:
            logger.info("No entitlement found for user %s", user_id)
            return LicenseResolution.absent()

        strategy, subscription = discovered
        customer_id = self.billing_gateway.get_customer_id(subscription)

        owner = await self.license_repository.find_user_id_by_customer_id(customer_id)
        if owner and owner != user_id:
            logger.warning(
                "Customer %s already licensed to user %s; not licensing user %s",
                customer_id,
                owner,
                user_id,
            )
            license = await self.license_repository.find_by_user_id(owner)
            return self._resolved(license, EXISTING_CUSTOMER)

        license = await self.lifecycle_manager.create_or_get_license(
            user_id, customer_id, subscription.id
        )
        updated = await self.lifecycle_manager.apply_subscription_status(
            user_id, subscription.status
        )
        logger.info("License for user %s resolved via %s", user_id, strategy)
        return self._resolved(updated or license, strategy)

    async def find_customer_id(self, user_id: str) -> Optional[str]:
        """
        Find the billing customer of a user.

        Any local record counts, canceled included, so a lapsed subscriber
        can still reach the billing portal.
        """
        license = await self.license_repository.find_by_user_id(user_id)
        if license and license.customer_id:
            return license.customer_id

        resolution = await self.resolve_license(user_id)
        if resolution.found:
            return resolution.license.customer_id or None
        return None

    async def _discover_subscription(
        self, user_id: str
    ) -> Optional[Tuple[str, Subscription]]:
        # One window serves both session strategies; Stripe cannot filter
        # sessions by client_reference_id server-side.
        recent = await self.billing_gateway.list_checkout_sessions(limit=self.scan_page_size)

        correlated = [s for s in recent if s.client_reference_id == user_id]
        subscription = await self._subscription_from_sessions(correlated)
        if subscription:
            return SESSION_CORRELATION, subscription

        tagged = [
            s
            for s in recent
            if s.client_reference_id != user_id and s.metadata_user_id == user_id
        ]
        subscription = await self._subscription_from_sessions(tagged)
        if subscription:
            return SESSION_SCAN, subscription

        subscriptions = await self.billing_gateway.list_subscriptions(
            status="active", limit=self.scan_page_size
        )
        for candidate in subscriptions:
            if candidate.references_user(user_id) and candidate.is_entitling:
                return SUBSCRIPTION_SCAN, candidate

        return None

    async def _subscription_from_sessions(self, sessions) -> Optional[Subscription]:
        """Return the first entitling subscription behind the sessions, paid first."""
        candidates = [s for s in sessions if s.is_subscription and s.subscription_id]
        candidates.sort(key=_paid_first)

        for session in candidates:
            subscription = await self.billing_gateway.get_subscription(session.subscription_id)
            if subscription.is_entitling:
                return subscription
        return None

    def _resolved(self, license, strategy: str) -> LicenseResolution:
        reconciliation_resolutions_total.labels(strategy=strategy).inc()
        return LicenseResolution(license=license, strategy=strategy)


def _paid_first(session: CheckoutSession) -> int:
    return 0 if session.is_paid else 1
