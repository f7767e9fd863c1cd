"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
from dataclasses import replace
from typing import Optional

from core.domain.events import EventBus
from core.domain.value_objects import LicenseStatus
from licenses.domain.events import LicenseActivated, LicenseStatusChanged
from licenses.domain.license import DEFAULT_LICENSE_KEY_PREFIX, License
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class LicenseLifecycleManager:
    """
    Domain service that creates, validates and transitions licenses.

    Every write goes through the repository; status is always the
    provider's last reported truth, so canceled -> active is a plain
    transition like any other.
    """

    def __init__(
        self,
        license_repository: LicenseRepository,
        event_bus: Optional[EventBus] = None,
        key_prefix: str = DEFAULT_LICENSE_KEY_PREFIX,
    ):
        """Initialize manager with the license store and optional event bus."""
        self.license_repository = license_repository
        self.event_bus = event_bus
        self.key_prefix = key_prefix

    @staticmethod
    def is_entitled(license: Optional[License]) -> bool:
        """
        Evaluate the entitlement of a license.

        Args:
            license: License entity or None

        Returns:
            True if the license exists, is active and not expired
        """
        return license is not None and license.is_entitled()

    async def create_or_get_license(
        self, user_id: str, customer_id: str, subscription_id: str
    ) -> License:
        """
        Return the active license of a user, creating it if needed.

        Args:
            user_id: Client identity
            customer_id: Billing provider customer id
            subscription_id: Billing provider subscription id

        Returns:
            Stored License entity
        """
        existing = await self.license_repository.find_by_user_id(user_id)
        if existing and existing.is_active:
            return existing

        candidate = License.create(
            user_id=user_id,
            customer_id=customer_id,
            subscription_id=subscription_id,
            key_prefix=self.key_prefix,
        )
        stored = await self.license_repository.upsert(candidate)
        logger.info(
            "License activated for user %s (customer=%s, subscription=%s)",
            user_id,
            customer_id,
            subscription_id,
        )

        await self._publish(
            LicenseActivated(
                user_id=stored.user_id,
                license_key=stored.license_key,
                customer_id=stored.customer_id,
                subscription_id=stored.subscription_id,
            )
        )
        return stored

    async def record_ended_license(
        self, user_id: str, customer_id: str, subscription_id: str, subscription_status: str
    ) -> License:
        """
        Store a license whose subscription ended before it was first recorded.

        The record exists so later subscription events can find the user by
        customer id; it is written in its final status and never activated.
        """
        status = LicenseStatus.from_subscription_status(subscription_status)
        candidate = replace(
            License.create(
                user_id=user_id,
                customer_id=customer_id,
                subscription_id=subscription_id,
                key_prefix=self.key_prefix,
            ),
            status=status,
        )
        stored = await self.license_repository.upsert(candidate)
        logger.info(
            "License recorded as %s for user %s (subscription %s is %s)",
            stored.status.value,
            user_id,
            subscription_id,
            subscription_status,
        )
        return stored

    async def set_status(self, user_id: str, status: LicenseStatus) -> Optional[License]:
        """
        Transition an existing license to a status.

        A missing record is not an error: status events may race ahead of
        license creation.

        Args:
            user_id: Client identity
            status: Target status

        Returns:
            Updated License, or None if nothing changed
        """
        changed = await self.license_repository.update_status(user_id, status)
        if not changed:
            logger.debug("Status %s for user %s is a no-op", status.value, user_id)
            return None

        logger.info("License for user %s is now %s", user_id, status.value)
        await self._publish(LicenseStatusChanged(user_id=user_id, status=status.value))
        return await self.license_repository.find_by_user_id(user_id)

    async def apply_subscription_status(
        self, user_id: str, subscription_status: str
    ) -> Optional[License]:
        """
        Align a license with the provider's reported subscription status.

        Args:
            user_id: Client identity
            subscription_status: Raw provider subscription status

        Returns:
            Updated License, or None if nothing changed
        """
        return await self.set_status(
            user_id, LicenseStatus.from_subscription_status(subscription_status)
        )

    async def _publish(self, event) -> None:
        """Publish a domain event if an event bus is wired."""
        if self.event_bus:
            await self.event_bus.publish(event)
