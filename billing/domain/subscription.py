"""
Subscription value object.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from core.domain.value_objects import LicenseStatus, SubscriptionStatus


@dataclass(frozen=True)
class Subscription:
    """A recurring-payment object as reported by the billing provider."""

    id: str
    status: str
    customer_id: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_entitling(self) -> bool:
        """True while the subscription grants Pro (active or trialing)."""
        return SubscriptionStatus.is_entitling(self.status)

    @property
    def license_status(self) -> LicenseStatus:
        """License status implied by the current subscription status."""
        return LicenseStatus.from_subscription_status(self.status)

    def references_user(self, user_id: str) -> bool:
        """True if metadata or correlation fields carry the given user id."""
        if not user_id:
            return False
        return user_id in (
            self.metadata.get("userId"),
            self.metadata.get("user_id"),
            self.metadata.get("client_reference_id"),
        )
