"""
License domain events.

Domain events represent something that happened in the license domain.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.domain.events import DomainEvent


class LicenseActivated(DomainEvent):
    """Event raised when a license is created or re-activated."""

    def __init__(
        self,
        user_id: str,
        license_key: str,
        customer_id: str,
        subscription_id: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseActivated event.

        Args:
            user_id: Client identity owning the license
            license_key: Issued license key
            customer_id: Billing provider customer id
            subscription_id: Billing provider subscription id
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=user_id,
            event_type="LicenseActivated",
        )
        self.user_id = user_id
        self.license_key = license_key
        self.customer_id = customer_id
        self.subscription_id = subscription_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary, leaving the license key out."""
        data = super().to_dict()
        data.update(
            {
                "user_id": self.user_id,
                "customer_id": self.customer_id,
                "subscription_id": self.subscription_id,
            }
        )
        return data


class LicenseStatusChanged(DomainEvent):
    """Event raised when a stored license actually changes status."""

    def __init__(
        self,
        user_id: str,
        status: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseStatusChanged event.

        Args:
            user_id: Client identity owning the license
            status: New license status value
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=user_id,
            event_type="LicenseStatusChanged",
        )
        self.user_id = user_id
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        data = super().to_dict()
        data.update({"user_id": self.user_id, "status": self.status})
        return data


def event_from_dict(data: Dict[str, Any]) -> Optional[DomainEvent]:
    """
    Rebuild a license event from its serialized form.

    The license key is never serialized, so rebuilt LicenseActivated
    events carry an empty key.
    """
    occurred_at = data.get("occurred_at")
    occurred_at = datetime.fromisoformat(occurred_at) if occurred_at else None
    event_type = data.get("event_type")

    if event_type == "LicenseActivated":
        return LicenseActivated(
            user_id=data["user_id"],
            license_key="",
            customer_id=data.get("customer_id", ""),
            subscription_id=data.get("subscription_id", ""),
            occurred_at=occurred_at,
        )
    if event_type == "LicenseStatusChanged":
        return LicenseStatusChanged(
            user_id=data["user_id"], status=data["status"], occurred_at=occurred_at
        )
    return None
