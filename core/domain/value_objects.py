"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class UserId(ValueObject):
    """Client-generated identity of an extension install."""

    value: str

    def __post_init__(self):
        """Validate user id."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("User ID cannot be empty")
        if len(self.value) > 255:
            raise ValueError("User ID too long")

    def __str__(self) -> str:
        """Return user id as string."""
        return self.value


class LicenseStatus(Enum):
    """License status value object. Only these two values are persisted."""

    ACTIVE = "active"
    CANCELED = "canceled"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value

    @classmethod
    def from_subscription_status(cls, subscription_status: str) -> "LicenseStatus":
        """
        Derive license status from the provider's subscription status.

        Args:
            subscription_status: Raw subscription status reported by the provider

        Returns:
            ACTIVE for entitling subscription states, CANCELED otherwise
        """
        if SubscriptionStatus.is_entitling(subscription_status):
            return cls.ACTIVE
        return cls.CANCELED


class SubscriptionStatus(Enum):
    """Subscription states reported by the billing provider."""

    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value

    @staticmethod
    def is_entitling(status) -> bool:
        """Return True if a subscription in this status grants Pro."""
        value = status.value if isinstance(status, SubscriptionStatus) else status
        return value in (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value)
