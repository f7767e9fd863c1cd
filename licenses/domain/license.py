"""
License domain entity.

This is the core domain entity representing a user's Pro entitlement.
It contains business logic and is independent of infrastructure.
"""
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import LicenseStatus, UserId

DEFAULT_LICENSE_KEY_PREFIX = "fn"
_KEY_ALPHABET = string.ascii_lowercase + string.digits


def generate_license_key(prefix: str = DEFAULT_LICENSE_KEY_PREFIX) -> str:
    """
    Generate a license key in format: PREFIX_<epoch millis>_<random>.

    The millisecond timestamp plus nine random base36 characters keeps the
    collision probability negligible across processes.

    Args:
        prefix: Key prefix (e.g., 'fn' for Focus Nudge)

    Returns:
        Generated license key string
    """
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(9))
    return f"{prefix}_{millis}_{suffix}"


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    One record per user. The license key is issued once and survives
    every status transition; cancellation is a status, never a deletion.
    """

    user_id: str
    license_key: str
    customer_id: str
    subscription_id: str
    status: LicenseStatus
    expires_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate license entity."""
        UserId(self.user_id)
        if not self.license_key:
            raise ValueError("License key is required")
        if not isinstance(self.status, LicenseStatus):
            raise ValueError(f"Invalid license status: {self.status}")

    @classmethod
    def create(
        cls,
        user_id: str,
        customer_id: str,
        subscription_id: str,
        key_prefix: str = DEFAULT_LICENSE_KEY_PREFIX,
        expires_at: Optional[datetime] = None,
    ) -> "License":
        """
        Create a new active License with a freshly generated key.

        Args:
            user_id: Client identity
            customer_id: Billing provider customer id
            subscription_id: Billing provider subscription id
            key_prefix: License key prefix
            expires_at: Optional expiration datetime

        Returns:
            License entity instance
        """
        now = datetime.now(timezone.utc)
        return cls(
            user_id=user_id,
            license_key=generate_license_key(key_prefix),
            customer_id=customer_id or "",
            subscription_id=subscription_id or "",
            status=LicenseStatus.ACTIVE,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_active(self) -> bool:
        """True if the persisted status is active (ignores expiry)."""
        return self.status == LicenseStatus.ACTIVE

    def is_entitled(self, current_time: Optional[datetime] = None) -> bool:
        """
        Check if this license currently grants Pro.

        Args:
            current_time: Current time (defaults to now, UTC)

        Returns:
            True if status is active and the license has not expired
        """
        if self.status != LicenseStatus.ACTIVE:
            return False
        if self.expires_at:
            check_time = current_time or datetime.now(timezone.utc)
            if self.expires_at < check_time:
                return False
        return True
