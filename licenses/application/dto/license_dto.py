"""
License DTOs for API responses and cache snapshots.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from licenses.domain.license import License


@dataclass
class LicenseSnapshotDTO:
    """
    Cached view of a license, as needed by verification.

    Entitlement is re-evaluated on every read, so an expiry that passes
    while the snapshot is cached still takes effect.
    """

    user_id: str
    license_key: str
    status: str
    expires_at: Optional[datetime]

    @classmethod
    def from_license(cls, license: License) -> "LicenseSnapshotDTO":
        return cls(
            user_id=license.user_id,
            license_key=license.license_key,
            status=license.status.value,
            expires_at=license.expires_at,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LicenseSnapshotDTO":
        expires_at = data.get("expires_at")
        return cls(
            user_id=data["user_id"],
            license_key=data["license_key"],
            status=data["status"],
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "license_key": self.license_key,
            "status": self.status,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @property
    def is_entitled(self) -> bool:
        if self.status != "active":
            return False
        if self.expires_at and self.expires_at < datetime.now(timezone.utc):
            return False
        return True


@dataclass
class LicenseVerificationDTO:
    """DTO for license verification response."""

    valid: bool
    is_pro: bool

    @classmethod
    def invalid(cls) -> "LicenseVerificationDTO":
        return cls(valid=False, is_pro=False)
