"""
Billing DTOs for handler results.
"""
from dataclasses import dataclass
from typing import Optional

from licenses.domain.license import License

# Webhook outcomes
ACTIVATED = "activated"
UPDATED = "updated"
UNCHANGED = "unchanged"
DUPLICATE = "duplicate"
DROPPED = "dropped"
IGNORED = "ignored"

# Resolution strategies, in precedence order
DIRECT_LOOKUP = "direct_lookup"
LICENSE_KEY = "license_key"
SESSION_CORRELATION = "session_correlation"
SESSION_SCAN = "session_scan"
SUBSCRIPTION_SCAN = "subscription_scan"
EXISTING_CUSTOMER = "existing_customer"

# Auto reconcile rejection reasons
PAYMENT_NOT_COMPLETED = "Payment not completed"
NOT_SUBSCRIPTION_SESSION = "Not a subscription session"
CUSTOMER_LICENSED_TO_ANOTHER_USER = "Customer already licensed to another user"


@dataclass
class WebhookResult:
    """Outcome of one ingested webhook event."""

    event_id: str
    event_type: str
    outcome: str


@dataclass
class LicenseResolution:
    """Result of a reconciliation lookup."""

    license: Optional[License]
    strategy: Optional[str] = None

    @classmethod
    def absent(cls) -> "LicenseResolution":
        """No entitlement could be established. Not an error."""
        return cls(license=None, strategy=None)

    @property
    def found(self) -> bool:
        return self.license is not None


@dataclass
class AutoReconcileResult:
    """License created from a checkout session, or the reason it was not."""

    license: Optional[License] = None
    reason: Optional[str] = None
    already_existed: bool = False

    @classmethod
    def not_eligible(cls, reason: str) -> "AutoReconcileResult":
        return cls(license=None, reason=reason)

    @property
    def eligible(self) -> bool:
        return self.license is not None


@dataclass
class CheckoutSessionDTO:
    """Hosted checkout session handed back to the client."""

    session_id: str
    url: Optional[str]


@dataclass
class SyncLicenseStatusesResult:
    """Counters of one status sync run."""

    checked: int = 0
    changed: int = 0
    failed: int = 0
    dry_run: bool = False
