"""
CheckoutSession value object.

Provider-neutral view of a hosted checkout session.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

SUBSCRIPTION_MODE = "subscription"
PAID = "paid"


@dataclass(frozen=True)
class CheckoutSession:
    """A checkout session as reported by the billing provider."""

    id: str
    mode: str
    payment_status: str
    status: Optional[str] = None
    client_reference_id: Optional[str] = None
    subscription_id: Optional[str] = None
    customer_id: Optional[str] = None
    url: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_subscription(self) -> bool:
        """True for recurring-payment checkouts."""
        return self.mode == SUBSCRIPTION_MODE

    @property
    def is_paid(self) -> bool:
        """True once the provider reports the payment as collected."""
        return self.payment_status == PAID

    @property
    def correlated_user_id(self) -> Optional[str]:
        """
        User id threaded through checkout.

        The correlation field wins; older sessions only carry metadata.
        """
        return self.client_reference_id or self.metadata_user_id

    @property
    def metadata_user_id(self) -> Optional[str]:
        """User id embedded in session metadata, if any."""
        return self.metadata.get("userId") or self.metadata.get("user_id") or None
