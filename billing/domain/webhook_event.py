"""
Verified billing provider webhook event.
"""
from dataclasses import dataclass
from typing import Any, Union

from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
SUBSCRIPTION_UPDATED = "customer.subscription.updated"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"

SUBSCRIPTION_EVENTS = frozenset({SUBSCRIPTION_UPDATED, SUBSCRIPTION_DELETED})


@dataclass(frozen=True)
class WebhookEvent:
    """
    A webhook event whose signature has been verified.

    data_object is already mapped to a domain object for the event
    types the service understands, and left raw otherwise.
    """

    id: str
    type: str
    data_object: Union[CheckoutSession, Subscription, Any]
