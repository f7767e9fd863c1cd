"""
Mappers from Stripe objects to billing domain objects.

Stripe returns StripeObject instances from the API and plain dicts from
parsed payloads; both support item access, so the mappers only rely on that.
"""
from typing import Any, Dict, Optional

from billing.domain.checkout_session import CheckoutSession
from billing.domain.subscription import Subscription
from billing.domain.webhook_event import (
    CHECKOUT_SESSION_COMPLETED,
    SUBSCRIPTION_EVENTS,
    WebhookEvent,
)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict or StripeObject, returning default if absent."""
    if obj is None:
        return default
    try:
        value = obj[name]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _metadata(obj: Any) -> Dict[str, str]:
    metadata = _field(obj, "metadata")
    if not metadata:
        return {}
    return {str(key): str(value) for key, value in metadata.items()}


def _id_of(value: Any) -> Optional[str]:
    """Normalize an id-or-expanded-object field to its id."""
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    return _field(value, "id")


def extract_customer_id(provider_object: Any) -> Optional[str]:
    """
    Extract the customer id from a session or subscription.

    Args:
        provider_object: Stripe object, dict or domain object carrying a customer

    Returns:
        Customer id string, or None if the object has no customer
    """
    if isinstance(provider_object, (CheckoutSession, Subscription)):
        return provider_object.customer_id
    return _id_of(_field(provider_object, "customer"))


def map_checkout_session(obj: Any) -> CheckoutSession:
    """Map a Stripe checkout session to a CheckoutSession."""
    return CheckoutSession(
        id=_field(obj, "id"),
        mode=_field(obj, "mode", ""),
        payment_status=_field(obj, "payment_status", ""),
        status=_field(obj, "status"),
        client_reference_id=_field(obj, "client_reference_id"),
        subscription_id=_id_of(_field(obj, "subscription")),
        customer_id=extract_customer_id(obj),
        url=_field(obj, "url"),
        metadata=_metadata(obj),
    )


def map_subscription(obj: Any) -> Subscription:
    """Map a Stripe subscription to a Subscription."""
    return Subscription(
        id=_field(obj, "id"),
        status=_field(obj, "status", ""),
        customer_id=extract_customer_id(obj),
        metadata=_metadata(obj),
    )


def map_webhook_event(event: Any) -> WebhookEvent:
    """
    Map a verified Stripe event.

    Checkout and subscription payloads become domain objects; any other
    type keeps its raw data object.
    """
    event_type = _field(event, "type", "")
    data_object = _field(_field(event, "data"), "object")

    if event_type == CHECKOUT_SESSION_COMPLETED:
        data_object = map_checkout_session(data_object)
    elif event_type in SUBSCRIPTION_EVENTS:
        data_object = map_subscription(data_object)

    return WebhookEvent(id=_field(event, "id", ""), type=event_type, data_object=data_object)
