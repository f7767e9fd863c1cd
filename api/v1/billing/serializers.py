"""
Serializers for Billing API endpoints.
"""

from rest_framework import serializers


class AutoCreateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for auto-create license request."""

    sessionId = serializers.CharField(required=True, max_length=255)
    userId = serializers.CharField(required=True, max_length=255)


class AutoCreateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for auto-create license response."""

    success = serializers.BooleanField()
    licenseKey = serializers.CharField()
    message = serializers.CharField()


class CheckoutSessionRequestSerializer(serializers.Serializer):
    """Serializer for checkout session request."""

    userId = serializers.CharField(required=True, max_length=255)
    returnUrl = serializers.CharField(required=False, allow_blank=True, max_length=2048)


class CheckoutSessionResponseSerializer(serializers.Serializer):
    """Serializer for checkout session response."""

    sessionId = serializers.CharField(source="session_id")
    url = serializers.CharField(allow_null=True)


class PortalSessionRequestSerializer(serializers.Serializer):
    """Serializer for billing-portal session request."""

    userId = serializers.CharField(required=True, max_length=255)
    returnUrl = serializers.CharField(required=False, allow_blank=True, max_length=2048)


class PortalSessionResponseSerializer(serializers.Serializer):
    url = serializers.CharField()


class WebhookResponseSerializer(serializers.Serializer):
    """Serializer for webhook acknowledgement."""

    received = serializers.BooleanField()
    eventId = serializers.CharField(source="event_id")
    outcome = serializers.CharField()


class BillingConfigResponseSerializer(serializers.Serializer):
    stripePublishableKey = serializers.CharField()
