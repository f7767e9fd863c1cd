"""
Serializers for License API endpoints.

Field names are camelCase to match the browser extension client.
"""

from rest_framework import serializers


class LicenseLookupQuerySerializer(serializers.Serializer):
    """Query parameters of the license lookup."""

    userId = serializers.CharField(required=False, max_length=255)
    licenseKey = serializers.CharField(required=False, max_length=100)

    def validate(self, attrs):
        if not attrs.get("userId") and not attrs.get("licenseKey"):
            raise serializers.ValidationError("userId or licenseKey is required")
        return attrs


class VerifyLicenseQuerySerializer(serializers.Serializer):
    """Query parameters of license verification."""

    userId = serializers.CharField(required=True, max_length=255)
    licenseKey = serializers.CharField(required=True, max_length=100)


class LicenseResolutionResponseSerializer(serializers.Serializer):
    """Serializer for a resolved license."""

    licenseKey = serializers.CharField(source="license.license_key")
    status = serializers.CharField(source="license.status.value")
    isPro = serializers.SerializerMethodField()
    strategy = serializers.CharField()

    def get_isPro(self, obj) -> bool:  # pylint: disable=invalid-name
        return obj.license.is_entitled()


class LicenseVerificationResponseSerializer(serializers.Serializer):
    """Serializer for license verification response."""

    valid = serializers.BooleanField()
    isPro = serializers.BooleanField(source="is_pro")
