"""
Django admin configuration for licenses app.

Replaces ad-hoc debug endpoints for inspecting and correcting records.
"""
from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import License


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "user_id",
        "license_key",
        "status_display",
        "customer_id",
        "subscription_id",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "created_at", "updated_at"]
    search_fields = ["user_id", "license_key", "customer_id", "subscription_id"]
    readonly_fields = ["user_id", "license_key", "created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("user_id", "license_key", "status", "expires_at"),
            },
        ),
        (
            "Billing",
            {
                "fields": ("customer_id", "subscription_id"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        color = "green" if obj.is_entitled else "red"
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def has_delete_permission(self, request, obj=None):
        """Licenses are canceled, never deleted."""
        return False
