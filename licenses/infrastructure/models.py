"""
License model.

One row per client identity; the customer index backs webhook correlation.
"""
from django.db import models
from django.utils import timezone


class License(models.Model):
    """
    Persisted Pro entitlement of a single user.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("canceled", "Canceled"),
    ]

    user_id = models.CharField(primary_key=True, max_length=255)
    license_key = models.CharField(max_length=100, unique=True)
    customer_id = models.CharField(max_length=255, blank=True, default="")
    subscription_id = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "licenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer_id"], name="licenses_customer_idx"),
            models.Index(fields=["status"], name="licenses_status_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} ({self.status})"

    @property
    def is_entitled(self) -> bool:
        """
        Check if license currently grants Pro.

        Returns:
            True if license is active and not expired
        """
        if self.status != "active":
            return False
        if self.expires_at and self.expires_at < timezone.now():
            return False
        return True
