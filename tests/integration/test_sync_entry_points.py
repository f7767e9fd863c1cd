"""
Integration tests for the status sync management command and Celery task.
"""

from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from billing.infrastructure import factories
from core.tasks import sync_license_statuses_task
from licenses.infrastructure.models import License as LicenseModel


@pytest.fixture
def lapsed_license(db, fake_gateway):
    """Active license whose subscription was canceled at the provider."""
    now = timezone.now()
    fake_gateway.add_subscription("S1", "C1", status="canceled")
    return LicenseModel.objects.create(
        user_id="U1",
        license_key="fn_1700000000000_abcdefghi",
        customer_id="C1",
        subscription_id="S1",
        status="active",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def sync_gateway(fake_gateway, monkeypatch):
    """Build sync handlers against the in-memory billing provider."""
    build = factories.build_sync_license_statuses_handler

    def build_with_fake():
        return build(billing_gateway=fake_gateway)

    monkeypatch.setattr(factories, "build_sync_license_statuses_handler", build_with_fake)
    monkeypatch.setattr(
        "core.management.commands.sync_license_statuses.build_sync_license_statuses_handler",
        build_with_fake,
    )
    return fake_gateway


@pytest.mark.django_db
@pytest.mark.integration
class TestSyncLicenseStatusesCommand:
    """Tests for the sync_license_statuses management command."""

    def test_cancels_lapsed_license(self, sync_gateway, lapsed_license):
        """Test the command applies the provider status."""
        out = StringIO()

        call_command("sync_license_statuses", stdout=out)

        assert "1 changed" in out.getvalue()
        assert LicenseModel.objects.get(user_id="U1").status == "canceled"

    def test_dry_run(self, sync_gateway, lapsed_license):
        """Test dry runs leave the store untouched."""
        out = StringIO()

        call_command("sync_license_statuses", "--dry-run", stdout=out)

        assert "DRY RUN" in out.getvalue()
        assert LicenseModel.objects.get(user_id="U1").status == "active"


@pytest.mark.django_db
@pytest.mark.integration
class TestSyncLicenseStatusesTask:
    """Tests for the periodic Celery task."""

    def test_task_returns_counters(self, sync_gateway, lapsed_license):
        """Test the task runs the sync and reports counters."""
        result = sync_license_statuses_task(limit=10)

        assert result == {"checked": 1, "changed": 1, "failed": 0, "dry_run": False}

    def test_task_skips_without_credentials(self, settings, lapsed_license):
        """Test a missing Stripe key skips the run instead of failing it."""
        settings.STRIPE_SECRET_KEY = ""

        assert sync_license_statuses_task() is None
        assert LicenseModel.objects.get(user_id="U1").status == "active"
