"""
Wiring of billing handlers for entry points outside the HTTP views
(management commands and Celery tasks).
"""
from django.conf import settings

from billing.application.handlers.sync_license_statuses_handler import SyncLicenseStatusesHandler
from billing.infrastructure.stripe_gateway import StripeBillingGateway
from core.infrastructure.events import event_bus
from licenses.domain.services import LicenseLifecycleManager
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository


def build_billing_gateway() -> StripeBillingGateway:
    return StripeBillingGateway(
        api_key=settings.STRIPE_SECRET_KEY, timeout=settings.STRIPE_TIMEOUT_SECONDS
    )


def build_sync_license_statuses_handler(billing_gateway=None) -> SyncLicenseStatusesHandler:
    license_repository = DjangoLicenseRepository()
    return SyncLicenseStatusesHandler(
        billing_gateway=billing_gateway or build_billing_gateway(),
        license_repository=license_repository,
        lifecycle_manager=LicenseLifecycleManager(
            license_repository, event_bus=event_bus, key_prefix=settings.LICENSE_KEY_PREFIX
        ),
    )
