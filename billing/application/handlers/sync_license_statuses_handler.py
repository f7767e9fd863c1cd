"""
SyncLicenseStatusesHandler.

Periodic job that heals licenses whose subscription events were lost.
"""
import logging

from billing.application.commands.sync_license_statuses import SyncLicenseStatusesCommand
from billing.application.dto.billing_dto import SyncLicenseStatusesResult
from billing.ports.billing_gateway import BillingGateway
from core.domain.exceptions import BillingProviderError
from core.domain.value_objects import LicenseStatus
from licenses.domain.services import LicenseLifecycleManager
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class SyncLicenseStatusesHandler:
    """
    Handler for SyncLicenseStatusesCommand.

    Only active licenses are checked: a canceled license comes back through
    checkout, a webhook or the resolver, all of which re-activate it.
    """

    def __init__(
        self,
        billing_gateway: BillingGateway,
        license_repository: LicenseRepository,
        lifecycle_manager: LicenseLifecycleManager,
    ):
        """Initialize handler with gateway, store and lifecycle manager."""
        self.billing_gateway = billing_gateway
        self.license_repository = license_repository
        self.lifecycle_manager = lifecycle_manager

    async def handle(self, command: SyncLicenseStatusesCommand) -> SyncLicenseStatusesResult:
        """
        Re-read each subscription and apply its status.

        A provider failure on one license is logged and counted; the run
        continues with the next one.
        """
        result = SyncLicenseStatusesResult(dry_run=command.dry_run)
        licenses = await self.license_repository.find_by_status(
            LicenseStatus.ACTIVE, limit=command.limit
        )

        for license in licenses:
            if not license.subscription_id:
                continue
            result.checked += 1
            try:
                subscription = await self.billing_gateway.get_subscription(
                    license.subscription_id
                )
            except BillingProviderError as e:
                logger.error("Status sync failed for user %s: %s", license.user_id, e)
                result.failed += 1
                continue

            if command.dry_run:
                if subscription.license_status != license.status:
                    result.changed += 1
                continue

            if await self.lifecycle_manager.apply_subscription_status(
                license.user_id, subscription.status
            ):
                result.changed += 1

        logger.info(
            "License status sync: checked=%s changed=%s failed=%s dry_run=%s",
            result.checked,
            result.changed,
            result.failed,
            result.dry_run,
        )
        return result
