"""
Django management command to re-align licenses with Stripe.

Heals licenses whose subscription events were dropped or lost; run it
periodically (cron, or the Celery beat schedule).
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from billing.application.commands.sync_license_statuses import SyncLicenseStatusesCommand
from billing.infrastructure.factories import build_sync_license_statuses_handler


class Command(BaseCommand):
    """Command to sync license statuses from subscriptions."""

    help = "Re-read each active license's subscription and apply its status"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - report changes without writing them",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=100,
            help="Maximum number of licenses to check",
        )

    def handle(self, *args, **options):
        handler = build_sync_license_statuses_handler()
        result = async_to_sync(handler.handle)(
            SyncLicenseStatusesCommand(limit=options["limit"], dry_run=options["dry_run"])
        )

        if result.dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - No changes were made"))
        self.stdout.write(
            f"Checked {result.checked} license(s): "
            f"{result.changed} changed, {result.failed} failed"
        )
        if result.failed:
            self.stdout.write(self.style.ERROR("Some subscriptions could not be read"))
        else:
            self.stdout.write(self.style.SUCCESS("License status sync complete"))
