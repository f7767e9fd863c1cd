"""
SyncLicenseStatusesCommand.

Command to re-align stored licenses with their subscriptions.
"""
from dataclasses import dataclass


@dataclass
class SyncLicenseStatusesCommand:
    """Sync up to limit active licenses, least recently updated first."""

    limit: int = 100
    dry_run: bool = False
