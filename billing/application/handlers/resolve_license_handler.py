"""
ResolveLicenseHandler.
"""
from billing.application.dto.billing_dto import LicenseResolution
from billing.application.queries.resolve_license import ResolveLicenseQuery
from billing.application.services.reconciliation_resolver import ReconciliationResolver


class ResolveLicenseHandler:
    """Handler for ResolveLicenseQuery."""

    def __init__(self, resolver: ReconciliationResolver):
        """Initialize handler with the reconciliation resolver."""
        self.resolver = resolver

    async def handle(self, query: ResolveLicenseQuery) -> LicenseResolution:
        """
        Handle resolve license query.

        Args:
            query: ResolveLicenseQuery

        Returns:
            LicenseResolution (absent() when no entitlement exists)

        Raises:
            ValueError: If neither user id nor license key is given
        """
        if not query.user_id and not query.license_key:
            raise ValueError("userId or licenseKey is required")
        if query.user_id:
            return await self.resolver.resolve(user_id=query.user_id, license_key=query.license_key)
        return await self.resolver.resolve_license_by_key(query.license_key)
