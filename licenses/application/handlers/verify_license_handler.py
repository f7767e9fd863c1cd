"""
VerifyLicenseHandler.

Store fast path: never consults the billing provider.
"""
import secrets

from licenses.application.dto.license_dto import LicenseSnapshotDTO, LicenseVerificationDTO
from licenses.application.queries.verify_license import VerifyLicenseQuery
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.ports.license_repository import LicenseRepository


class VerifyLicenseHandler:
    """Handler for VerifyLicenseQuery."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repository."""
        self.license_repository = license_repository

    async def handle(self, query: VerifyLicenseQuery) -> LicenseVerificationDTO:
        """
        Handle verify license query.

        Args:
            query: VerifyLicenseQuery

        Returns:
            LicenseVerificationDTO; valid only if the key matches the
            user's record and the record is entitled
        """
        snapshot = await LicenseCacheService.get_snapshot(query.user_id)
        if snapshot is None:
            license = await self.license_repository.find_by_user_id(query.user_id)
            if license is None:
                return LicenseVerificationDTO.invalid()
            snapshot = LicenseSnapshotDTO.from_license(license)
            await LicenseCacheService.set_snapshot(snapshot)

        key_matches = secrets.compare_digest(
            snapshot.license_key.encode(), query.license_key.encode()
        )
        if not key_matches or not snapshot.is_entitled:
            return LicenseVerificationDTO.invalid()
        return LicenseVerificationDTO(valid=True, is_pro=True)
