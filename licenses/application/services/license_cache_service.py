"""
License cache service.

Caches the per-user license snapshot read by verification. Entries are
invalidated by the license event handlers on every activation and status
change, so the TTL only bounds staleness if an event is lost.
"""
import hashlib
import logging
from typing import Optional

from django.conf import settings

from core.infrastructure.cache_adapters import cache_adapter
from licenses.application.dto.license_dto import LicenseSnapshotDTO

logger = logging.getLogger(__name__)

# Cache TTL (in seconds)
CACHE_TTL_LICENSE_SNAPSHOT = 60


class LicenseCacheService:
    """Service for caching license snapshots."""

    @staticmethod
    def _snapshot_key(user_id: str) -> str:
        """Generate cache key for a user's license snapshot."""
        key_hash = hashlib.sha256(user_id.encode()).hexdigest()[:16]
        return f"license:snapshot:{key_hash}"

    @staticmethod
    async def get_snapshot(user_id: str) -> Optional[LicenseSnapshotDTO]:
        """
        Get cached license snapshot.

        Args:
            user_id: Client identity

        Returns:
            Cached LicenseSnapshotDTO or None
        """
        cached = await cache_adapter.get(LicenseCacheService._snapshot_key(user_id))
        if cached:
            try:
                return LicenseSnapshotDTO.from_dict(cached)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Error deserializing cached license snapshot: %s", e)
                return None
        return None

    @staticmethod
    async def set_snapshot(snapshot: LicenseSnapshotDTO, ttl: int = None) -> None:
        """
        Cache a license snapshot.

        Args:
            snapshot: LicenseSnapshotDTO to cache
            ttl: Time to live in seconds
        """
        timeout = ttl or getattr(settings, "LICENSE_CACHE_TTL", CACHE_TTL_LICENSE_SNAPSHOT)
        await cache_adapter.set(
            LicenseCacheService._snapshot_key(snapshot.user_id),
            snapshot.to_dict(),
            timeout=timeout,
        )

    @staticmethod
    async def invalidate_snapshot(user_id: str) -> None:
        """
        Invalidate a cached license snapshot.

        Args:
            user_id: Client identity
        """
        await cache_adapter.delete(LicenseCacheService._snapshot_key(user_id))
        logger.debug("Invalidated license snapshot cache for user %s", user_id)
