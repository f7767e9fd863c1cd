"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    The store is the only shared mutable state of the service: upsert
    must be atomic per user id and the customer index must agree with
    the primary table after every committed write.
    """

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> Optional[License]:
        """
        Find the license of a user.

        Args:
            user_id: Client identity

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_license_key(self, license_key: str) -> Optional[License]:
        """
        Find a license by its issued key.

        Args:
            license_key: License key string

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_user_id_by_customer_id(self, customer_id: str) -> Optional[str]:
        """
        Point lookup of the user mapped to a billing customer.

        Args:
            customer_id: Billing provider customer id

        Returns:
            User id or None if the customer is unknown locally
        """
        pass

    @abstractmethod
    async def upsert(self, license: License) -> License:
        """
        Atomically create or update the record keyed by license.user_id.

        An existing record keeps its license key and created_at.

        Args:
            license: License entity to persist

        Returns:
            License entity as stored
        """
        pass

    @abstractmethod
    async def update_status(self, user_id: str, status: LicenseStatus) -> bool:
        """
        Set the status of an existing record.

        Args:
            user_id: Client identity
            status: New status

        Returns:
            True if a row changed, False if missing or already in that status
        """
        pass

    @abstractmethod
    async def find_by_status(self, status: LicenseStatus, limit: int = 100) -> List[License]:
        """
        List licenses in a status, oldest update first.

        Args:
            status: Status to filter on
            limit: Maximum number of records

        Returns:
            List of License entities
        """
        pass
