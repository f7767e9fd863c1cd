"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
"""
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import transaction
from django.utils import timezone

from core.domain.value_objects import LicenseStatus
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_repository import LicenseRepository


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Serializes upserts through the primary key (update_or_create)
    3. Implements repository interface
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            user_id=model.user_id,
            license_key=model.license_key,
            customer_id=model.customer_id,
            subscription_id=model.subscription_id,
            status=LicenseStatus(model.status),
            expires_at=model.expires_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @sync_to_async
    def find_by_user_id(self, user_id: str) -> Optional[License]:
        """
        Find the license of a user.

        Args:
            user_id: Client identity

        Returns:
            License entity or None if not found
        """
        try:
            return self._to_domain(LicenseModel.objects.get(user_id=user_id))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_license_key(self, license_key: str) -> Optional[License]:
        """
        Find a license by its issued key.

        Args:
            license_key: License key string

        Returns:
            License entity or None if not found
        """
        try:
            return self._to_domain(LicenseModel.objects.get(license_key=license_key))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_user_id_by_customer_id(self, customer_id: str) -> Optional[str]:
        """
        Point lookup through the customer index.

        If several users share a customer, the earliest record wins.

        Args:
            customer_id: Billing provider customer id

        Returns:
            User id or None
        """
        if not customer_id:
            return None
        return (
            LicenseModel.objects.filter(customer_id=customer_id)
            .order_by("created_at")
            .values_list("user_id", flat=True)
            .first()
        )

    @sync_to_async
    def upsert(self, license: License) -> License:
        """
        Create or update the record keyed by user id.

        update_or_create locks the row and retries the read when a
        concurrent insert wins, so the first stored key is kept.

        Args:
            license: License entity to persist

        Returns:
            License entity as stored
        """
        mutable = {
            "customer_id": license.customer_id,
            "subscription_id": license.subscription_id,
            "status": license.status.value,
            "expires_at": license.expires_at,
            "updated_at": license.updated_at,
        }
        with transaction.atomic():
            model, _ = LicenseModel.objects.update_or_create(
                user_id=license.user_id,
                defaults=mutable,
                create_defaults={
                    **mutable,
                    "license_key": license.license_key,
                    "created_at": license.created_at,
                },
            )
        return self._to_domain(model)

    @sync_to_async
    def update_status(self, user_id: str, status: LicenseStatus) -> bool:
        """
        Set the status of an existing record.

        Args:
            user_id: Client identity
            status: New status

        Returns:
            True if a row changed
        """
        updated = (
            LicenseModel.objects.filter(user_id=user_id)
            .exclude(status=status.value)
            .update(status=status.value, updated_at=timezone.now())
        )
        return updated > 0

    @sync_to_async
    def find_by_status(self, status: LicenseStatus, limit: int = 100) -> List[License]:
        """
        List licenses in a status, least recently updated first.

        Args:
            status: Status to filter on
            limit: Maximum number of records

        Returns:
            List of License entities
        """
        models = LicenseModel.objects.filter(status=status.value).order_by("updated_at")[:limit]
        return [self._to_domain(model) for model in models]
