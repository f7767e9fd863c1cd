"""
AutoReconcileHandler.

Creates a license straight from a checkout session, for clients that
return from checkout before the webhook has been delivered.
"""
import logging

from billing.application.commands.auto_reconcile import AutoReconcileCommand
from billing.application.dto.billing_dto import (
    CUSTOMER_LICENSED_TO_ANOTHER_USER,
    NOT_SUBSCRIPTION_SESSION,
    PAYMENT_NOT_COMPLETED,
    AutoReconcileResult,
)
from billing.ports.billing_gateway import BillingGateway
from licenses.domain.services import LicenseLifecycleManager
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class AutoReconcileHandler:
    """Handler for AutoReconcileCommand."""

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

    async def handle(self, command: AutoReconcileCommand) -> AutoReconcileResult:
        """
        Handle auto reconcile command.

        Args:
            command: AutoReconcileCommand

        Returns:
            AutoReconcileResult with the license, or the not-eligible reason

        Raises:
            BillingProviderError: If the provider cannot be reached
        """
        existing = await self.license_repository.find_by_user_id(command.user_id)
        if self.lifecycle_manager.is_entitled(existing):
            return AutoReconcileResult(license=existing, already_existed=True)

        session = await self.billing_gateway.get_checkout_session(command.session_id)
        if not session.is_paid:
            return AutoReconcileResult.not_eligible(PAYMENT_NOT_COMPLETED)
        if not session.is_subscription or not session.subscription_id:
            return AutoReconcileResult.not_eligible(NOT_SUBSCRIPTION_SESSION)

        owner = session.correlated_user_id
        if owner and owner != command.user_id:
            logger.warning(
                "Session %s belongs to user %s, not %s", session.id, owner, command.user_id
            )
            return AutoReconcileResult.not_eligible("Session belongs to another user")

        subscription = await self.billing_gateway.get_subscription(session.subscription_id)
        if not subscription.is_entitling:
            return AutoReconcileResult.not_eligible(
                f"Subscription status is {subscription.status}, not active"
            )

        customer_id = self.billing_gateway.get_customer_id(subscription) or session.customer_id
        payer = await self.license_repository.find_user_id_by_customer_id(customer_id)
        if payer and payer != command.user_id:
            logger.warning(
                "Customer %s from session %s is already licensed to user %s, not %s",
                customer_id,
                session.id,
                payer,
                command.user_id,
            )
            return AutoReconcileResult.not_eligible(CUSTOMER_LICENSED_TO_ANOTHER_USER)

        license = await self.lifecycle_manager.create_or_get_license(
            command.user_id, customer_id, subscription.id
        )
        updated = await self.lifecycle_manager.apply_subscription_status(
            command.user_id, subscription.status
        )
        logger.info(
            "License auto-created for user %s from session %s", command.user_id, session.id
        )
        return AutoReconcileResult(license=updated or license)
