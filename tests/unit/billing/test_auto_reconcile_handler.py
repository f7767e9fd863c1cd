"""
Unit tests for AutoReconcileHandler.
"""
import pytest

from billing.application.commands.auto_reconcile import AutoReconcileCommand
from billing.application.dto.billing_dto import (
    CUSTOMER_LICENSED_TO_ANOTHER_USER,
    NOT_SUBSCRIPTION_SESSION,
    PAYMENT_NOT_COMPLETED,
)
from billing.application.handlers.auto_reconcile_handler import AutoReconcileHandler
from core.domain.value_objects import LicenseStatus


@pytest.fixture
def handler(fake_gateway, memory_repository, lifecycle_manager):
    """Fixture for AutoReconcileHandler."""
    return AutoReconcileHandler(fake_gateway, memory_repository, lifecycle_manager)


class TestAutoReconcileHandler:
    """Tests for license creation from a checkout session."""

    @pytest.mark.asyncio
    async def test_creates_license(self, handler, fake_gateway, memory_repository):
        """Test a paid subscription session yields an active license."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", client_reference_id="U1")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_1", user_id="U1"))

        assert result.eligible is True
        assert result.already_existed is False
        assert result.license.status == LicenseStatus.ACTIVE
        assert memory_repository.records["U1"].customer_id == "C1"

    @pytest.mark.asyncio
    async def test_existing_license_returned(self, handler, fake_gateway, lifecycle_manager):
        """Test an entitled user gets the stored license without a provider call."""
        stored = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_1", user_id="U1"))

        assert result.already_existed is True
        assert result.license.license_key == stored.license_key
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_unpaid_session(self, handler, fake_gateway, memory_repository):
        """Test unpaid sessions are not eligible."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session(
            "cs_1", subscription_id="S1", client_reference_id="U1", payment_status="unpaid"
        )

        result = await handler.handle(AutoReconcileCommand(session_id="cs_1", user_id="U1"))

        assert result.eligible is False
        assert result.reason == PAYMENT_NOT_COMPLETED
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_payment_mode_session(self, handler, fake_gateway):
        """Test one-off payment sessions are not eligible."""
        fake_gateway.add_session("cs_1", client_reference_id="U1", mode="payment")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_1", user_id="U1"))

        assert result.reason == NOT_SUBSCRIPTION_SESSION

    @pytest.mark.asyncio
    async def test_session_of_another_user(self, handler, fake_gateway, memory_repository):
        """Test a session id cannot be replayed by a different user."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", client_reference_id="U1")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_1", user_id="U2"))

        assert result.eligible is False
        assert "another user" in result.reason
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_inactive_subscription(self, handler, fake_gateway):
        """Test sessions whose subscription is no longer active are not eligible."""
        fake_gateway.add_subscription("S1", "C1", status="past_due")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", client_reference_id="U1")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_1", user_id="U1"))

        assert result.reason == "Subscription status is past_due, not active"

    @pytest.mark.asyncio
    async def test_uncorrelated_session_of_licensed_customer(
        self, handler, fake_gateway, lifecycle_manager, memory_repository
    ):
        """Test a session without correlation cannot hand another payer's subscription to a new user."""
        owner_license = await lifecycle_manager.create_or_get_license("U_old", "C1", "S1")
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_legacy", subscription_id="S1", customer_id="C1")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_legacy", user_id="U_new"))

        assert result.eligible is False
        assert result.reason == CUSTOMER_LICENSED_TO_ANOTHER_USER
        assert "U_new" not in memory_repository.records
        assert [l.user_id for l in memory_repository.records.values() if l.customer_id == "C1"] == ["U_old"]
        assert memory_repository.records["U_old"].license_key == owner_license.license_key

    @pytest.mark.asyncio
    async def test_returning_payer_reuses_own_customer(self, handler, fake_gateway, lifecycle_manager):
        """Test a lapsed user re-subscribing with the same customer keeps the key."""
        stored = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")
        await lifecycle_manager.set_status("U1", LicenseStatus.CANCELED)
        fake_gateway.add_subscription("S2", "C1")
        fake_gateway.add_session("cs_2", subscription_id="S2", customer_id="C1", client_reference_id="U1")

        result = await handler.handle(AutoReconcileCommand(session_id="cs_2", user_id="U1"))

        assert result.eligible is True
        assert result.license.license_key == stored.license_key
        assert result.license.status == LicenseStatus.ACTIVE
