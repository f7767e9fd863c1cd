"""
Unit tests for ReconciliationResolver.
"""
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from billing.application.dto.billing_dto import (
    DIRECT_LOOKUP,
    EXISTING_CUSTOMER,
    LICENSE_KEY,
    SESSION_CORRELATION,
    SESSION_SCAN,
    SUBSCRIPTION_SCAN,
)
from billing.application.services.reconciliation_resolver import ReconciliationResolver
from core.domain.exceptions import BillingProviderError
from core.domain.value_objects import LicenseStatus


@pytest.fixture
def resolver(memory_repository, fake_gateway, lifecycle_manager):
    """Fixture for ReconciliationResolver over in-memory fakes."""
    return ReconciliationResolver(memory_repository, fake_gateway, lifecycle_manager)


class TestLocalStrategies:
    """Tests for lookups answered by the store."""

    @pytest.mark.asyncio
    async def test_direct_lookup(self, resolver, lifecycle_manager, fake_gateway):
        """Test an entitled local record wins without calling the provider."""
        stored = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")

        resolution = await resolver.resolve_license("U1")

        assert resolution.strategy == DIRECT_LOOKUP
        assert resolution.license.license_key == stored.license_key
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_license_key(self, resolver, lifecycle_manager, fake_gateway):
        """Test lookup by key alone never reaches the provider."""
        stored = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")

        resolution = await resolver.resolve_license_by_key(stored.license_key)

        assert resolution.strategy == LICENSE_KEY
        assert resolution.license.user_id == "U1"
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_unknown_key_absent(self, resolver, fake_gateway):
        """Test an unknown key resolves to nothing."""
        resolution = await resolver.resolve_license_by_key("fn_0_missing")

        assert resolution.found is False
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_expired_record_falls_through(
        self, resolver, lifecycle_manager, memory_repository, fake_gateway
    ):
        """Test an expired local record does not short-circuit the provider strategies."""
        stored = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")
        memory_repository.records["U1"] = replace(
            stored, expires_at=datetime.now(timezone.utc) - timedelta(days=1)
        )

        resolution = await resolver.resolve_license("U1")

        assert resolution.found is False
        assert "checkout_session.list" in fake_gateway.calls


class TestProviderStrategies:
    """Tests for discovery through the billing provider."""

    @pytest.mark.asyncio
    async def test_session_correlation(self, resolver, fake_gateway, memory_repository):
        """Test a paid session correlated to the user creates the license."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", client_reference_id="U1")

        resolution = await resolver.resolve_license("U1")

        assert resolution.strategy == SESSION_CORRELATION
        assert resolution.license.status == LicenseStatus.ACTIVE
        assert memory_repository.records["U1"].customer_id == "C1"

    @pytest.mark.asyncio
    async def test_second_call_uses_direct_lookup_with_same_key(self, resolver, fake_gateway):
        """Test a resolved license is served locally afterwards with the same key."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", client_reference_id="U1")

        first = await resolver.resolve_license("U1")
        fake_gateway.calls.clear()
        second = await resolver.resolve_license("U1")

        assert second.strategy == DIRECT_LOOKUP
        assert second.license.license_key == first.license.license_key
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_session_scan(self, resolver, fake_gateway):
        """Test sessions naming the user only in metadata are found by scanning."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", metadata={"userId": "U1"})

        resolution = await resolver.resolve_license("U1")

        assert resolution.strategy == SESSION_SCAN

    @pytest.mark.asyncio
    async def test_correlated_session_behind_newer_traffic(self, resolver, fake_gateway):
        """Test an older correlated session is found behind newer sessions of other users."""
        fake_gateway.add_subscription("S1", "C1")
        fake_gateway.add_session("cs_old", subscription_id="S1", customer_id="C1", client_reference_id="U1")
        for n in range(25):
            fake_gateway.add_subscription(f"S_other_{n}", f"C_other_{n}")
            fake_gateway.add_session(
                f"cs_other_{n}",
                subscription_id=f"S_other_{n}",
                customer_id=f"C_other_{n}",
                client_reference_id=f"OTHER{n}",
                payment_status="unpaid",
            )

        resolution = await resolver.resolve_license("U1")

        assert resolution.strategy == SESSION_CORRELATION
        assert resolution.license.subscription_id == "S1"
        assert fake_gateway.calls.count("checkout_session.list") == 1

    @pytest.mark.asyncio
    async def test_subscription_scan(self, resolver, fake_gateway):
        """Test an active subscription carrying the user id is found last."""
        fake_gateway.add_subscription("S1", "C1", metadata={"userId": "U1"})

        resolution = await resolver.resolve_license("U1")

        assert resolution.strategy == SUBSCRIPTION_SCAN
        assert resolution.license.subscription_id == "S1"

    @pytest.mark.asyncio
    async def test_paid_session_preferred(self, resolver, fake_gateway):
        """Test paid sessions are tried before unpaid ones."""
        fake_gateway.add_subscription("S_paid", "C1")
        fake_gateway.add_subscription("S_open", "C2")
        fake_gateway.add_session("cs_paid", subscription_id="S_paid", customer_id="C1", client_reference_id="U1")
        fake_gateway.add_session(
            "cs_open",
            subscription_id="S_open",
            customer_id="C2",
            client_reference_id="U1",
            payment_status="unpaid",
        )

        resolution = await resolver.resolve_license("U1")

        assert resolution.license.subscription_id == "S_paid"

    @pytest.mark.asyncio
    async def test_canceled_subscription_not_entitling(self, resolver, fake_gateway, memory_repository):
        """Test sessions whose subscription ended grant nothing."""
        fake_gateway.add_subscription("S1", "C1", status="canceled")
        fake_gateway.add_session("cs_1", subscription_id="S1", customer_id="C1", client_reference_id="U1")

        resolution = await resolver.resolve_license("U1")

        assert resolution.found is False
        assert memory_repository.records == {}

    @pytest.mark.asyncio
    async def test_nothing_found(self, resolver):
        """Test a user with no payment resolves to absent."""
        resolution = await resolver.resolve_license("U9")

        assert resolution.found is False
        assert resolution.strategy is None

    @pytest.mark.asyncio
    async def test_customer_owned_by_other_user(self, resolver, fake_gateway, lifecycle_manager, memory_repository):
        """Test a payer already licensed to another user never gets a second license."""
        owner_license = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")
        fake_gateway.add_subscription("S1", "C1", metadata={"userId": "U2"})

        resolution = await resolver.resolve_license("U2")

        assert resolution.strategy == EXISTING_CUSTOMER
        assert resolution.license.license_key == owner_license.license_key
        assert "U2" not in memory_repository.records

    @pytest.mark.asyncio
    async def test_reactivates_canceled_record(self, resolver, fake_gateway, lifecycle_manager):
        """Test a canceled local record is re-activated with its key on a new subscription."""
        stored = await lifecycle_manager.create_or_get_license("U1", "C1", "S1")
        await lifecycle_manager.set_status("U1", LicenseStatus.CANCELED)
        fake_gateway.add_subscription("S2", "C1")
        fake_gateway.add_session("cs_2", subscription_id="S2", customer_id="C1", client_reference_id="U1")

        resolution = await resolver.resolve_license("U1")

        assert resolution.strategy == SESSION_CORRELATION
        assert resolution.license.license_key == stored.license_key
        assert resolution.license.status == LicenseStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, resolver, fake_gateway):
        """Test provider outages are reported, not turned into 'no license'."""
        fake_gateway.unavailable = True

        with pytest.raises(BillingProviderError):
            await resolver.resolve_license("U1")


class TestFindCustomerId:
    """Tests for customer lookup used by the billing portal."""

    @pytest.mark.asyncio
    async def test_canceled_record_still_has_customer(self, resolver, lifecycle_manager, fake_gateway):
        """Test lapsed subscribers can still reach the portal."""
        await lifecycle_manager.create_or_get_license("U1", "C1", "S1")
        await lifecycle_manager.set_status("U1", LicenseStatus.CANCELED)

        assert await resolver.find_customer_id("U1") == "C1"
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, resolver):
        """Test users with no payment have no customer."""
        assert await resolver.find_customer_id("U9") is None
