"""Tests for DashboardRepository."""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from smarta.client import SmartaClient
from smarta.exceptions import DataStoreError
from smarta.models import (
    Billing,
    Meter,
    MeterCreate,
    PaymentCreate,
    PaymentStatus,
    Property,
    PropertyCreate,
    ReadingCreate,
    Tenant,
)
from smarta.repositories.dashboard import RECENT_READINGS
from smarta.store import InMemoryTableStore


class TestGetStats:
    """Tests for get_stats."""

    def test_no_properties(self, client: SmartaClient) -> None:
        """Test an empty portfolio yields zeros."""
        stats = client.dashboard.get_stats()

        assert stats.total_properties == 0
        assert stats.active_tenants == 0
        assert stats.total_meters == 0
        assert stats.active_meters == 0
        assert stats.total_revenue == 0
        assert stats.meter_activity_rate == 0
        assert stats.recent_readings == []

    def test_counts(
        self, client: SmartaClient, sample_property: Property, sample_tenant: Tenant, sample_meter: Meter
    ) -> None:
        """Test counts and the activity rate over the portfolio."""
        client.meters.assign_to_tenant(sample_meter.id, sample_tenant.id)
        for number in ("WM-2", "WM-3"):
            client.meters.create(
                MeterCreate(
                    property_id=sample_property.id,
                    meter_number=number,
                    location="Store",
                    installation_date=date(2025, 1, 1),
                )
            )
        client.properties.create(PropertyCreate(name="Hillview", address="Ngong Road"))

        stats = client.dashboard.get_stats()

        assert stats.total_properties == 2
        assert stats.active_tenants == 1
        assert stats.total_meters == 3
        assert stats.active_meters == 1
        assert stats.meter_activity_rate == 33

    def test_property_without_meters(self, client: SmartaClient, sample_property: Property) -> None:
        stats = client.dashboard.get_stats()

        assert stats.total_properties == 1
        assert stats.total_meters == 0
        assert stats.meter_activity_rate == 0

    def test_revenue_counts_completed_payments(
        self, client: SmartaClient, store: InMemoryTableStore, sample_bill: Billing
    ) -> None:
        """Test pending payments are left out of revenue."""
        client.payments.create_manual(
            PaymentCreate(billing_id=sample_bill.id, tenant_id=sample_bill.tenant_id, amount=Decimal("1500.50"))
        )
        store.insert(
            "payments",
            {
                "billing_id": sample_bill.id,
                "tenant_id": sample_bill.tenant_id,
                "amount": Decimal("500.00"),
                "payment_method": "mpesa",
                "payment_status": PaymentStatus.PENDING.value,
                "payment_reference": "PAY_PENDING",
            },
        )

        assert client.dashboard.get_stats().total_revenue == Decimal("1500.50")

    def test_recent_readings_limited(self, client: SmartaClient, sample_meter: Meter) -> None:
        """Test only the latest readings are returned, latest first."""
        start = date(2025, 1, 1)
        for month in range(RECENT_READINGS + 2):
            client.readings.create(
                ReadingCreate(
                    meter_id=sample_meter.id,
                    reading_value=Decimal(month * 10),
                    reading_date=start + timedelta(days=30 * month),
                )
            )

        readings = client.dashboard.get_stats().recent_readings

        assert len(readings) == RECENT_READINGS
        assert readings[0].reading_value == Decimal((RECENT_READINGS + 1) * 10)
        assert readings[0].meter.meter_number == "WM-000001"

    def test_scoped_to_landlord(
        self, client: SmartaClient, other_client: SmartaClient, sample_meter: Meter
    ) -> None:
        stats = other_client.dashboard.get_stats()

        assert stats.total_properties == 0
        assert stats.total_meters == 0

    def test_failed_read_raises(
        self, client: SmartaClient, store: InMemoryTableStore, sample_meter: Meter
    ) -> None:
        """Test a failing concurrent read fails the whole call."""
        real_select = store.select

        def failing_select(query):
            if query.table == "meter_readings":
                raise DataStoreError("timeout")
            return real_select(query)

        with patch.object(store, "select", side_effect=failing_select):
            with pytest.raises(DataStoreError, match="timeout"):
                client.dashboard.get_stats()
