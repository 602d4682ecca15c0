"""Tests for aggregate statistics."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from smarta.models import (
    Meter,
    MeterStatus,
    MeterType,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Tenant,
    TenantStatus,
)
from smarta.stats import (
    count_tenants_by_status,
    meter_activity_rate,
    occupancy_rate,
    percentage,
    summarize_meters,
    summarize_payments,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _payment(amount: str, status: PaymentStatus, days_ago: int) -> Payment:
    return Payment(
        id=f"pay-{amount}-{days_ago}",
        billing_id="bill-1",
        tenant_id="tenant-1",
        amount=Decimal(amount),
        payment_method=PaymentMethod.MPESA,
        payment_status=status,
        payment_reference=f"PAY_{amount}_{days_ago}",
        created_at=NOW - timedelta(days=days_ago),
    )


def _meter(status: MeterStatus, tenant_id: str | None = None) -> Meter:
    return Meter(
        id="m",
        property_id="p",
        meter_number="WM-1",
        meter_type=MeterType.WATER,
        location="Unit",
        installation_date=date(2025, 1, 1),
        status=status,
        tenant_id=tenant_id,
    )


class TestPercentage:
    """Tests for whole-number percentages."""

    @pytest.mark.parametrize(
        "part,whole,expected",
        [(0, 0, 0), (5, 0, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 200, 1), (1, 201, 0), (4, 4, 100)],
    )
    def test_percentage(self, part: int, whole: int, expected: int) -> None:
        """Test halves round up and an empty whole gives 0."""
        assert percentage(part, whole) == expected

    def test_meter_activity_rate(self) -> None:
        """Test round(active / total * 100), 0 for no meters."""
        assert meter_activity_rate(3, 4) == 75
        assert meter_activity_rate(0, 0) == 0

    def test_occupancy_rate(self) -> None:
        assert occupancy_rate(5, 6) == 83
        assert occupancy_rate(2, 0) == 0


class TestSummarizePayments:
    """Tests for summarize_payments."""

    def test_empty(self) -> None:
        """Test no payments yields zeros."""
        stats = summarize_payments([], NOW)

        assert stats.total_revenue == 0
        assert stats.average_payment == 0
        assert stats.total_transactions == 0
        assert stats.monthly_growth == 0

    def test_totals(self) -> None:
        payments = [
            _payment("1000", PaymentStatus.COMPLETED, 2),
            _payment("500", PaymentStatus.COMPLETED, 10),
            _payment("300", PaymentStatus.PENDING, 1),
            _payment("200", PaymentStatus.FAILED, 3),
            _payment("700", PaymentStatus.COMPLETED, 45),
        ]

        stats = summarize_payments(payments, NOW)

        assert stats.total_revenue == Decimal("2200")
        assert stats.pending_payments == Decimal("300")
        assert stats.completed_payments == Decimal("1500")
        assert stats.total_transactions == 4

    def test_average_uses_all_time_revenue_over_window_count(self) -> None:
        """Test average = total revenue / transactions in the window."""
        payments = [
            _payment("1000", PaymentStatus.COMPLETED, 5),
            _payment("2000", PaymentStatus.COMPLETED, 40),
        ]

        stats = summarize_payments(payments, NOW)

        assert stats.total_transactions == 1
        assert stats.average_payment == Decimal("3000.00")

    def test_average_zero_without_recent_transactions(self) -> None:
        stats = summarize_payments([_payment("2000", PaymentStatus.COMPLETED, 40)], NOW)

        assert stats.total_revenue == Decimal("2000")
        assert stats.average_payment == 0

    def test_average_rounds_to_cents(self) -> None:
        payments = [_payment("100", PaymentStatus.COMPLETED, d) for d in (1, 2, 3)]
        payments[1].payment_status = PaymentStatus.PENDING

        stats = summarize_payments(payments, NOW)

        assert stats.average_payment == Decimal("66.67")

    def test_monthly_growth(self) -> None:
        """Test growth compares the window with the one before it."""
        payments = [
            _payment("1500", PaymentStatus.COMPLETED, 5),
            _payment("1000", PaymentStatus.COMPLETED, 35),
            _payment("9999", PaymentStatus.COMPLETED, 90),
        ]

        stats = summarize_payments(payments, NOW)

        assert stats.monthly_growth == Decimal("50.00")

    def test_custom_window(self) -> None:
        payments = [_payment("100", PaymentStatus.COMPLETED, 5), _payment("100", PaymentStatus.COMPLETED, 10)]

        stats = summarize_payments(payments, NOW, window_days=7)

        assert stats.total_transactions == 1
        assert stats.completed_payments == Decimal("100")
        assert stats.monthly_growth == 0


class TestSummarizeMeters:
    """Tests for summarize_meters."""

    def test_counts(self) -> None:
        meters = [
            _meter(MeterStatus.ACTIVE, "t1"),
            _meter(MeterStatus.ACTIVE, "t2"),
            _meter(MeterStatus.AVAILABLE),
            _meter(MeterStatus.MAINTENANCE),
            _meter(MeterStatus.INACTIVE),
        ]

        stats = summarize_meters(meters)

        assert stats.total == 5
        assert stats.connected == 2
        assert stats.disconnected == 3
        assert stats.available == 1
        assert stats.maintenance == 1
        assert stats.assigned == 2


class TestCountTenantsByStatus:
    """Tests for count_tenants_by_status."""

    def test_every_status_present(self) -> None:
        tenant = Tenant(
            id="t",
            property_id="p",
            unit_number="A1",
            lease_start_date=date(2026, 1, 1),
            lease_end_date=date(2026, 12, 31),
            monthly_rent=Decimal("1"),
            status=TenantStatus.PENDING,
        )

        counts = count_tenants_by_status([tenant])

        assert counts == {TenantStatus.ACTIVE: 0, TenantStatus.INACTIVE: 0, TenantStatus.PENDING: 1}
