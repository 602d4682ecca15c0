"""Aggregate statistics over fetched records.

All functions are pure reductions over lists the repositories already
fetched; nothing derived here is persisted.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from smarta.charges import round_currency
from smarta.models import (
    Meter,
    MeterStats,
    MeterStatus,
    Payment,
    PaymentStats,
    PaymentStatus,
    Tenant,
    TenantStatus,
)

ZERO = Decimal("0")


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    ratio = Decimal(part) * 100 / Decimal(whole)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def meter_activity_rate(active_meters: int, total_meters: int) -> int:
    """Share of meters that are active, in percent."""
    return percentage(active_meters, total_meters)


def occupancy_rate(active_tenants: int, total_units: int) -> int:
    """Share of a property's units with an active tenant, in percent."""
    return percentage(active_tenants, total_units)


def summarize_payments(
    payments: Iterable[Payment],
    now: datetime,
    window_days: int = 30,
) -> PaymentStats:
    """Summarize payments into revenue figures.

    Parameters
    ----------
    payments : Iterable[Payment]
        Every payment visible to the landlord.
    now : datetime
        End of the trailing window.
    window_days : int
        Length of the trailing window.

    Returns
    -------
    PaymentStats
        ``average_payment`` divides all-time completed revenue by the number
        of payments created in the window, and is 0 when there are none.
    """
    window_start = now - timedelta(days=window_days)
    previous_start = window_start - timedelta(days=window_days)

    total_revenue = ZERO
    pending = ZERO
    completed_in_window = ZERO
    completed_previous = ZERO
    transactions_in_window = 0

    for payment in payments:
        created = payment.created_at
        in_window = created is not None and created >= window_start
        if in_window:
            transactions_in_window += 1

        if payment.payment_status == PaymentStatus.COMPLETED:
            total_revenue += payment.amount
            if in_window:
                completed_in_window += payment.amount
            elif created is not None and created >= previous_start:
                completed_previous += payment.amount
        elif payment.payment_status == PaymentStatus.PENDING:
            pending += payment.amount

    if transactions_in_window:
        average = round_currency(total_revenue / transactions_in_window)
    else:
        average = ZERO

    if completed_previous:
        growth = round_currency((completed_in_window - completed_previous) * 100 / completed_previous)
    else:
        growth = ZERO

    return PaymentStats(
        total_revenue=total_revenue,
        pending_payments=pending,
        completed_payments=completed_in_window,
        average_payment=average,
        monthly_growth=growth,
        total_transactions=transactions_in_window,
    )


def summarize_meters(meters: Iterable[Meter]) -> MeterStats:
    """Count meters by status and assignment."""
    stats = MeterStats()
    for meter in meters:
        stats.total += 1
        if meter.status == MeterStatus.ACTIVE:
            stats.connected += 1
        else:
            stats.disconnected += 1
        if meter.status == MeterStatus.AVAILABLE:
            stats.available += 1
        elif meter.status == MeterStatus.MAINTENANCE:
            stats.maintenance += 1
        if meter.tenant_id:
            stats.assigned += 1
    return stats


def count_tenants_by_status(tenants: Iterable[Tenant]) -> dict[TenantStatus, int]:
    """Count tenants per status; every status is present."""
    counts = {status: 0 for status in TenantStatus}
    for tenant in tenants:
        counts[tenant.status] += 1
    return counts
