"""Dashboard statistics."""

import logging
from typing import Any

from smarta.models import DashboardStats, MeterReading, MeterStatus, PaymentStatus, Property, TenantStatus
from smarta.repositories.base import METER, BaseRepository, fan_out
from smarta.stats import ZERO, meter_activity_rate
from smarta.store.base import Query

logger = logging.getLogger(__name__)

RECENT_READINGS = 10


class DashboardRepository(BaseRepository):
    """Headline figures for the landlord's portfolio."""

    table = "properties"
    model = Property

    def get_stats(self) -> DashboardStats:
        """Fetch properties, tenants, meters, readings and payments concurrently.

        If any read fails the whole call raises.
        """
        property_ids = self._owned_property_ids()
        if not property_ids:
            return DashboardStats(
                total_properties=0,
                active_tenants=0,
                total_meters=0,
                active_meters=0,
                total_revenue=ZERO,
                meter_activity_rate=0,
            )

        tenants, meters = fan_out(
            lambda: self.store.select(Query("tenants").in_("property_id", property_ids)),
            lambda: self.store.select(Query("meters").in_("property_id", property_ids)),
        )
        tenant_ids = [row["id"] for row in tenants]
        meter_ids = [row["id"] for row in meters]

        recent_readings, payments = fan_out(
            lambda: self._recent_readings(meter_ids),
            lambda: self._completed_payments(tenant_ids),
        )

        active_meters = sum(1 for row in meters if row["status"] == MeterStatus.ACTIVE.value)
        stats = DashboardStats(
            total_properties=len(property_ids),
            active_tenants=sum(1 for row in tenants if row["status"] == TenantStatus.ACTIVE.value),
            total_meters=len(meters),
            active_meters=active_meters,
            total_revenue=sum((row["amount"] for row in payments), ZERO),
            meter_activity_rate=meter_activity_rate(active_meters, len(meters)),
            recent_readings=recent_readings,
        )
        logger.debug(
            "Dashboard for landlord %s: %d properties, %d meters",
            self.session.landlord_id,
            stats.total_properties,
            stats.total_meters,
        )
        return stats

    def _recent_readings(self, meter_ids: list[str]) -> list[MeterReading]:
        if not meter_ids:
            return []
        query = (
            Query("meter_readings")
            .in_("meter_id", meter_ids)
            .order("reading_date", descending=True)
            .limit(RECENT_READINGS)
        )
        return self._hydrate(self.store.select(query), MeterReading, (METER,))

    def _completed_payments(self, tenant_ids: list[str]) -> list[dict[str, Any]]:
        if not tenant_ids:
            return []
        return self.store.select(
            Query("payments").in_("tenant_id", tenant_ids).eq("payment_status", PaymentStatus.COMPLETED)
        )
