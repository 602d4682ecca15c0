"""Tenant repository."""

import logging
from typing import Any

from smarta.charges import to_amount
from smarta.exceptions import ValidationError
from smarta.models import MeterStatus, Tenant, TenantCreate
from smarta.repositories.base import PROPERTY, BaseRepository
from smarta.store.base import Query
from smarta.store.serialization import to_row

logger = logging.getLogger(__name__)


class TenantsRepository(BaseRepository):
    """Tenants of the landlord's properties."""

    table = "tenants"
    model = Tenant
    create_model = TenantCreate
    extra_editable = ("user_id",)
    embeds = (PROPERTY,)

    def get_all(self) -> list[Tenant]:
        """Get every tenant with their property, newest first."""
        property_ids = self._owned_property_ids()
        if not property_ids:
            return []
        return self._fetch(
            Query(self.table).in_("property_id", property_ids).order("created_at", descending=True)
        )

    def get_by_property_id(self, property_id: str) -> list[Tenant]:
        """Get the tenants of one property, ordered by unit number."""
        self._require("properties", property_id)
        return self._fetch(Query(self.table).eq("property_id", property_id).order("unit_number"))

    def create(self, data: TenantCreate) -> Tenant:
        """Register a tenant in a unit of one of the landlord's properties."""
        self._require("properties", data.property_id)
        if not data.unit_number:
            raise ValidationError("unit_number is required")
        _check_lease(data.lease_start_date, data.lease_end_date)

        row = to_row(data)
        row["monthly_rent"] = to_amount(data.monthly_rent, "monthly_rent")
        stored = self.store.insert(self.table, row)
        logger.info("Tenant %s created in unit %s", stored["id"], data.unit_number)
        return self._fetch_one(stored["id"])

    def update(self, tenant_id: str, **changes: Any) -> Tenant:
        """Update editable tenant fields."""
        row = self._require(self.table, tenant_id)
        if "property_id" in changes:
            self._require("properties", changes["property_id"])
        if "monthly_rent" in changes:
            changes["monthly_rent"] = to_amount(changes["monthly_rent"], "monthly_rent")
        if "lease_start_date" in changes or "lease_end_date" in changes:
            _check_lease(
                changes.get("lease_start_date", row["lease_start_date"]),
                changes.get("lease_end_date", row["lease_end_date"]),
            )
        return self._update(tenant_id, changes)

    def delete(self, tenant_id: str) -> None:
        """Delete a tenant, releasing any meters assigned to them."""
        self._require(self.table, tenant_id)
        with self.store.transaction():
            for meter in self.store.select(Query("meters").eq("tenant_id", tenant_id)):
                self.store.update(
                    "meters", meter["id"], {"tenant_id": None, "status": MeterStatus.AVAILABLE.value}
                )
            self.store.delete(self.table, tenant_id)
        logger.info("Tenant %s deleted", tenant_id)


def _check_lease(start: Any, end: Any) -> None:
    if start is None or end is None:
        raise ValidationError("lease_start_date and lease_end_date are required")
    if end < start:
        raise ValidationError(f"Lease ends ({end}) before it starts ({start})")
