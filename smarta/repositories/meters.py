"""Meter repository and the meter assignment rules.

A meter is ``active`` exactly when a tenant is assigned to it:

- assigning a tenant forces ``active``;
- unassigning clears the tenant and forces ``available``, whatever the
  previous status was;
- ``maintenance`` and ``inactive`` are only ever set by an explicit
  status update.
"""

import logging
from typing import Any

from smarta.exceptions import InvalidEntityStateError, ValidationError
from smarta.models import Meter, MeterCreate, MeterStatus
from smarta.repositories.base import PROPERTY, TENANT, BaseRepository, parse_enum
from smarta.store.base import Query
from smarta.store.serialization import to_row

logger = logging.getLogger(__name__)


def status_for_assignment(tenant_id: str | None) -> MeterStatus:
    """Status implied by a meter's assignment."""
    return MeterStatus.ACTIVE if tenant_id else MeterStatus.AVAILABLE


class MetersRepository(BaseRepository):
    """Meters installed at the landlord's properties."""

    table = "meters"
    model = Meter
    create_model = MeterCreate
    extra_editable = ("status",)
    embeds = (PROPERTY, TENANT)

    def get_all(self) -> list[Meter]:
        """Get every meter with property and tenant, newest first."""
        property_ids = self._owned_property_ids()
        if not property_ids:
            return []
        return self._fetch(
            Query(self.table).in_("property_id", property_ids).order("created_at", descending=True)
        )

    def get_by_property_id(self, property_id: str) -> list[Meter]:
        """Get the meters of one property, ordered by meter number."""
        self._require("properties", property_id)
        return self._fetch(Query(self.table).eq("property_id", property_id).order("meter_number"))

    def get_available(self) -> list[Meter]:
        """Get unassigned meters in ``available`` status."""
        property_ids = self._owned_property_ids()
        if not property_ids:
            return []
        query = (
            Query(self.table)
            .in_("property_id", property_ids)
            .is_null("tenant_id")
            .eq("status", MeterStatus.AVAILABLE)
            .order("meter_number")
        )
        return self._fetch(query, embeds=(PROPERTY,))

    def create(self, data: MeterCreate) -> Meter:
        """Install a meter; it starts active if a tenant is given, else available."""
        self._require("properties", data.property_id)
        if data.tenant_id:
            self._require("tenants", data.tenant_id)
        if not data.meter_number:
            raise ValidationError("meter_number is required")

        row = to_row(data)
        row["status"] = status_for_assignment(data.tenant_id).value
        stored = self.store.insert(self.table, row)
        logger.info("Meter %s created (%s)", data.meter_number, row["status"])
        return self._fetch_one(stored["id"])

    def update(self, meter_id: str, **changes: Any) -> Meter:
        """Update editable meter fields.

        Changing ``tenant_id`` also sets the matching status unless the same
        update sets ``status`` explicitly.

        Raises
        ------
        InvalidEntityStateError
            If the result would be ``active`` without a tenant or
            ``available`` with one.
        """
        row = self._require(self.table, meter_id)
        if "property_id" in changes:
            self._require("properties", changes["property_id"])
        if "tenant_id" in changes:
            if changes["tenant_id"]:
                self._require("tenants", changes["tenant_id"])
            changes.setdefault("status", status_for_assignment(changes["tenant_id"]))
        if "status" in changes:
            changes["status"] = parse_enum(MeterStatus, changes["status"], "status")
            _check_assignment(meter_id, changes["status"], changes.get("tenant_id", row.get("tenant_id")))
        return self._update(meter_id, changes)

    def assign_to_tenant(self, meter_id: str, tenant_id: str) -> Meter:
        """Assign a meter to a tenant and mark it active.

        An existing assignment is overwritten.
        """
        row = self._require(self.table, meter_id)
        self._require("tenants", tenant_id)

        previous = row.get("tenant_id")
        if previous and previous != tenant_id:
            logger.info("Meter %s reassigned from tenant %s to %s", meter_id, previous, tenant_id)

        self.store.update(
            self.table, meter_id, {"tenant_id": tenant_id, "status": MeterStatus.ACTIVE.value}
        )
        logger.info("Meter %s assigned to tenant %s", meter_id, tenant_id)
        return self._fetch_one(meter_id)

    def unassign_from_tenant(self, meter_id: str) -> Meter:
        """Release a meter from its tenant and mark it available."""
        row = self._require(self.table, meter_id)
        if row.get("status") in (MeterStatus.MAINTENANCE.value, MeterStatus.INACTIVE.value):
            logger.warning("Meter %s released from %s status to available", meter_id, row["status"])

        self.store.update(
            self.table, meter_id, {"tenant_id": None, "status": MeterStatus.AVAILABLE.value}
        )
        logger.info("Meter %s unassigned", meter_id)
        return self._fetch_one(meter_id, embeds=(PROPERTY,))

    def delete(self, meter_id: str) -> None:
        """Delete a meter with its readings and bills."""
        self._require(self.table, meter_id)
        self.store.delete(self.table, meter_id)
        logger.info("Meter %s deleted", meter_id)


def _check_assignment(meter_id: str, status: MeterStatus, tenant_id: str | None) -> None:
    if status == MeterStatus.ACTIVE and not tenant_id:
        raise InvalidEntityStateError(f"Meter {meter_id} cannot be active without a tenant")
    if status == MeterStatus.AVAILABLE and tenant_id:
        raise InvalidEntityStateError(f"Meter {meter_id} is assigned to tenant {tenant_id} and cannot be available")
