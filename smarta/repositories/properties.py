"""Property repository."""

import logging
from typing import Any

from smarta.exceptions import EntityNotFoundError, ValidationError
from smarta.models import MeterStatus, Property, PropertyCreate, PropertyOverview, TenantStatus
from smarta.repositories.base import BaseRepository, fan_out
from smarta.repositories.meters import MetersRepository
from smarta.repositories.tenants import TenantsRepository
from smarta.stats import occupancy_rate
from smarta.store.base import Query
from smarta.store.serialization import from_row, to_row

logger = logging.getLogger(__name__)


class PropertiesRepository(BaseRepository):
    """Properties owned by the session's landlord."""

    table = "properties"
    model = Property
    create_model = PropertyCreate

    def get_all(self) -> list[Property]:
        """Get the landlord's properties, newest first."""
        query = Query(self.table).eq("landlord_id", self.session.landlord_id).order("created_at", descending=True)
        return self._fetch(query)

    def get_by_id(self, property_id: str) -> Property | None:
        """Get one property, or None if it is missing or not the landlord's."""
        row = self.store.first(
            Query(self.table).eq("id", property_id).eq("landlord_id", self.session.landlord_id)
        )
        return from_row(Property, row) if row else None

    def create(self, data: PropertyCreate) -> Property:
        """Register a property for the landlord."""
        _validate(data.name, data.total_units)
        row = to_row(data)
        row["landlord_id"] = self.session.landlord_id
        stored = self.store.insert(self.table, row)
        logger.info("Property %s created: %s", stored["id"], data.name)
        return from_row(Property, stored)

    def update(self, property_id: str, **changes: Any) -> Property:
        """Update editable property fields."""
        self._require(self.table, property_id)
        if "name" in changes or "total_units" in changes:
            _validate(changes.get("name", "-"), changes.get("total_units", 0))
        return self._update(property_id, changes)

    def delete(self, property_id: str) -> None:
        """Delete a property; its tenants, meters and their history go with it."""
        self._require(self.table, property_id)
        self.store.delete(self.table, property_id)
        logger.info("Property %s deleted", property_id)

    def get_overview(self, property_id: str) -> PropertyOverview:
        """Get a property with its tenants, meters and occupancy.

        The three reads run concurrently.
        """
        tenants_repo = TenantsRepository(self.store, self.session, self.clock)
        meters_repo = MetersRepository(self.store, self.session, self.clock)
        prop, tenants, meters = fan_out(
            lambda: self.get_by_id(property_id),
            lambda: tenants_repo.get_by_property_id(property_id),
            lambda: meters_repo.get_by_property_id(property_id),
        )
        if prop is None:
            raise EntityNotFoundError(f"Property {property_id} not found")

        active_tenants = sum(1 for t in tenants if t.status == TenantStatus.ACTIVE)
        return PropertyOverview(
            property=prop,
            tenants=tenants,
            meters=meters,
            active_tenants=active_tenants,
            active_meters=sum(1 for m in meters if m.status == MeterStatus.ACTIVE),
            available_meters=sum(1 for m in meters if m.status == MeterStatus.AVAILABLE),
            occupancy_rate=occupancy_rate(active_tenants, prop.total_units),
        )


def _validate(name: str, total_units: int) -> None:
    if not name or not name.strip():
        raise ValidationError("Property name is required")
    if isinstance(total_units, bool) or not isinstance(total_units, int):
        raise ValidationError(f"total_units must be a whole number, got {total_units!r}")
    if total_units < 0:
        raise ValidationError(f"total_units must not be negative, got {total_units}")
