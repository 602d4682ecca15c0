"""Base repository shared by all entity repositories."""

from __future__ import annotations

import logging
from abc import ABC
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, TypeVar

from smarta.exceptions import EntityNotFoundError, ValidationError
from smarta.models import Billing, Meter, Property, Session, Tenant
from smarta.store.base import Query, TableStore
from smarta.store.serialization import from_row, serialize_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Embed:
    """Related record to embed in query results.

    ``column`` is the foreign key on the fetched row; the referenced row of
    ``table`` is converted to ``model`` and set as attribute ``name``.
    Nested embeds are applied to the related record in turn.
    """

    name: str
    table: str
    column: str
    model: type
    embeds: tuple[Embed, ...] = ()


PROPERTY = Embed("property", "properties", "property_id", Property)
TENANT = Embed("tenant", "tenants", "tenant_id", Tenant)
TENANT_WITH_PROPERTY = Embed("tenant", "tenants", "tenant_id", Tenant, (PROPERTY,))
METER = Embed("meter", "meters", "meter_id", Meter)
METER_WITH_OWNERS = Embed("meter", "meters", "meter_id", Meter, (PROPERTY, TENANT))
BILLING = Embed("billing", "billing", "billing_id", Billing)
BILLING_WITH_TENANT = Embed("billing", "billing", "billing_id", Billing, (TENANT_WITH_PROPERTY,))


E = TypeVar("E", bound=Enum)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_enum(enum_type: type[E], value: Any, name: str) -> E:
    """Coerce a value to a member of ``enum_type``.

    Raises
    ------
    ValidationError
        If the value is not one of the enum's values.
    """
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(f"{name} must be one of {allowed}, got {value!r}") from None


def fan_out(*calls: Callable[[], Any]) -> list[Any]:
    """Run independent reads concurrently and return results in call order.

    If any call raises, the exception propagates and all other results are
    discarded.
    """
    with ThreadPoolExecutor(max_workers=len(calls) or 1) as executor:
        futures = [executor.submit(call) for call in calls]
        return [future.result() for future in futures]


class BaseRepository(ABC):
    """Data access for one table on behalf of a landlord session.

    Parameters
    ----------
    store : TableStore
        Table store holding the landlord tables.
    session : Session
        Caller whose portfolio scopes every query.
    clock : Callable[[], datetime] | None
        Source of the current time (defaults to UTC now).
    """

    table: ClassVar[str]
    model: ClassVar[type]
    create_model: ClassVar[type | None] = None
    extra_editable: ClassVar[tuple[str, ...]] = ()
    embeds: ClassVar[tuple[Embed, ...]] = ()

    def __init__(
        self,
        store: TableStore,
        session: Session,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.session = session
        self.clock = clock or _utcnow

    def now(self) -> datetime:
        return self.clock()

    def _fetch(self, query: Query, embeds: tuple[Embed, ...] | None = None) -> list[Any]:
        """Run a query and return hydrated records."""
        rows = self.store.select(query)
        return self._hydrate(rows, self.model, self.embeds if embeds is None else embeds)

    def _fetch_one(self, record_id: str, embeds: tuple[Embed, ...] | None = None) -> Any:
        row = self.store.get(self.table, record_id)
        return self._hydrate([row], self.model, self.embeds if embeds is None else embeds)[0]

    def _hydrate(self, rows: list[dict[str, Any]], model: type, embeds: tuple[Embed, ...]) -> list[Any]:
        records = [from_row(model, row) for row in rows]
        for embed in embeds:
            ids = sorted({row[embed.column] for row in rows if row.get(embed.column)})
            if not ids:
                continue
            related_rows = self.store.select(Query(embed.table).in_("id", ids))
            related = {r.id: r for r in self._hydrate(related_rows, embed.model, embed.embeds)}
            for record, row in zip(records, rows):
                setattr(record, embed.name, related.get(row.get(embed.column)))
        return records

    def _check_editable(self, changes: dict[str, Any]) -> None:
        editable = set(self.extra_editable)
        if self.create_model is not None:
            editable.update(f.name for f in fields(self.create_model))
        unknown = set(changes) - editable
        if unknown:
            raise ValidationError(f"Cannot update {self.table} fields: {', '.join(sorted(unknown))}")

    def _update(
        self,
        record_id: str,
        changes: dict[str, Any],
        derived: dict[str, Any] | None = None,
    ) -> Any:
        """Apply a partial update of editable fields and return the record.

        ``derived`` holds computed columns written along with the changes.
        """
        self._check_editable(changes)
        row = {name: serialize_value(value) for name, value in {**changes, **(derived or {})}.items()}
        self.store.update(self.table, record_id, row)
        return self._fetch_one(record_id)

    # Ownership

    def _owned_property_ids(self) -> list[str]:
        rows = self.store.select(Query("properties").eq("landlord_id", self.session.landlord_id))
        return [row["id"] for row in rows]

    def _owned_ids(self, table: str, column: str, parent_ids: list[str]) -> list[str]:
        if not parent_ids:
            return []
        return [row["id"] for row in self.store.select(Query(table).in_(column, parent_ids))]

    def _owned_tenant_ids(self) -> list[str]:
        return self._owned_ids("tenants", "property_id", self._owned_property_ids())

    def _owned_meter_ids(self) -> list[str]:
        return self._owned_ids("meters", "property_id", self._owned_property_ids())

    def _require(self, table: str, record_id: str) -> dict[str, Any]:
        """Return a row of ``table`` that belongs to the session's landlord.

        Raises
        ------
        EntityNotFoundError
            If the row is missing or belongs to another landlord.
        """
        try:
            row = self.store.get(table, record_id)
        except EntityNotFoundError:
            raise EntityNotFoundError(f"{_singular(table)} {record_id} not found") from None

        property_id = self._property_id_of(table, row)
        if property_id is not None:
            prop = self.store.first(Query("properties").eq("id", property_id))
            if prop is None or prop.get("landlord_id") != self.session.landlord_id:
                raise EntityNotFoundError(f"{_singular(table)} {record_id} not found")
        return row

    def _property_id_of(self, table: str, row: dict[str, Any]) -> str | None:
        if table == "properties":
            return row["id"]
        if table in ("tenants", "meters"):
            return row["property_id"]
        if table == "meter_readings":
            return self.store.get("meters", row["meter_id"])["property_id"]
        if table in ("billing", "payments"):
            return self.store.get("tenants", row["tenant_id"])["property_id"]
        return None


def _singular(table: str) -> str:
    return {
        "properties": "Property",
        "tenants": "Tenant",
        "meters": "Meter",
        "meter_readings": "Meter reading",
        "billing": "Bill",
        "payments": "Payment",
    }.get(table, table)
