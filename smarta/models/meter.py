"""Meter and meter reading models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from smarta.models.base import relation
from smarta.models.enums import MeterStatus, MeterType
from smarta.models.property import Property
from smarta.models.tenant import Tenant


@dataclass
class Meter:
    """Metering device installed at a property.

    A meter is ``active`` exactly when a tenant is assigned to it.
    """

    id: str
    property_id: str
    meter_number: str
    meter_type: MeterType
    location: str
    installation_date: date
    status: MeterStatus
    tenant_id: str | None = None
    last_reading_value: Decimal | None = None
    last_reading_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    property: Property | None = relation()
    tenant: Tenant | None = relation()


@dataclass
class MeterCreate:
    """Fields accepted when installing a meter."""

    property_id: str
    meter_number: str
    location: str
    installation_date: date
    meter_type: MeterType = MeterType.WATER
    tenant_id: str | None = None


@dataclass
class MeterReading:
    """Measurement recorded against a meter (append-only)."""

    id: str
    meter_id: str
    reading_value: Decimal
    reading_date: date
    previous_reading: Decimal
    consumption: Decimal
    recorded_by: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    meter: Meter | None = relation()


@dataclass
class ReadingCreate:
    """Fields accepted when recording a reading."""

    meter_id: str
    reading_value: Decimal
    reading_date: date
    notes: str | None = None
