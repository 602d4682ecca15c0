"""Tenant models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from smarta.models.base import relation
from smarta.models.enums import TenantStatus
from smarta.models.property import Property


@dataclass
class Tenant:
    """Occupant of one unit of a property."""

    id: str
    property_id: str
    unit_number: str
    lease_start_date: date
    lease_end_date: date
    monthly_rent: Decimal
    status: TenantStatus
    phone_number: str | None = None
    email: str | None = None
    user_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    property: Property | None = relation()


@dataclass
class TenantCreate:
    """Fields accepted when registering a tenant."""

    property_id: str
    unit_number: str
    lease_start_date: date
    lease_end_date: date
    monthly_rent: Decimal
    status: TenantStatus = TenantStatus.ACTIVE
    phone_number: str | None = None
    email: str | None = None
