"""Domain models for the landlord dashboard."""

from smarta.models.base import Session, relation
from smarta.models.billing import Billing, BillingCreate
from smarta.models.enums import (
    BillingStatus,
    Connectivity,
    MeterStatus,
    MeterType,
    PaymentMethod,
    PaymentStatus,
    PropertyType,
    TenantStatus,
)
from smarta.models.meter import Meter, MeterCreate, MeterReading, ReadingCreate
from smarta.models.payment import Payment, PaymentCreate, PaymentRequest
from smarta.models.property import Property, PropertyCreate
from smarta.models.stats import DashboardStats, MeterStats, PaymentStats, PropertyOverview
from smarta.models.tenant import Tenant, TenantCreate

__all__ = [
    "Billing",
    "BillingCreate",
    "BillingStatus",
    "Connectivity",
    "DashboardStats",
    "Meter",
    "MeterCreate",
    "MeterReading",
    "MeterStats",
    "MeterStatus",
    "MeterType",
    "Payment",
    "PaymentCreate",
    "PaymentMethod",
    "PaymentRequest",
    "PaymentStats",
    "PaymentStatus",
    "Property",
    "PropertyCreate",
    "PropertyOverview",
    "PropertyType",
    "ReadingCreate",
    "Session",
    "Tenant",
    "TenantCreate",
    "TenantStatus",
    "relation",
]
