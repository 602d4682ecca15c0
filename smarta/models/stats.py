"""Aggregate statistics records."""

from dataclasses import dataclass, field
from decimal import Decimal

from smarta.models.meter import Meter, MeterReading
from smarta.models.property import Property
from smarta.models.tenant import Tenant


@dataclass
class PaymentStats:
    """Revenue summary over all payments and a trailing window."""

    total_revenue: Decimal
    pending_payments: Decimal
    completed_payments: Decimal  # completed within the window
    average_payment: Decimal
    monthly_growth: Decimal  # percent vs previous window
    total_transactions: int  # created within the window


@dataclass
class MeterStats:
    """Meter counts by status and assignment."""

    total: int = 0
    connected: int = 0
    disconnected: int = 0
    available: int = 0
    maintenance: int = 0
    assigned: int = 0


@dataclass
class DashboardStats:
    """Landlord dashboard figures."""

    total_properties: int
    active_tenants: int
    total_meters: int
    active_meters: int
    total_revenue: Decimal
    meter_activity_rate: int
    recent_readings: list[MeterReading] = field(default_factory=list)


@dataclass
class PropertyOverview:
    """A property with its tenants, meters and occupancy figures."""

    property: Property
    tenants: list[Tenant]
    meters: list[Meter]
    active_tenants: int
    active_meters: int
    available_meters: int
    occupancy_rate: int
