"""Billing models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from smarta.models.base import relation
from smarta.models.enums import BillingStatus
from smarta.models.meter import Meter
from smarta.models.tenant import Tenant


@dataclass
class Billing:
    """Water bill for a tenant over a billing period."""

    id: str
    tenant_id: str
    meter_id: str
    billing_period_start: date
    billing_period_end: date
    water_consumption: Decimal
    rate_per_unit: Decimal
    water_charges: Decimal
    service_charges: Decimal
    total_amount: Decimal
    status: BillingStatus
    due_date: date | None = None
    paid_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tenant: Tenant | None = relation()
    meter: Meter | None = relation()

    @property
    def is_payable(self) -> bool:
        return self.status in (BillingStatus.PENDING, BillingStatus.OVERDUE)


@dataclass
class BillingCreate:
    """Fields accepted when issuing a bill."""

    tenant_id: str
    meter_id: str
    billing_period_start: date
    billing_period_end: date
    water_consumption: Decimal
    rate_per_unit: Decimal
    service_charges: Decimal
    due_date: date | None = None
