"""Demo portfolio generator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from smarta.fixtures.base import BaseGenerator
from smarta.models import (
    BillingCreate,
    MeterCreate,
    PaymentCreate,
    PaymentMethod,
    PropertyCreate,
    PropertyType,
    ReadingCreate,
    TenantCreate,
    TenantStatus,
)

if TYPE_CHECKING:
    from smarta.client import SmartaClient

logger = logging.getLogger(__name__)

READING_INTERVAL_DAYS = 30
PAYMENT_TERMS_DAYS = 14


@dataclass
class PortfolioSummary:
    """Counts of the records loaded by ``PortfolioGenerator.load``."""

    properties: int = 0
    tenants: int = 0
    meters: int = 0
    readings: int = 0
    bills: int = 0
    payments: int = 0
    overdue_bills: int = 0


class PortfolioGenerator(BaseGenerator):
    """Generate a landlord's demo portfolio.

    Builds create payloads for properties, tenants, meters, readings and
    bills, and can load a whole portfolio through a ``SmartaClient``.
    """

    PROPERTY_TYPES = list(PropertyType)
    PROPERTY_TYPE_WEIGHTS = [0.70, 0.15, 0.15]

    PAYMENT_METHODS = list(PaymentMethod)
    PAYMENT_METHOD_WEIGHTS = [0.70, 0.15, 0.15]

    # Monthly rent range by property type
    RENT_RANGES = {
        PropertyType.RESIDENTIAL: (8_000, 45_000),
        PropertyType.COMMERCIAL: (30_000, 150_000),
        PropertyType.MIXED: (15_000, 80_000),
    }

    OCCUPANCY = 0.8
    PAID_SHARE = 0.75

    def property_payload(self, total_units: int | None = None) -> PropertyCreate:
        """Generate a property."""
        property_type = self.rng.choices(self.PROPERTY_TYPES, weights=self.PROPERTY_TYPE_WEIGHTS, k=1)[0]
        return PropertyCreate(
            name=f"{self.fake.last_name()} {self.rng.choice(['Court', 'Apartments', 'Heights', 'Plaza'])}",
            address=f"{self.fake.street_address()}, {self.fake.city()}",
            property_type=property_type,
            total_units=total_units or self.rng.randint(4, 12),
        )

    def tenant_payload(
        self,
        property_id: str,
        unit_number: str,
        property_type: PropertyType = PropertyType.RESIDENTIAL,
        as_of: date | None = None,
    ) -> TenantCreate:
        """Generate a tenant with a one or two year lease running at ``as_of``."""
        as_of = as_of or date.today()
        lease_start = as_of - timedelta(days=self.rng.randint(30, 330))
        low, high = self.RENT_RANGES[property_type]
        return TenantCreate(
            property_id=property_id,
            unit_number=unit_number,
            lease_start_date=lease_start,
            lease_end_date=lease_start + timedelta(days=365 * self.rng.choice([1, 2])),
            monthly_rent=Decimal(self.rng.randrange(low, high, 500)),
            status=TenantStatus.ACTIVE,
            phone_number=self.phone_number(),
            email=self.fake.email(),
        )

    def meter_payload(
        self,
        property_id: str,
        unit_number: str,
        tenant_id: str | None = None,
        as_of: date | None = None,
    ) -> MeterCreate:
        """Generate a water meter for a unit."""
        as_of = as_of or date.today()
        return MeterCreate(
            property_id=property_id,
            meter_number=f"WM-{self.fake.unique.random_number(digits=6, fix_len=True)}",
            location=f"Unit {unit_number}",
            installation_date=as_of - timedelta(days=self.rng.randint(400, 1500)),
            tenant_id=tenant_id,
        )

    def reading_series(self, meter_id: str, months: int, as_of: date | None = None) -> list[ReadingCreate]:
        """Generate monthly readings ending at ``as_of``, oldest first."""
        as_of = as_of or date.today()
        value = Decimal(self.rng.randint(100, 2_000))
        readings = []
        for month in range(months, 0, -1):
            # 5-25 m3 a month for a household
            value += Decimal(self.rng.randint(5_000, 25_000)) / 1000
            readings.append(
                ReadingCreate(
                    meter_id=meter_id,
                    reading_value=value,
                    reading_date=as_of - timedelta(days=READING_INTERVAL_DAYS * (month - 1)),
                )
            )
        return readings

    def bill_payload(
        self,
        tenant_id: str,
        meter_id: str,
        period_start: date,
        period_end: date,
        consumption: Decimal,
        rate_per_unit: Decimal,
        service_charges: Decimal,
    ) -> BillingCreate:
        return BillingCreate(
            tenant_id=tenant_id,
            meter_id=meter_id,
            billing_period_start=period_start,
            billing_period_end=period_end,
            water_consumption=consumption,
            rate_per_unit=rate_per_unit,
            service_charges=service_charges,
            due_date=period_end + timedelta(days=PAYMENT_TERMS_DAYS),
        )

    def load(
        self,
        client: SmartaClient,
        num_properties: int = 3,
        months: int = 4,
        as_of: date | None = None,
    ) -> PortfolioSummary:
        """Load a portfolio for the client's landlord.

        Every unit gets a meter; most units get a tenant. Occupied units get
        ``months`` monthly readings and a bill per month after the first.
        Older bills are mostly paid; unpaid ones past due become overdue.

        Parameters
        ----------
        client : SmartaClient
            Client of the landlord receiving the portfolio.
        num_properties : int
            Number of properties to create.
        months : int
            Readings per occupied unit.
        as_of : date | None
            Date of the latest readings (default today).

        Returns
        -------
        PortfolioSummary
            Counts of what was created.
        """
        as_of = as_of or client.dashboard.now().date()
        billing_config = client.config.billing
        summary = PortfolioSummary()

        for _ in range(num_properties):
            prop = client.properties.create(self.property_payload())
            summary.properties += 1

            for unit in range(1, prop.total_units + 1):
                unit_number = f"{chr(ord('A') + (unit - 1) // 4)}{(unit - 1) % 4 + 1}"
                tenant_id = None
                if self.rng.random() < self.OCCUPANCY:
                    tenant = client.tenants.create(
                        self.tenant_payload(prop.id, unit_number, prop.property_type, as_of)
                    )
                    tenant_id = tenant.id
                    summary.tenants += 1

                meter = client.meters.create(self.meter_payload(prop.id, unit_number, tenant_id, as_of))
                summary.meters += 1
                if tenant_id is None:
                    continue

                previous = None
                for payload in self.reading_series(meter.id, months, as_of):
                    reading = client.readings.create(payload)
                    summary.readings += 1
                    if previous is None:
                        previous = reading
                        continue

                    bill = client.billing.create(
                        self.bill_payload(
                            tenant_id,
                            meter.id,
                            previous.reading_date,
                            reading.reading_date,
                            reading.consumption,
                            billing_config.default_rate_per_unit,
                            billing_config.default_service_charge,
                        )
                    )
                    summary.bills += 1
                    previous = reading

                    if bill.due_date < as_of and self.rng.random() < self.PAID_SHARE:
                        self._pay(client, bill.id, tenant_id, bill.total_amount)
                        summary.payments += 1

        summary.overdue_bills = len(client.billing.mark_overdue(as_of))
        logger.info(
            "Loaded portfolio: %d properties, %d tenants, %d meters, %d bills",
            summary.properties,
            summary.tenants,
            summary.meters,
            summary.bills,
        )
        return summary

    def _pay(self, client: SmartaClient, billing_id: str, tenant_id: str, amount: Decimal) -> None:
        method = self.rng.choices(self.PAYMENT_METHODS, weights=self.PAYMENT_METHOD_WEIGHTS, k=1)[0]
        transaction_id = None
        if method == PaymentMethod.MPESA:
            transaction_id = self.fake.bothify("??#?#??###", letters="ABCDEFGHJKLMNPQRSTUVWXYZ")
        client.payments.create_manual(
            PaymentCreate(
                billing_id=billing_id,
                tenant_id=tenant_id,
                amount=amount,
                payment_method=method,
                mpesa_transaction_id=transaction_id,
            )
        )
