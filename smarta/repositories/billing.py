"""Billing repository."""

import logging
from datetime import date, timedelta
from typing import Any

from smarta.charges import compute_charges, to_amount
from smarta.exceptions import InvalidEntityStateError, ValidationError
from smarta.models import Billing, BillingCreate, BillingStatus
from smarta.repositories.base import METER, TENANT_WITH_PROPERTY, BaseRepository, parse_enum
from smarta.store.base import Query
from smarta.store.serialization import from_row, to_row

logger = logging.getLogger(__name__)

CHARGE_FIELDS = ("water_consumption", "rate_per_unit", "service_charges")


class BillingRepository(BaseRepository):
    """Water bills of the landlord's tenants.

    Bills are created ``pending``. Only a completed payment marks a bill
    ``paid``; see ``PaymentsRepository.create_manual``.
    """

    table = "billing"
    model = Billing
    create_model = BillingCreate
    extra_editable = ("status",)
    embeds = (TENANT_WITH_PROPERTY, METER)

    def get_all(self) -> list[Billing]:
        """Get every bill with tenant, property and meter, newest first."""
        tenant_ids = self._owned_tenant_ids()
        if not tenant_ids:
            return []
        return self._fetch(
            Query(self.table).in_("tenant_id", tenant_ids).order("created_at", descending=True)
        )

    def get_by_tenant_id(self, tenant_id: str) -> list[Billing]:
        """Get one tenant's bills, newest first."""
        self._require("tenants", tenant_id)
        return self._fetch(
            Query(self.table).eq("tenant_id", tenant_id).order("created_at", descending=True)
        )

    def get_pending(self) -> list[Billing]:
        """Get pending bills, earliest due first."""
        tenant_ids = self._owned_tenant_ids()
        if not tenant_ids:
            return []
        query = (
            Query(self.table)
            .in_("tenant_id", tenant_ids)
            .eq("status", BillingStatus.PENDING)
            .order("due_date")
        )
        return self._fetch(query)

    def create(self, data: BillingCreate) -> Billing:
        """Issue a pending bill with computed charges."""
        self._require("tenants", data.tenant_id)
        self._require("meters", data.meter_id)
        if data.billing_period_end < data.billing_period_start:
            raise ValidationError(
                f"Billing period ends ({data.billing_period_end}) before it starts ({data.billing_period_start})"
            )

        row = to_row(data)
        row.update(_charge_columns(data.water_consumption, data.rate_per_unit, data.service_charges))
        row["status"] = BillingStatus.PENDING.value
        stored = self.store.insert(self.table, row)
        logger.info("Bill %s issued to tenant %s: total=%s", stored["id"], data.tenant_id, row["total_amount"])
        return self._fetch_one(stored["id"])

    def update(self, bill_id: str, **changes: Any) -> Billing:
        """Update editable bill fields, recomputing charges when their inputs change.

        Raises
        ------
        InvalidEntityStateError
            When setting ``paid`` directly, or changing the status or the
            amounts of a bill that is already paid.
        """
        bill = from_row(Billing, self._require(self.table, bill_id))
        self._check_editable(changes)

        if "status" in changes:
            changes["status"] = parse_enum(BillingStatus, changes["status"], "status")
            if bill.status == BillingStatus.PAID and changes["status"] != BillingStatus.PAID:
                raise InvalidEntityStateError(f"Bill {bill_id} is paid; its status cannot change")
            if changes["status"] == BillingStatus.PAID and bill.status != BillingStatus.PAID:
                raise InvalidEntityStateError("A bill is marked paid only by recording a payment")
        if "tenant_id" in changes:
            self._require("tenants", changes["tenant_id"])
        if "meter_id" in changes:
            self._require("meters", changes["meter_id"])

        derived: dict[str, Any] = {}
        if any(name in changes for name in CHARGE_FIELDS):
            if bill.status == BillingStatus.PAID:
                raise InvalidEntityStateError(f"Bill {bill_id} is paid; its charges cannot change")
            derived = _charge_columns(
                changes.get("water_consumption", bill.water_consumption),
                changes.get("rate_per_unit", bill.rate_per_unit),
                changes.get("service_charges", bill.service_charges),
            )
        return self._update(bill_id, changes, derived)

    def mark_overdue(self, as_of: date | None = None) -> list[Billing]:
        """Mark pending bills due before ``as_of`` (default today) as overdue."""
        as_of = as_of or self.now().date()
        tenant_ids = self._owned_tenant_ids()
        if not tenant_ids:
            return []
        query = (
            Query(self.table)
            .in_("tenant_id", tenant_ids)
            .eq("status", BillingStatus.PENDING)
            .lte("due_date", as_of - timedelta(days=1))
        )
        with self.store.transaction():
            rows = self.store.select(query)
            for row in rows:
                self.store.update(self.table, row["id"], {"status": BillingStatus.OVERDUE.value})

        if rows:
            logger.info("%d bills marked overdue as of %s", len(rows), as_of)
        return [self._fetch_one(row["id"]) for row in rows]

    def cancel(self, bill_id: str) -> Billing:
        """Cancel an unpaid bill."""
        bill = from_row(Billing, self._require(self.table, bill_id))
        if bill.status == BillingStatus.PAID:
            raise InvalidEntityStateError(f"Bill {bill_id} is paid and cannot be cancelled")
        self.store.update(self.table, bill_id, {"status": BillingStatus.CANCELLED.value})
        logger.info("Bill %s cancelled", bill_id)
        return self._fetch_one(bill_id)


def _charge_columns(water_consumption: Any, rate_per_unit: Any, service_charges: Any) -> dict[str, Any]:
    """Charge inputs as Decimals together with the amounts derived from them."""
    consumption = to_amount(water_consumption, "water_consumption")
    rate = to_amount(rate_per_unit, "rate_per_unit")
    service = to_amount(service_charges, "service_charges")
    charges = compute_charges(consumption, rate, service)
    return {
        "water_consumption": consumption,
        "rate_per_unit": rate,
        "service_charges": service,
        "water_charges": charges.water_charges,
        "total_amount": charges.total_amount,
    }
