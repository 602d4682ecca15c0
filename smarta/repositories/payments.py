"""Payment repository: M-Pesa initiation and manual payment recording."""

import logging
import secrets
import string
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from smarta.charges import to_amount
from smarta.exceptions import ConfigurationError, InvalidEntityStateError, ValidationError
from smarta.models import (
    Billing,
    BillingStatus,
    Payment,
    PaymentCreate,
    PaymentRequest,
    PaymentStats,
    PaymentStatus,
    Session,
)
from smarta.mpesa import MpesaGateway, build_mpesa_request, normalize_phone_number
from smarta.repositories.base import (
    BILLING,
    BILLING_WITH_TENANT,
    TENANT,
    TENANT_WITH_PROPERTY,
    BaseRepository,
)
from smarta.stats import summarize_payments
from smarta.store.base import Query, TableStore
from smarta.store.serialization import from_row, to_row

logger = logging.getLogger(__name__)

_REFERENCE_ALPHABET = string.digits + string.ascii_uppercase


def generate_payment_reference(now: datetime) -> str:
    """Build a reference of the form ``PAY_<epoch-ms>_<6 base-36 chars>``."""
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(6))
    return f"PAY_{int(now.timestamp() * 1000)}_{suffix}"


class PaymentsRepository(BaseRepository):
    """Payments against the landlord's bills.

    Parameters
    ----------
    store : TableStore
        Table store holding the landlord tables.
    session : Session
        Caller whose portfolio scopes every query.
    gateway : MpesaGateway | None
        Client for the hosted payment function; M-Pesa operations raise
        ``ConfigurationError`` without one.
    clock : Callable[[], datetime] | None
        Source of the current time.
    window_days : int
        Trailing window used by ``get_stats``.
    """

    table = "payments"
    model = Payment
    embeds = (BILLING_WITH_TENANT, TENANT_WITH_PROPERTY)

    def __init__(
        self,
        store: TableStore,
        session: Session,
        gateway: MpesaGateway | None = None,
        clock: Callable[[], datetime] | None = None,
        window_days: int = 30,
    ) -> None:
        super().__init__(store, session, clock)
        self.gateway = gateway
        self.window_days = window_days

    def get_all(self) -> list[Payment]:
        """Get every payment with bill and tenant, newest first."""
        tenant_ids = self._owned_tenant_ids()
        if not tenant_ids:
            return []
        return self._fetch(
            Query(self.table).in_("tenant_id", tenant_ids).order("created_at", descending=True)
        )

    def get_by_tenant_id(self, tenant_id: str) -> list[Payment]:
        """Get one tenant's payments, newest first."""
        self._require("tenants", tenant_id)
        return self._fetch(
            Query(self.table).eq("tenant_id", tenant_id).order("created_at", descending=True),
            embeds=(BILLING, TENANT_WITH_PROPERTY),
        )

    def get_stats(self) -> PaymentStats:
        """Summarize revenue over the landlord's payments."""
        tenant_ids = self._owned_tenant_ids()
        if not tenant_ids:
            return summarize_payments([], self.now(), self.window_days)
        payments = self._fetch(Query(self.table).in_("tenant_id", tenant_ids), embeds=())
        return summarize_payments(payments, self.now(), self.window_days)

    def initiate_mpesa_payment(self, request: PaymentRequest) -> dict[str, Any]:
        """Forward an STK push request to the hosted payment function.

        Raises
        ------
        ValidationError
            If the bill belongs to another tenant or the phone number is
            not a Kenyan mobile number.
        InvalidEntityStateError
            If the bill is already paid or cancelled.
        """
        bill = self._payable_bill(request.billing_id)
        if bill.tenant_id != request.tenant_id:
            raise ValidationError(f"Bill {bill.id} does not belong to tenant {request.tenant_id}")
        request = replace(request, phone_number=normalize_phone_number(request.phone_number))
        return self._gateway().initiate(request)

    def initiate_bill_payment(self, billing_id: str, phone_number: str) -> dict[str, Any]:
        """Request M-Pesa payment of a bill's full amount from a phone."""
        bill = self._payable_bill(billing_id)
        return self._gateway().initiate(build_mpesa_request(bill, phone_number))

    def check_payment_status(self, payment_id: str) -> dict[str, Any]:
        """Ask the hosted payment function for a payment's status."""
        return self._gateway().check_status(payment_id)

    def create_manual(self, data: PaymentCreate) -> Payment:
        """Record a completed payment and mark its bill paid.

        Both writes happen in one store transaction: if either fails,
        neither is kept.

        Raises
        ------
        ValidationError
            If the amount is not positive or the bill belongs to another tenant.
        InvalidEntityStateError
            If the bill is already paid or cancelled.
        """
        amount = to_amount(data.amount, "amount")
        if amount <= 0:
            raise ValidationError(f"Payment amount must be positive, got {amount}")
        bill = from_row(Billing, self._require("billing", data.billing_id))
        self._require("tenants", data.tenant_id)
        if bill.tenant_id != data.tenant_id:
            raise ValidationError(f"Bill {bill.id} does not belong to tenant {data.tenant_id}")
        if not bill.is_payable:
            raise InvalidEntityStateError(f"Bill {bill.id} is {bill.status.value} and cannot be paid")
        if amount < bill.total_amount:
            logger.warning(
                "Payment of %s for bill %s is below the bill total %s", amount, bill.id, bill.total_amount
            )

        now = self.now()
        row = to_row(data)
        row.update(
            amount=amount,
            payment_status=PaymentStatus.COMPLETED.value,
            payment_reference=data.payment_reference or generate_payment_reference(now),
            payment_date=now,
            confirmed_at=now,
        )
        with self.store.transaction():
            stored = self.store.insert(self.table, row)
            self.store.update("billing", bill.id, {"status": BillingStatus.PAID.value, "paid_date": now})

        logger.info(
            "Payment %s recorded for bill %s: amount=%s method=%s",
            row["payment_reference"],
            bill.id,
            amount,
            row["payment_method"],
        )
        return self._fetch_one(stored["id"])

    def _payable_bill(self, billing_id: str) -> Billing:
        row = self._require("billing", billing_id)
        bill = self._hydrate([row], Billing, (TENANT,))[0]
        if not bill.is_payable:
            raise InvalidEntityStateError(f"Bill {billing_id} is {bill.status.value} and cannot be paid")
        return bill

    def _gateway(self) -> MpesaGateway:
        if self.gateway is None:
            raise ConfigurationError("M-Pesa gateway is not configured")
        return self.gateway
