"""Payment models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from smarta.models.base import relation
from smarta.models.billing import Billing
from smarta.models.enums import PaymentMethod, PaymentStatus
from smarta.models.tenant import Tenant


@dataclass
class Payment:
    """Money received against a bill."""

    id: str
    billing_id: str
    tenant_id: str
    amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    payment_reference: str
    mpesa_transaction_id: str | None = None
    payment_date: datetime | None = None
    confirmed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    billing: Billing | None = relation()
    tenant: Tenant | None = relation()


@dataclass
class PaymentCreate:
    """Fields accepted when recording a manual payment.

    ``payment_reference`` is generated when left empty.
    """

    billing_id: str
    tenant_id: str
    amount: Decimal
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_reference: str | None = None
    mpesa_transaction_id: str | None = None


@dataclass
class PaymentRequest:
    """M-Pesa STK push request forwarded to the hosted payment function."""

    tenant_id: str
    billing_id: str
    amount: Decimal
    phone_number: str
    account_reference: str
    transaction_desc: str
