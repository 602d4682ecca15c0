"""Client for the hosted M-Pesa payment function."""

import logging
import re
from typing import Any

import requests

from smarta.config import MpesaConfig
from smarta.exceptions import PaymentGatewayError, ValidationError
from smarta.models import Billing, PaymentRequest
from smarta.store.serialization import to_json_value

logger = logging.getLogger(__name__)

# Safaricom/Airtel mobile prefixes: 07XX and 01XX
_LOCAL_NUMBER = re.compile(r"^0([17]\d{8})$")
_INTERNATIONAL_NUMBER = re.compile(r"^(?:\+|00)?254([17]\d{8})$")
_SUBSCRIBER_NUMBER = re.compile(r"^([17]\d{8})$")


def normalize_phone_number(raw: str) -> str:
    """Normalize a Kenyan mobile number to ``2547XXXXXXXX`` form.

    Accepts ``0712345678``, ``712345678``, ``+254712345678`` and
    ``254712345678``, with spaces or dashes.

    Raises
    ------
    ValidationError
        If the number is not a Kenyan mobile number.
    """
    digits = re.sub(r"[\s\-()]", "", raw or "")
    for pattern in (_LOCAL_NUMBER, _INTERNATIONAL_NUMBER, _SUBSCRIBER_NUMBER):
        match = pattern.match(digits)
        if match:
            return f"254{match.group(1)}"
    raise ValidationError(f"Invalid M-Pesa phone number: {raw!r}")


def build_mpesa_request(bill: Billing, phone_number: str) -> PaymentRequest:
    """Build the STK push request for paying a bill in full."""
    unit = bill.tenant.unit_number if bill.tenant else bill.tenant_id
    return PaymentRequest(
        tenant_id=bill.tenant_id,
        billing_id=bill.id,
        amount=bill.total_amount,
        phone_number=normalize_phone_number(phone_number),
        account_reference=f"BILL_{bill.id[-8:]}",
        transaction_desc=f"Water bill payment for {unit}",
    )


class MpesaGateway:
    """Invoke the hosted ``mpesa-payment`` function over HTTP.

    The function talks to the mobile-money provider; results arrive on its
    own callback and are not handled here.

    Parameters
    ----------
    config : MpesaConfig
        Function endpoint and credentials.
    access_token : str | None
        Caller's bearer token; falls back to the anonymous API key.
    session : requests.Session | None
        HTTP session to reuse.
    """

    def __init__(
        self,
        config: MpesaConfig | None = None,
        access_token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or MpesaConfig()
        self.session = session or requests.Session()
        token = access_token or self.config.api_key
        self.session.headers.update({"Content-Type": "application/json"})
        if self.config.api_key:
            self.session.headers["apikey"] = self.config.api_key
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def initiate(self, request: PaymentRequest) -> dict[str, Any]:
        """Start an STK push for the request and return the provider payload."""
        if request.amount <= 0:
            raise ValidationError(f"Payment amount must be positive, got {request.amount}")
        payload = to_json_value(request)
        logger.info(
            "Initiating M-Pesa payment for bill %s: amount=%s ref=%s",
            request.billing_id,
            request.amount,
            request.account_reference,
        )
        return self._invoke(self.config.initiate_url, payload)

    def check_status(self, payment_id: str) -> dict[str, Any]:
        """Ask the provider for the status of a payment."""
        return self._invoke(self.config.status_url, {"payment_id": payment_id})

    def close(self) -> None:
        self.session.close()

    def _invoke(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.session.post(url, json=payload, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise PaymentGatewayError(f"Payment function unreachable: {e}") from e

        if not response.ok:
            raise PaymentGatewayError(
                f"Payment function error {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise PaymentGatewayError(f"Payment function returned invalid JSON: {response.text[:200]}") from None


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)
