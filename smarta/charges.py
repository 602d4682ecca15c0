"""Water bill charge computation."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from smarta.exceptions import ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class BillCharges:
    """Amounts derived from consumption, rate and service charges."""

    water_charges: Decimal
    total_amount: Decimal


def to_amount(value: Any, name: str) -> Decimal:
    """Coerce a non-negative numeric input to ``Decimal``.

    Floats go through ``str`` so that ``0.1`` stays ``Decimal("0.1")``.

    Raises
    ------
    ValidationError
        If the value is missing, not numeric, or negative.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise ValidationError(f"{name} must not be negative, got {amount}")
    return amount


def round_currency(amount: Decimal) -> Decimal:
    """Round to the currency minor unit, halves away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_charges(
    water_consumption: Any,
    rate_per_unit: Any,
    service_charges: Any,
) -> BillCharges:
    """Compute water charges and the bill total.

    Parameters
    ----------
    water_consumption : Decimal | int | float | str
        Units consumed in the billing period.
    rate_per_unit : Decimal | int | float | str
        Price per unit.
    service_charges : Decimal | int | float | str
        Flat charges added to the bill.

    Returns
    -------
    BillCharges
        ``water_charges = consumption * rate`` and
        ``total_amount = water_charges + service_charges``, both rounded
        to cents.

    Examples
    --------
    >>> compute_charges(120, 15, 200)
    BillCharges(water_charges=Decimal('1800.00'), total_amount=Decimal('2000.00'))
    """
    consumption = to_amount(water_consumption, "water_consumption")
    rate = to_amount(rate_per_unit, "rate_per_unit")
    service = to_amount(service_charges, "service_charges")

    water_charges = round_currency(consumption * rate)
    total_amount = round_currency(water_charges + service)
    return BillCharges(water_charges=water_charges, total_amount=total_amount)
