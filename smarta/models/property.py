"""Property models."""

from dataclasses import dataclass
from datetime import datetime

from smarta.models.enums import PropertyType


@dataclass
class Property:
    """Building or compound managed by a landlord."""

    id: str
    name: str
    address: str
    property_type: PropertyType
    total_units: int
    landlord_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class PropertyCreate:
    """Fields accepted when registering a property."""

    name: str
    address: str
    property_type: PropertyType = PropertyType.RESIDENTIAL
    total_units: int = 1
