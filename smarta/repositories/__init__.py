"""Per-entity data access scoped to a landlord session."""

from smarta.repositories.base import BaseRepository, Embed, fan_out
from smarta.repositories.billing import BillingRepository
from smarta.repositories.dashboard import DashboardRepository
from smarta.repositories.meters import MetersRepository
from smarta.repositories.payments import PaymentsRepository, generate_payment_reference
from smarta.repositories.properties import PropertiesRepository
from smarta.repositories.readings import ReadingsRepository
from smarta.repositories.tenants import TenantsRepository

__all__ = [
    "BaseRepository",
    "BillingRepository",
    "DashboardRepository",
    "Embed",
    "MetersRepository",
    "PaymentsRepository",
    "PropertiesRepository",
    "ReadingsRepository",
    "TenantsRepository",
    "fan_out",
    "generate_payment_reference",
]
