"""Property, tenant, meter, billing and payment data access for landlords."""

from smarta.client import SmartaClient
from smarta.config import SmartaConfig
from smarta.models import Session

__all__ = ["Session", "SmartaClient", "SmartaConfig"]
