"""Pytest configuration and fixtures."""

import itertools
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from smarta.client import SmartaClient
from smarta.models import (
    Billing,
    BillingCreate,
    Meter,
    MeterCreate,
    Property,
    PropertyCreate,
    Session,
    Tenant,
    TenantCreate,
)
from smarta.mpesa import MpesaGateway
from smarta.store import InMemoryTableStore

NOW = datetime(2026, 3, 15, 9, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """First time reported by the clock fixture."""
    return NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock starting at NOW and advancing one second per call."""
    ticks = itertools.count()
    return lambda: NOW + timedelta(seconds=next(ticks))


@pytest.fixture
def store(clock: Callable[[], datetime]) -> InMemoryTableStore:
    """Fresh in-memory store for each test."""
    return InMemoryTableStore(clock=clock)


@pytest.fixture
def session() -> Session:
    """Landlord session."""
    return Session(landlord_id="landlord-001", email="owner@example.com", access_token="token-001")


@pytest.fixture
def other_session() -> Session:
    """Session of a different landlord."""
    return Session(landlord_id="landlord-002", email="other@example.com")


@pytest.fixture
def gateway() -> MagicMock:
    """Mocked M-Pesa gateway."""
    mock = MagicMock(spec=MpesaGateway)
    mock.initiate.return_value = {"success": True, "checkout_request_id": "ws_CO_001"}
    mock.check_status.return_value = {"status": "completed"}
    return mock


@pytest.fixture
def client(
    store: InMemoryTableStore,
    session: Session,
    gateway: MagicMock,
    clock: Callable[[], datetime],
) -> SmartaClient:
    """Client for the landlord session backed by the in-memory store."""
    return SmartaClient(store, session, gateway=gateway, clock=clock)


@pytest.fixture
def other_client(
    store: InMemoryTableStore,
    other_session: Session,
    clock: Callable[[], datetime],
) -> SmartaClient:
    """Client of another landlord sharing the same store."""
    return SmartaClient(store, other_session, clock=clock)


@pytest.fixture
def sample_property(client: SmartaClient) -> Property:
    """Create a sample property."""
    return client.properties.create(
        PropertyCreate(name="Riverside Court", address="12 Moi Avenue, Nairobi", total_units=4)
    )


@pytest.fixture
def sample_tenant(client: SmartaClient, sample_property: Property) -> Tenant:
    """Create a sample tenant in unit A1."""
    return client.tenants.create(
        TenantCreate(
            property_id=sample_property.id,
            unit_number="A1",
            lease_start_date=date(2026, 1, 1),
            lease_end_date=date(2026, 12, 31),
            monthly_rent=Decimal("25000"),
            phone_number="0712345678",
            email="tenant@example.com",
        )
    )


@pytest.fixture
def sample_meter(client: SmartaClient, sample_property: Property) -> Meter:
    """Create an unassigned meter."""
    return client.meters.create(
        MeterCreate(
            property_id=sample_property.id,
            meter_number="WM-000001",
            location="Unit A1",
            installation_date=date(2025, 6, 1),
        )
    )


@pytest.fixture
def sample_bill(client: SmartaClient, sample_tenant: Tenant, sample_meter: Meter) -> Billing:
    """Issue a pending bill of 120 units at 15 plus 200 service charges."""
    return client.billing.create(
        BillingCreate(
            tenant_id=sample_tenant.id,
            meter_id=sample_meter.id,
            billing_period_start=date(2026, 2, 1),
            billing_period_end=date(2026, 2, 28),
            water_consumption=Decimal("120"),
            rate_per_unit=Decimal("15"),
            service_charges=Decimal("200"),
            due_date=date(2026, 3, 14),
        )
    )
