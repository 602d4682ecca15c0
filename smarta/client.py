"""Entry point bundling the repositories for one landlord session."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from smarta.config import SmartaConfig
from smarta.models import Session
from smarta.mpesa import MpesaGateway
from smarta.repositories import (
    BillingRepository,
    DashboardRepository,
    MetersRepository,
    PaymentsRepository,
    PropertiesRepository,
    ReadingsRepository,
    TenantsRepository,
)
from smarta.store import InMemoryTableStore, PostgresTableStore, TableStore

logger = logging.getLogger(__name__)


class SmartaClient:
    """Data access for a landlord's dashboard.

    Parameters
    ----------
    store : TableStore
        Backend holding the landlord tables.
    session : Session
        Caller on whose behalf every query runs.
    gateway : MpesaGateway | None
        Hosted M-Pesa function client, needed for M-Pesa payments only.
    config : SmartaConfig | None
        Settings; defaults are used when omitted.
    clock : Callable[[], datetime] | None
        Source of the current time.

    Examples
    --------
    >>> client = SmartaClient(InMemoryTableStore(), Session(landlord_id="landlord-1"))
    >>> client.dashboard.get_stats().total_properties
    0
    """

    def __init__(
        self,
        store: TableStore,
        session: Session,
        gateway: MpesaGateway | None = None,
        config: SmartaConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.session = session
        self.gateway = gateway
        self.config = config or SmartaConfig()

        self.properties = PropertiesRepository(store, session, clock)
        self.tenants = TenantsRepository(store, session, clock)
        self.meters = MetersRepository(store, session, clock)
        self.readings = ReadingsRepository(store, session, clock)
        self.billing = BillingRepository(store, session, clock)
        self.payments = PaymentsRepository(
            store,
            session,
            gateway=gateway,
            clock=clock,
            window_days=self.config.billing.stats_window_days,
        )
        self.dashboard = DashboardRepository(store, session, clock)

    @classmethod
    def from_config(
        cls,
        config: SmartaConfig,
        session: Session,
        in_memory: bool = False,
    ) -> SmartaClient:
        """Build a client with a store and gateway from configuration."""
        store: TableStore
        if in_memory:
            store = InMemoryTableStore()
        else:
            store = PostgresTableStore(config.postgres)
        gateway = MpesaGateway(config.mpesa, access_token=session.access_token)
        logger.info(
            "Client ready for landlord %s (%s store)",
            session.landlord_id,
            "in-memory" if in_memory else "postgres",
        )
        return cls(store, session, gateway=gateway, config=config)

    def close(self) -> None:
        """Close the store and the gateway session."""
        self.store.close()
        if self.gateway is not None:
            self.gateway.close()

    def __enter__(self) -> SmartaClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
