#!/usr/bin/env python3
"""Seed a demo landlord portfolio and print its dashboard.

By default the portfolio is loaded into an in-memory store, which is
discarded on exit. With ``--postgres`` it is written to the database
configured through the ``POSTGRES_*`` environment variables.

Usage::

    python scripts/seed_demo_data.py --properties 5 --months 6 --seed 42
    python scripts/seed_demo_data.py --postgres --landlord-id <uuid>
"""

import argparse
import logging
import sys
import uuid
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from smarta import Session, SmartaClient, SmartaConfig
from smarta.exceptions import SmartaError
from smarta.fixtures import PortfolioGenerator, SimulatedTelemetry
from smarta.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a demo landlord portfolio")
    parser.add_argument("--properties", type=int, default=3, help="Number of properties (default: 3)")
    parser.add_argument("--months", type=int, default=4, help="Monthly readings per occupied unit (default: 4)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: SEED or random)")
    parser.add_argument("--landlord-id", default=None, help="Landlord user id (default: a new uuid)")
    parser.add_argument("--email", default="demo.landlord@example.com", help="Landlord email")
    parser.add_argument(
        "--postgres",
        action="store_true",
        help="Write to PostgreSQL instead of an in-memory store",
    )
    return parser.parse_args(argv)


def print_summary(client: SmartaClient, seed: int | None) -> None:
    """Print dashboard, payment and meter figures."""
    dashboard = client.dashboard.get_stats()
    payments = client.payments.get_stats()
    meters = client.meters.get_all()
    telemetry = SimulatedTelemetry(seed).snapshots(meters)
    currency = client.config.billing.currency

    print("=" * 60)
    print("Dashboard")
    print("=" * 60)
    print(f"  Properties:          {dashboard.total_properties}")
    print(f"  Active tenants:      {dashboard.active_tenants}")
    print(f"  Meters:              {dashboard.total_meters} ({dashboard.active_meters} active)")
    print(f"  Meter activity rate: {dashboard.meter_activity_rate}%")
    print(f"  Total revenue:       {currency} {dashboard.total_revenue:,.2f}")
    print()
    print("Payments")
    print("-" * 60)
    print(f"  Pending:             {currency} {payments.pending_payments:,.2f}")
    print(f"  Completed (window):  {currency} {payments.completed_payments:,.2f}")
    print(f"  Average payment:     {currency} {payments.average_payment:,.2f}")
    print(f"  Transactions:        {payments.total_transactions}")
    print()
    print("Recent readings")
    print("-" * 60)
    for reading in dashboard.recent_readings:
        meter_number = reading.meter.meter_number if reading.meter else reading.meter_id
        print(f"  {reading.reading_date}  {meter_number:<12} {reading.reading_value:>10}  (+{reading.consumption})")
    print()
    print("Meter telemetry (simulated)")
    print("-" * 60)
    by_meter = {meter.id: meter for meter in meters}
    for snapshot in telemetry:
        meter = by_meter[snapshot.meter_id]
        print(
            f"  {meter.meter_number:<12} {snapshot.connectivity.value:<12} "
            f"signal {snapshot.signal_strength}/5  battery {snapshot.battery_level}%"
        )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = SmartaConfig.from_env()
    except SmartaError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    setup_logging(config.log_level, config.log_format)

    seed = args.seed if args.seed is not None else config.seed
    session = Session(landlord_id=args.landlord_id or str(uuid.uuid4()), email=args.email)

    try:
        with SmartaClient.from_config(config, session, in_memory=not args.postgres) as client:
            summary = PortfolioGenerator(seed=seed).load(
                client, num_properties=args.properties, months=args.months
            )
            logger.info(
                "Seeded %d readings, %d payments, %d overdue bills for landlord %s",
                summary.readings,
                summary.payments,
                summary.overdue_bills,
                session.landlord_id,
            )
            print_summary(client, seed)
    except SmartaError as e:
        logger.error("Seeding failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
