"""Simulated smart meter telemetry for demos.

Nothing here reads a device. Connectivity follows the meter status and
signal and battery values are random.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass

from smarta.models import Connectivity, Meter, MeterStatus


@dataclass(frozen=True)
class TelemetrySnapshot:
    """Simulated device state of one meter."""

    meter_id: str
    connectivity: Connectivity
    signal_strength: int  # bars, 0-5
    battery_level: int  # percent, 0-99


class SimulatedTelemetry:
    """Produce mock telemetry for meters.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.rng = random.Random(seed)

    def snapshot(self, meter: Meter) -> TelemetrySnapshot:
        """Simulate the device state of a meter.

        Active meters are connected with 1-5 signal bars; any other status
        is disconnected with no signal.
        """
        active = meter.status == MeterStatus.ACTIVE
        return TelemetrySnapshot(
            meter_id=meter.id,
            connectivity=Connectivity.CONNECTED if active else Connectivity.DISCONNECTED,
            signal_strength=self.rng.randint(1, 5) if active else 0,
            battery_level=self.rng.randint(0, 99),
        )

    def snapshots(self, meters: Iterable[Meter]) -> list[TelemetrySnapshot]:
        return [self.snapshot(meter) for meter in meters]
