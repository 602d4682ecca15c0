"""Demo fixtures: generated portfolios and simulated meter telemetry."""

from smarta.fixtures.base import BaseGenerator
from smarta.fixtures.portfolio import PortfolioGenerator, PortfolioSummary
from smarta.fixtures.telemetry import SimulatedTelemetry, TelemetrySnapshot

__all__ = [
    "BaseGenerator",
    "PortfolioGenerator",
    "PortfolioSummary",
    "SimulatedTelemetry",
    "TelemetrySnapshot",
]
