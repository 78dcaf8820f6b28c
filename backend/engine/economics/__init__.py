"""Economic analysis module."""

from .aggregator import DAYS_IN_YEAR, SimulationResult, aggregate_results

__all__ = ["DAYS_IN_YEAR", "SimulationResult", "aggregate_results"]
