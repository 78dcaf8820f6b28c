"""Shared test fixtures for SunStore engine and API tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from engine.dispatch.strategies import Strategy
from engine.grid.tariff import TariffSchedule
from engine.load.readings import IntervalReading
from engine.simulation.parameters import SimulationParameters

INTERVALS_PER_DAY = 48
HALF_HOUR = timedelta(minutes=30)
START_2023 = datetime(2023, 1, 1, tzinfo=timezone.utc)


def make_readings(
    consumption: np.ndarray,
    generation: np.ndarray,
    start: datetime = START_2023,
) -> list[IntervalReading]:
    """Half-hourly readings starting at *start*."""
    return [
        IntervalReading(
            timestamp=start + i * HALF_HOUR,
            consumption=float(c),
            generation=float(g),
        )
        for i, (c, g) in enumerate(zip(consumption, generation))
    ]


def synthetic_profile(days: int, seed: int = 42, start: datetime = START_2023) -> list[IntervalReading]:
    """Household-like consumption with a daytime solar bell, seasonally scaled."""
    rng = np.random.default_rng(seed)
    n = days * INTERVALS_PER_DAY
    idx = np.arange(n, dtype=np.float64)
    hour = (idx % INTERVALS_PER_DAY) / 2.0
    day_of_year = (idx // INTERVALS_PER_DAY + start.timetuple().tm_yday - 1) % 365

    # Consumption: base load with morning and evening peaks (kWh per half hour)
    consumption = 0.15 + 0.25 * np.exp(-((hour - 8.0) ** 2) / 2.0)
    consumption += 0.45 * np.exp(-((hour - 19.0) ** 2) / 3.0)
    consumption += rng.uniform(0.0, 0.05, n)

    # Generation: zero at night, stronger in summer
    season = 0.55 + 0.45 * np.cos(2 * np.pi * (day_of_year - 172) / 365)
    daylight = np.clip(np.sin(np.pi * (hour - 6.0) / 14.0), 0.0, None)
    generation = 1.6 * season * daylight * rng.uniform(0.6, 1.0, n)

    return make_readings(consumption, generation, start)


# ======================================================================
# Readings
# ======================================================================

@pytest.fixture(scope="session")
def sample_year() -> list[IntervalReading]:
    """A full 2023 calendar year of synthetic half-hourly readings."""
    return synthetic_profile(365)


@pytest.fixture(scope="session")
def sample_fortnight() -> list[IntervalReading]:
    """Two weeks in late spring, enough for fast multi-run tests."""
    return synthetic_profile(14, seed=7, start=datetime(2023, 5, 1, tzinfo=timezone.utc))


# ======================================================================
# Tariffs and parameters
# ======================================================================

@pytest.fixture
def flat_tariff() -> TariffSchedule:
    return TariffSchedule.flat(buy_rate=0.30, sell_rate=0.15)


@pytest.fixture
def night_tariff() -> TariffSchedule:
    """Cheap night rate 02:00-05:00, force charging in that window."""
    imports = [0.35] * 24
    for h in (2, 3, 4):
        imports[h] = 0.10
    return TariffSchedule(
        import_prices=tuple(imports),
        export_prices=(0.18,) * 24,
        force_charge_hours=tuple(h in (2, 3, 4) for h in range(24)),
    )


def build_params(
    tariff: TariffSchedule,
    strategy: Strategy = Strategy.SELF_CONSUMPTION,
    **overrides,
) -> SimulationParameters:
    values = dict(
        battery_capacity_kwh=10.0,
        usable_capacity_kwh=10.0,
        min_soc_pct=10.0,
        max_soc_pct=100.0,
        max_charge_rate_kw=5.0,
        max_discharge_rate_kw=5.0,
        roundtrip_efficiency=0.9,
        strategy=strategy,
        mic_kw=10.0,
        mec_kw=6.0,
        tariff=tariff,
        system_cost=5000.0,
    )
    values.update(overrides)
    return SimulationParameters(**values)


@pytest.fixture
def base_params(flat_tariff) -> SimulationParameters:
    return build_params(flat_tariff)


@pytest.fixture
def night_params(night_tariff) -> SimulationParameters:
    return build_params(night_tariff, Strategy.EXPORT_MAXIMISER)


@pytest.fixture
def params_factory():
    """``params_factory(tariff, strategy, **overrides)`` -> SimulationParameters."""
    return build_params


@pytest.fixture
def readings_factory():
    """``readings_factory(consumption, generation, start=...)`` -> readings."""
    return make_readings
