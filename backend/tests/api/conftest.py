"""API test infrastructure -- async httpx client over the ASGI app."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core import rate_limit


@pytest_asyncio.fixture
async def app(monkeypatch):
    from app.main import create_app

    # Worker processes are slow to start for the small request payloads used here
    monkeypatch.setattr(settings, "sweep_executor", "serial")

    for limiter in (
        rate_limit.upload_limiter,
        rate_limit.simulation_limiter,
        rate_limit.sweep_limiter,
        rate_limit.export_limiter,
        rate_limit.weather_limiter,
    ):
        limiter.reset()

    yield create_app()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def readings_payload(sample_fortnight) -> list[dict]:
    return [
        {
            "timestamp": r.timestamp.isoformat(),
            "consumption": r.consumption,
            "generation": r.generation,
        }
        for r in sample_fortnight[: 7 * 48]
    ]


@pytest.fixture
def simulation_body(readings_payload) -> dict:
    return {
        "readings": readings_payload,
        "battery": {
            "capacity_kwh": 10,
            "max_charge_rate_kw": 5,
            "roundtrip_efficiency": 0.9,
            "system_cost": 5000,
        },
        "grid": {"mic_kw": 10, "mec_kw": 6},
        "tariff": {
            "type": "flat",
            "buy_rate": 0.30,
            "sell_rate": 0.15,
            "force_charge_hours": [2, 3, 4],
        },
        "strategies": ["self-consumption", "export-maximiser"],
    }
