from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.api.v1 import readings, reports, simulations, weather
from engine.dispatch.strategies import Strategy


def create_app() -> FastAPI:
    setup_logging(json_format=settings.log_json, level=settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(readings.router, prefix="/api/v1/readings", tags=["readings"])
    application.include_router(
        simulations.router, prefix="/api/v1/simulations", tags=["simulations"]
    )
    application.include_router(reports.router, prefix="/api/v1/simulations", tags=["reports"])
    application.include_router(weather.router, prefix="/api/v1/weather", tags=["weather"])

    @application.get("/health")
    async def health_check() -> dict:
        return {"status": "ok", "environment": settings.environment}

    @application.get("/api/v1/strategies", tags=["simulations"])
    async def list_strategies() -> list[dict]:
        return [
            {
                "value": s.value,
                "label": s.label,
                "needs_force_charge_hours": s.traits.force_charges,
            }
            for s in Strategy
        ]

    return application


app = create_app()
