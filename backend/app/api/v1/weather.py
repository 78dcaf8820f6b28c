import logging

import httpx
from fastapi import APIRouter, HTTPException, Request, status

from app.core.rate_limit import weather_limiter
from app.schemas.weather import PVGISGenerationResponse, PVGISRequest
from app.services.weather_service import fetch_pvgis_generation

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/pvgis",
    response_model=PVGISGenerationResponse,
    summary="Fetch PVGIS generation",
    description=(
        "Download an hourly PV output series from PVGIS for the given location "
        "and array, split into half-hourly generation with a yearly summary."
    ),
)
async def fetch_pvgis(body: PVGISRequest, request: Request):
    weather_limiter.check(request)
    try:
        return await fetch_pvgis_generation(body)
    except httpx.HTTPError as exc:
        logger.warning("PVGIS request failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"PVGIS request failed: {exc}",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
