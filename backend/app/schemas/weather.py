from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.readings import PVGISSummaryResponse


class PVGISRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    peakpower_kw: float = Field(gt=0, le=1000, description="Installed PV peak power (kWp)")
    loss_pct: float = Field(default=14.0, ge=0, lt=100)
    tilt_deg: float = Field(default=35.0, ge=0, le=90)
    azimuth_deg: float = Field(
        default=180.0, ge=0, lt=360, description="Compass azimuth, 180 = south"
    )
    year: int | None = Field(default=None, ge=2005, le=2023)
    scale: float = Field(default=1.0, gt=0, description="Multiplier applied to PV output")


class GenerationPoint(BaseModel):
    timestamp: datetime
    generation: float


class PVGISGenerationResponse(BaseModel):
    summary: PVGISSummaryResponse
    specified_peak_power_kw: float
    generation: list[GenerationPoint]
