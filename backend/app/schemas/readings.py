from datetime import datetime

from pydantic import BaseModel

from app.schemas.simulation import ReadingIn


class DataSummary(BaseModel):
    intervals: int
    months: int
    start: datetime | None
    end: datetime | None
    total_consumption_kwh: float
    total_generation_kwh: float


class PVGISSummaryResponse(BaseModel):
    monthly_generation_kwh: list[float]
    total_annual_generation_kwh: float
    peak_power_kw: float
    year_used: int
    is_multi_year: bool


class ReadingsUploadResponse(BaseModel):
    readings: list[ReadingIn]
    summary: DataSummary
    warnings: list[str]
    pvgis: PVGISSummaryResponse | None = None
    specified_peak_power_kw: float | None = None
