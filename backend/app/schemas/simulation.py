from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from engine.dispatch.strategies import Strategy


class ReadingIn(BaseModel):
    timestamp: datetime
    consumption: float = Field(ge=0)
    generation: float = Field(default=0.0, ge=0)


class BatteryConfig(BaseModel):
    capacity_kwh: float = Field(gt=0, le=1000)
    usable_capacity_pct: float = Field(default=100.0, gt=0, le=100)
    min_soc_pct: float = Field(default=10.0, ge=0, le=100)
    max_soc_pct: float = Field(default=100.0, ge=0, le=100)
    max_charge_rate_kw: float = Field(default=5.0, ge=0)
    max_discharge_rate_kw: float | None = Field(default=None, ge=0)
    roundtrip_efficiency: float = Field(default=0.90, gt=0, le=1)
    system_cost: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _soc_window(self) -> "BatteryConfig":
        if self.min_soc_pct > self.max_soc_pct:
            raise ValueError("min_soc_pct must not exceed max_soc_pct")
        return self


class GridConfig(BaseModel):
    mic_kw: float = Field(default=12.0, ge=0)
    mec_kw: float = Field(default=6.0, ge=0)


class TariffConfig(BaseModel):
    type: Literal["flat", "hourly"] = "flat"
    buy_rate: float = Field(default=0.30, ge=0)
    sell_rate: float = Field(default=0.15, ge=0)
    import_prices: list[float] | None = Field(default=None, min_length=24, max_length=24)
    export_prices: list[float] | None = Field(default=None, min_length=24, max_length=24)
    force_charge_hours: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _hourly_prices(self) -> "TariffConfig":
        if self.type == "hourly" and (self.import_prices is None or self.export_prices is None):
            raise ValueError("hourly tariffs need import_prices and export_prices")
        if any(not 0 <= h <= 23 for h in self.force_charge_hours):
            raise ValueError("force_charge_hours must be in 0..23")
        return self


class SimulationRequest(BaseModel):
    readings: list[ReadingIn] = Field(min_length=1)
    battery: BatteryConfig
    grid: GridConfig = Field(default_factory=GridConfig)
    tariff: TariffConfig = Field(default_factory=TariffConfig)
    strategies: list[Strategy] = Field(
        default_factory=lambda: [Strategy.SELF_CONSUMPTION], min_length=1
    )
    include_log: bool = False


class SweepRequest(SimulationRequest):
    sizes_kwh: list[float] | None = Field(default=None, min_length=1, max_length=40)


class ExportRequest(SimulationRequest):
    kind: Literal["detailed", "monthly"] = "detailed"


# ======================================================================
# Responses
# ======================================================================

class MonthlySummaryResponse(BaseModel):
    cost_without_battery: float
    cost_with_battery: float
    export_revenue: float
    consumption: float
    generation: float
    import_without_battery: float
    import_with_battery: float
    export_without_battery: float
    export_with_battery: float
    charged_to_battery: float
    discharged_from_battery: float
    curtailed: float
    missed_full_charges: int
    savings: float
    bill_after: float


class LogEntryResponse(BaseModel):
    timestamp: datetime
    consumption: float
    generation: float
    grid_import: float
    grid_export: float
    battery_charge: float
    battery_discharge: float
    battery_soc: float


class SimulationResultResponse(BaseModel):
    strategy: Strategy
    annual_savings: float
    payback_period_years: float | None
    self_sufficiency_pct: float
    annual_bill_before: float
    annual_bill_after: float
    annual_import_before: float
    annual_export_before: float
    annual_import_after: float
    annual_export_after: float
    annual_charged_kwh: float
    annual_discharged_kwh: float
    missed_full_charges: int
    total_intervals: int
    days_simulated: float
    scaling_factor: float
    monthly_data: dict[str, MonthlySummaryResponse]
    detailed_log: list[LogEntryResponse] | None = None


class BaselineResponse(BaseModel):
    annual_import_kwh: float
    annual_export_kwh: float
    annual_bill: float
    annual_export_revenue: float
    scaling_factor: float


class ComparisonResponse(BaseModel):
    baseline: BaselineResponse
    results: list[SimulationResultResponse]


class SweepPointResponse(BaseModel):
    size_kwh: float
    annual_savings: float
    payback_period_years: float | None


class SweepCurveResponse(BaseModel):
    strategy: Strategy
    points: list[SweepPointResponse]
    best_size_kwh: float | None


class SweepResponse(BaseModel):
    sizes_kwh: list[float]
    curves: list[SweepCurveResponse]
