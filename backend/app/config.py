from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "case_sensitive": False}

    # App
    environment: str = "development"
    debug: bool = True
    app_name: str = "SunStore"
    log_json: bool = False
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Readings
    interval_minutes: int = 30
    max_upload_mb: int = 20

    # Size sweep / strategy comparison
    sweep_sizes_kwh: list[float] = [5, 10, 15, 20, 25, 30, 35, 40]
    sweep_executor: Literal["process", "thread", "serial"] = "process"
    sweep_max_workers: int | None = None

    # PVGIS
    pvgis_base_url: str = "https://re.jrc.ec.europa.eu/api/v5_3"

    @property
    def interval_hours(self) -> float:
        return self.interval_minutes / 60.0


settings = Settings()
