"""Grid tariff module."""

from .tariff import HOURS_PER_DAY, TariffSchedule

__all__ = ["HOURS_PER_DAY", "TariffSchedule"]
