"""Battery storage engine -- SOC window tracking with round-trip losses."""

from .soc_tracker import SOCTracker

__all__ = ["SOCTracker"]
