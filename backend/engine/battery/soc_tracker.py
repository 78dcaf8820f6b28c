"""
State of Charge (SOC) tracker for a home battery, in kWh.

Tracks energy flowing in and out of the battery while applying round-trip
efficiency losses symmetrically to charge and discharge.  Enforces the
usable SOC window and returns the energy actually moved when a request
would push the battery outside that window.
"""

from __future__ import annotations

import math


class SOCTracker:
    """Energy-counting SOC tracker with efficiency and SOC bounds.

    Efficiency convention
    ---------------------
    The round-trip efficiency ``eta`` is split equally across charge and
    discharge using ``sqrt(eta)``:

    * **Charging** -- of the ``E`` kWh sent to the battery, only
      ``E * sqrt(eta)`` is stored.
    * **Discharging** -- to deliver ``E`` kWh to the home or grid, the
      battery must release ``E / sqrt(eta)`` internally.

    Parameters
    ----------
    min_soc_kwh : float
        Lower bound of the usable window (kWh).
    max_soc_kwh : float
        Upper bound of the usable window (kWh).
    efficiency : float
        Round-trip efficiency in (0, 1].
    initial_soc_kwh : float or None
        Starting SOC.  Defaults to *min_soc_kwh* (an "empty" battery).
    """

    def __init__(
        self,
        min_soc_kwh: float,
        max_soc_kwh: float,
        efficiency: float,
        initial_soc_kwh: float | None = None,
    ) -> None:
        if not 0 < efficiency <= 1.0:
            raise ValueError(f"efficiency must be in (0, 1], got {efficiency}")
        if not 0 <= min_soc_kwh <= max_soc_kwh:
            raise ValueError(
                f"Need 0 <= min_soc_kwh <= max_soc_kwh, got "
                f"min_soc_kwh={min_soc_kwh}, max_soc_kwh={max_soc_kwh}"
            )

        self.min_soc_kwh: float = min_soc_kwh
        self.max_soc_kwh: float = max_soc_kwh
        self.efficiency: float = efficiency
        self.eta_one_way: float = math.sqrt(efficiency)

        start = min_soc_kwh if initial_soc_kwh is None else initial_soc_kwh
        self._initial_soc: float = min(max(start, min_soc_kwh), max_soc_kwh)
        self._soc: float = self._initial_soc

    # ------------------------------------------------------------------
    # Window queries
    # ------------------------------------------------------------------

    @property
    def soc_kwh(self) -> float:
        return self._soc

    def available_kwh(self) -> float:
        """Battery-side energy above the minimum SOC."""
        return max(0.0, self._soc - self.min_soc_kwh)

    def headroom_kwh(self) -> float:
        """Battery-side space below the maximum SOC."""
        return max(0.0, self.max_soc_kwh - self._soc)

    def deliverable_kwh(self) -> float:
        """Energy the battery can hand out after discharge losses."""
        return self.available_kwh() * self.eta_one_way

    def acceptable_kwh(self) -> float:
        """Energy that can be sent in before the battery is full."""
        return self.headroom_kwh() / self.eta_one_way

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def charge(self, energy_in_kwh: float) -> float:
        """Send *energy_in_kwh* towards the battery.

        Returns the energy accepted (pre-efficiency), which is never more
        than :meth:`acceptable_kwh`.
        """
        accepted = min(max(0.0, energy_in_kwh), self.acceptable_kwh())
        self._soc = min(self._soc + accepted * self.eta_one_way, self.max_soc_kwh)
        return accepted

    def discharge(self, energy_out_kwh: float) -> float:
        """Ask the battery to deliver *energy_out_kwh*.

        Returns the battery-side energy drawn, i.e. the delivered amount
        divided by the one-way efficiency.
        """
        delivered = min(max(0.0, energy_out_kwh), self.deliverable_kwh())
        drawn = delivered / self.eta_one_way
        self._soc = max(self._soc - drawn, self.min_soc_kwh)
        return drawn

    def reset(self) -> None:
        """Reset SOC to the value provided at construction."""
        self._soc = self._initial_soc

    def __repr__(self) -> str:
        return (
            f"SOCTracker(window=[{self.min_soc_kwh:.3f}, {self.max_soc_kwh:.3f}] kWh, "
            f"efficiency={self.efficiency}, soc={self._soc:.4f})"
        )
