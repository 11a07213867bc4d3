"""Per-tick summary returned by ``CitySimulation.tick()``."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class TickReport:
    tick: int
    buildings_completed: int = 0
    streets_linked: int = 0
    inhabitants_arrived: int = 0
    homes_confirmed: int = 0
    homes_resigned: int = 0
    jobs_confirmed: int = 0
    jobs_resigned: int = 0
    trips_completed: int = 0
    power_consumers_changed: int = 0
    power_producers_changed: int = 0
    missing_power_wh: int = 0
    population: int = 0
    system_events: int = 0
    power_changes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
