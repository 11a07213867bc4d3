"""Building records.

``Building`` is a tagged union of five dataclasses. Code that needs a
specific variant asks for it with ``isinstance`` (or through the registry's
``house()`` / ``office()`` accessors, which return ``None`` for the wrong
variant) instead of assuming it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tilecity.entity_ids import BuildingId
from tilecity.enums import BuildingKind
from tilecity.spatial.position import Position


@dataclass
class House:
    id: BuildingId
    position: Position
    max_residents: int
    current_residents: int = 0

    kind = BuildingKind.HOUSE

    def inhabitants_arrived(self, count: int) -> None:
        self.current_residents += count
        assert self.current_residents <= self.max_residents, f"{self.id} is over-full"

    def inhabitant_left(self) -> None:
        assert self.current_residents >= 1, f"{self.id} is already empty"
        self.current_residents -= 1

    @property
    def occupancy(self) -> int:
        return self.current_residents


@dataclass
class Office:
    id: BuildingId
    position: Position
    max_workers: int
    current_workers: int = 0

    kind = BuildingKind.OFFICE

    def workers_arrived(self, count: int) -> None:
        self.current_workers += count
        assert self.current_workers <= self.max_workers, f"{self.id} is over-staffed"

    def worker_left(self) -> None:
        assert self.current_workers >= 1, f"{self.id} has no workers"
        self.current_workers -= 1

    @property
    def occupancy(self) -> int:
        return self.current_workers


@dataclass
class Garden:
    id: BuildingId
    position: Position

    kind = BuildingKind.GARDEN


@dataclass
class Street:
    id: BuildingId
    position: Position

    kind = BuildingKind.STREET


@dataclass
class BiomassPowerPlant:
    id: BuildingId
    position: Position
    capacity_wh: int

    kind = BuildingKind.BIOMASS_POWER_PLANT


Building = Union[House, Office, Garden, Street, BiomassPowerPlant]


def capacity_of(building: Building) -> int:
    """Occupant slots, or watt-hours for producers; 0 for everything else."""
    if isinstance(building, House):
        return building.max_residents
    if isinstance(building, Office):
        return building.max_workers
    if isinstance(building, BiomassPowerPlant):
        return building.capacity_wh
    return 0
