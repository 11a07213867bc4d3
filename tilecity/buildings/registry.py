"""Building placement, construction progress and occupancy.

The registry is the city's record of what stands where. A construction
request reserves a cell, waits ``time_for_building`` ticks and then turns
into a completed building, which the engine announces as a
``BuildingCompleted`` event so that the street graph, desirability fields,
matching queue and power allocator can pick it up.

Placement rules:
- one building per cell (streets included);
- a house needs a non-negative house desirability at its cell, an office a
  non-negative office desirability. Other kinds may go anywhere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from tilecity.buildings.models import (
    BiomassPowerPlant,
    Building,
    Garden,
    House,
    Office,
    Street,
)
from tilecity.config.city_config import BuildingsConfig
from tilecity.desirability.field import DesirabilityManager, is_positive
from tilecity.entity_ids import BuildingId, IdAllocator
from tilecity.enums import BuildingKind
from tilecity.exceptions import PlacementError
from tilecity.spatial.position import Position

logger = logging.getLogger(__name__)


@dataclass
class BuildingUnderConstruction:
    building: Building
    current_step: int
    step_to_reach: int

    def make_progress(self) -> None:
        assert self.step_to_reach > self.current_step, f"{self.building.id} already finished"
        self.current_step += 1

    def is_completed(self) -> bool:
        return self.current_step >= self.step_to_reach


class BuildingRegistry:
    """Owns every building, finished or not.

    Args:
        config: Per-kind building settings.
        ids: Shared id allocator.
        desirability: Fields consulted before placing houses and offices;
            placement is unrestricted when omitted.
    """

    def __init__(
        self,
        config: BuildingsConfig,
        ids: IdAllocator,
        desirability: Optional[DesirabilityManager] = None,
    ) -> None:
        self._config = config
        self._ids = ids
        self._desirability = desirability
        self._used_positions: Set[Position] = set()
        self._buildings: Dict[BuildingId, Building] = {}
        self._under_construction: List[BuildingUnderConstruction] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def check_site(self, kind: BuildingKind, position: Position) -> None:
        """Raise ``PlacementError`` if *kind* cannot be built at *position*."""
        if position in self._used_positions:
            raise PlacementError(f"position {position} already used")

        if self._desirability is None:
            return
        if kind is BuildingKind.HOUSE:
            score = self._desirability.query_house(position)
        elif kind is BuildingKind.OFFICE:
            score = self._desirability.query_office(position)
        else:
            return
        if not is_positive(score):
            raise PlacementError(f"{kind.value} not wanted at {position} (desirability {score})")

    def reserve(self, position: Position) -> None:
        """Keep *position* free of buildings (e.g. the city entry point)."""
        self._used_positions.add(position)

    def start_construction(
        self, kind: BuildingKind, position: Position
    ) -> BuildingUnderConstruction:
        kind = BuildingKind(kind)
        self.check_site(kind, position)
        self._used_positions.add(position)

        building = self._create(kind, self._ids.next_building_id(), position)
        site = BuildingUnderConstruction(
            building=building,
            current_step=0,
            step_to_reach=self._config.for_kind(kind).time_for_building,
        )
        self._under_construction.append(site)
        logger.debug(f"Started {kind.value} {building.id} at {position}")
        return site

    def advance_construction(self) -> List[Building]:
        """Progress every site by one step and finalise the finished ones.

        Returns:
            Buildings completed by this call, in the order they were started.
        """
        completed: List[Building] = []
        still_building: List[BuildingUnderConstruction] = []

        for site in self._under_construction:
            if not site.is_completed():
                site.make_progress()
            if site.is_completed():
                self._buildings[site.building.id] = site.building
                completed.append(site.building)
                logger.info(
                    f"Completed {site.building.kind.value} {site.building.id} "
                    f"at {site.building.position}"
                )
            else:
                still_building.append(site)

        self._under_construction = still_building
        return completed

    def adopt(
        self,
        kind: BuildingKind,
        building_id: BuildingId,
        position: Position,
        capacity: Optional[int] = None,
    ) -> Building:
        """Record a building completed outside the construction queue.

        Args:
            capacity: Residents, workers or Wh the building offers; the
                configured value for *kind* when omitted.

        Raises:
            PlacementError: If *position* is already taken.
        """
        assert building_id not in self._buildings, f"{building_id} already known"
        kind = BuildingKind(kind)
        if position in self._used_positions:
            raise PlacementError(f"position {position} already used")

        self._ids.observe(building_id)
        self._used_positions.add(position)
        building = self._create(kind, building_id, position, capacity)
        self._buildings[building_id] = building
        logger.info(f"Adopted {kind.value} {building_id} at {position}")
        return building

    def _create(
        self,
        kind: BuildingKind,
        building_id: BuildingId,
        position: Position,
        capacity: Optional[int] = None,
    ) -> Building:
        if kind is BuildingKind.HOUSE:
            if capacity is None:
                capacity = self._config.house.max_residents
            return House(building_id, position, capacity)
        if kind is BuildingKind.OFFICE:
            if capacity is None:
                capacity = self._config.office.max_workers
            return Office(building_id, position, capacity)
        if kind is BuildingKind.GARDEN:
            return Garden(building_id, position)
        if kind is BuildingKind.STREET:
            return Street(building_id, position)
        if kind is BuildingKind.BIOMASS_POWER_PLANT:
            if capacity is None:
                capacity = self._config.biomass_power_plant.capacity_wh
            return BiomassPowerPlant(building_id, position, capacity)
        raise PlacementError(f"unknown building kind {kind!r}")

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    def record_arrival(self, building_id: BuildingId, count: int) -> Optional[int]:
        """Move *count* occupants into a house or office.

        Returns:
            The building's new occupancy, or ``None`` when *building_id* is
            not a completed house or office.
        """
        building = self._buildings.get(building_id)
        if isinstance(building, House):
            building.inhabitants_arrived(count)
            return building.current_residents
        if isinstance(building, Office):
            building.workers_arrived(count)
            return building.current_workers
        return None

    def record_departure(self, building_id: BuildingId, count: int = 1) -> Optional[int]:
        building = self._buildings.get(building_id)
        if isinstance(building, House):
            for _ in range(count):
                building.inhabitant_left()
            return building.current_residents
        if isinstance(building, Office):
            for _ in range(count):
                building.worker_left()
            return building.current_workers
        return None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, building_id: BuildingId) -> Optional[Building]:
        return self._buildings.get(building_id)

    def house(self, building_id: BuildingId) -> Optional[House]:
        building = self._buildings.get(building_id)
        return building if isinstance(building, House) else None

    def office(self, building_id: BuildingId) -> Optional[Office]:
        building = self._buildings.get(building_id)
        return building if isinstance(building, Office) else None

    def at(self, position: Position) -> Optional[Building]:
        for building in self._buildings.values():
            if building.position == position:
                return building
        return None

    @property
    def buildings(self) -> List[Building]:
        return list(self._buildings.values())

    @property
    def under_construction(self) -> List[BuildingUnderConstruction]:
        return list(self._under_construction)

    def count(self, kind: BuildingKind) -> int:
        return sum(1 for b in self._buildings.values() if b.kind is kind)
