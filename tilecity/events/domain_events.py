"""Domain events exchanged between the game layer and the city systems.

Events are immutable facts and carry everything a handler needs.

Inbound (from the game layer or the construction step):
    BuildingCompleted   - a building finished construction
    OccupancyChanged    - residents/workers of a building changed

Outbound (produced by the core):
    HomeAssigned        - an inhabitant was given a house
    JobAssigned         - an inhabitant was given an office
    InhabitantsArrived  - newcomers entered the city
    PowerRebalanced     - an allocation pass changed coverage
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tilecity.entity_ids import BuildingId, InhabitantId
from tilecity.enums import BuildingKind
from tilecity.spatial.position import Position


@dataclass(frozen=True)
class BuildingCompleted:
    """A building is ready.

    Attributes:
        building_id: ID of the new building
        kind: What was built
        position: Cell it occupies
        capacity: Residents, workers or Wh it offers (0 if none)
        tick: Simulation tick when this occurred
    """

    building_id: BuildingId
    kind: BuildingKind
    position: Position
    capacity: int
    tick: int = 0


@dataclass(frozen=True)
class OccupancyChanged:
    """Residents or workers of a building changed by ``delta_count``.

    The game layer only needs to fill in ``building_id`` and ``delta_count``.
    Events published on the bus always carry the building kind and the new
    occupancy as recorded by the core.
    """

    building_id: BuildingId
    delta_count: int
    kind: Optional[BuildingKind] = None
    occupancy: Optional[int] = None
    tick: int = 0


@dataclass(frozen=True)
class HomeAssigned:
    inhabitant_id: InhabitantId
    house_id: BuildingId
    house_position: Position
    tick: int = 0


@dataclass(frozen=True)
class JobAssigned:
    inhabitant_id: InhabitantId
    office_id: BuildingId
    office_position: Position
    tick: int = 0


@dataclass(frozen=True)
class InhabitantsArrived:
    inhabitant_ids: tuple[InhabitantId, ...]
    tick: int = 0


@dataclass(frozen=True)
class PowerRebalanced:
    consumers_changed: int
    producers_changed: int
    missing_wh: int
    tick: int = 0
