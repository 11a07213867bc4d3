"""Capacity-constrained matching of inhabitants to houses and offices.

Two pipelines share one algorithm:

    housing     newcomers           -> houses with free beds
    employment  housed job seekers  -> offices with free desks

Each pipeline keeps a *supply* pool (buildings with remaining capacity) and
a *demand* pool (inhabitants waiting). ``match_one`` proposes a single
pairing; the caller then validates it (typically: is there a street route?)
and either ``confirm``s or ``resign``s it. Resigning puts both sides back
exactly as they were, so a failed proposal costs nothing but a retry on a
later tick.

Selection is "first available": the oldest supply entry with remaining
capacity and the oldest waiting requester that qualifies for it. Pools are
insertion-ordered so replays are reproducible; no nearest-first or fairness
policy is applied.

Bookkeeping invariant, per pipeline and at every point in time:

    introduced == matched + pending

where *matched* counts proposals in flight plus confirmed pairings and
*pending* counts requesters still waiting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from tilecity.entity_ids import BuildingId, InhabitantId
from tilecity.enums import AssignmentKind, EducationLevel
from tilecity.inhabitants.inhabitant import Inhabitant
from tilecity.spatial.position import Position

logger = logging.getLogger(__name__)


@dataclass
class SupplyEntry:
    """A building that still has room."""

    building_id: BuildingId
    position: Position
    remaining: int
    required_level: EducationLevel = EducationLevel.NONE


@dataclass(frozen=True)
class DemandEntry:
    """A requester waiting for a building.

    Attributes:
        inhabitant_id: Who is waiting.
        education_level: Checked against the building's requirement.
        origin: Where the requester would set off from, if known.
    """

    inhabitant_id: InhabitantId
    education_level: EducationLevel = EducationLevel.NONE
    origin: Optional[Position] = None


@dataclass(frozen=True)
class AssignmentResult:
    """A proposed pairing between a requester and a building."""

    kind: AssignmentKind
    from_id: InhabitantId
    from_position: Position
    to_building_id: BuildingId
    to_position: Position
    count: int = 1


class MatchingPipeline:
    """One supply pool matched against one demand pool."""

    def __init__(self, kind: AssignmentKind, default_origin: Position) -> None:
        self.kind = kind
        self.default_origin = default_origin
        self._supply: Dict[BuildingId, SupplyEntry] = {}
        self._demand: Dict[InhabitantId, DemandEntry] = {}
        self._in_flight: Dict[InhabitantId, DemandEntry] = {}
        self._confirmed: Dict[InhabitantId, BuildingId] = {}
        self._required_levels: Dict[BuildingId, EducationLevel] = {}
        self._introduced = 0

    # ------------------------------------------------------------------
    # Pools
    # ------------------------------------------------------------------

    def register_supply(
        self,
        building_id: BuildingId,
        position: Position,
        capacity: int,
        required_level: EducationLevel = EducationLevel.NONE,
    ) -> None:
        """Offer *capacity* slots; an existing entry accumulates capacity."""
        assert capacity >= 0, f"negative capacity {capacity} for {building_id}"
        self._required_levels.setdefault(building_id, required_level)
        entry = self._supply.get(building_id)
        if entry is None:
            self._supply[building_id] = SupplyEntry(building_id, position, capacity, required_level)
        else:
            entry.remaining += capacity
        logger.debug(f"{self.kind.value}: {building_id} offers {capacity} more slot(s)")

    def introduce_demand(
        self,
        inhabitant_id: InhabitantId,
        education_level: EducationLevel = EducationLevel.NONE,
        origin: Optional[Position] = None,
    ) -> None:
        assert inhabitant_id not in self._demand, f"{inhabitant_id} already waiting"
        assert inhabitant_id not in self._in_flight, f"{inhabitant_id} already proposed"
        assert inhabitant_id not in self._confirmed, f"{inhabitant_id} already matched"
        self._demand[inhabitant_id] = DemandEntry(inhabitant_id, education_level, origin)
        self._introduced += 1

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match_one(self) -> List[AssignmentResult]:
        """Propose at most one pairing.

        Returns:
            A one-element list with the proposal, or an empty list when
            either pool is empty or nobody qualifies for the chosen building.
        """
        if not self._supply or not self._demand:
            return []

        entry = self._first_open_supply()
        if entry is None:
            return []

        demand = next(
            (d for d in self._demand.values() if d.education_level >= entry.required_level),
            None,
        )
        if demand is None:
            return []

        del self._demand[demand.inhabitant_id]
        self._in_flight[demand.inhabitant_id] = demand
        entry.remaining -= 1

        assignment = AssignmentResult(
            kind=self.kind,
            from_id=demand.inhabitant_id,
            from_position=demand.origin if demand.origin is not None else self.default_origin,
            to_building_id=entry.building_id,
            to_position=entry.position,
            count=1,
        )
        logger.debug(
            f"{self.kind.value}: proposed {demand.inhabitant_id} -> {entry.building_id}"
        )
        return [assignment]

    def _first_open_supply(self) -> Optional[SupplyEntry]:
        # Exhausted entries are dropped lazily here rather than on decrement.
        while self._supply:
            building_id, entry = next(iter(self._supply.items()))
            if entry.remaining > 0:
                return entry
            del self._supply[building_id]
        return None

    def resign(self, assignment: AssignmentResult) -> None:
        """Undo a proposal that failed validation."""
        demand = self._in_flight.pop(assignment.from_id, None)
        assert demand is not None, f"{assignment.from_id} has no proposal in flight"
        self._demand[demand.inhabitant_id] = demand

        entry = self._supply.get(assignment.to_building_id)
        if entry is None:
            self._supply[assignment.to_building_id] = SupplyEntry(
                assignment.to_building_id,
                assignment.to_position,
                assignment.count,
                self._required_levels.get(assignment.to_building_id, EducationLevel.NONE),
            )
        else:
            entry.remaining += assignment.count
            # rotate to the back so the next proposal tries another building
            del self._supply[assignment.to_building_id]
            self._supply[assignment.to_building_id] = entry
        logger.debug(
            f"{self.kind.value}: resigned {assignment.from_id} -> {assignment.to_building_id}"
        )

    def take_supply(self, building_id: BuildingId, count: int) -> int:
        """Claim up to *count* free slots outside matching.

        Returns:
            How many slots were actually taken.
        """
        entry = self._supply.get(building_id)
        if entry is None:
            return 0
        taken = min(count, entry.remaining)
        entry.remaining -= taken
        return taken

    def return_supply(self, building_id: BuildingId, position: Position, count: int) -> None:
        """Give back slots vacated by occupants who left."""
        self.register_supply(
            building_id,
            position,
            count,
            self._required_levels.get(building_id, EducationLevel.NONE),
        )

    def confirm(self, assignment: AssignmentResult) -> DemandEntry:
        """Finalise a proposal; the requester leaves the pipeline for good."""
        demand = self._in_flight.pop(assignment.from_id, None)
        assert demand is not None, f"{assignment.from_id} has no proposal in flight"
        self._confirmed[assignment.from_id] = assignment.to_building_id
        return demand

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def remaining(self, building_id: BuildingId) -> int:
        entry = self._supply.get(building_id)
        return entry.remaining if entry is not None else 0

    @property
    def free_capacity(self) -> int:
        return sum(entry.remaining for entry in self._supply.values())

    @property
    def introduced_count(self) -> int:
        return self._introduced

    @property
    def pending_count(self) -> int:
        return len(self._demand)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    @property
    def confirmed_count(self) -> int:
        return len(self._confirmed)

    @property
    def matched_count(self) -> int:
        return len(self._in_flight) + len(self._confirmed)

    def is_waiting(self, inhabitant_id: InhabitantId) -> bool:
        return inhabitant_id in self._demand


class AssignmentQueue:
    """Housing and employment matching plus the inhabitant records.

    Example:
        queue = AssignmentQueue(entry_point=Position(0, 0))
        queue.register_house(BuildingId(1), Position(2, 1), capacity=8)
        queue.introduce_inhabitant(Inhabitant(InhabitantId(0)))
        [proposal] = queue.match_housing()
        if route_exists:
            queue.confirm(proposal)
        else:
            queue.resign(proposal)
    """

    def __init__(self, entry_point: Position = Position(0, 0)) -> None:
        self.housing = MatchingPipeline(AssignmentKind.HOUSING, entry_point)
        self.employment = MatchingPipeline(AssignmentKind.EMPLOYMENT, entry_point)
        self._inhabitants: Dict[InhabitantId, Inhabitant] = {}

    def pipeline(self, kind: AssignmentKind) -> MatchingPipeline:
        if kind is AssignmentKind.HOUSING:
            return self.housing
        return self.employment

    # ------------------------------------------------------------------
    # Supply
    # ------------------------------------------------------------------

    def register_supply(
        self,
        kind: AssignmentKind,
        building_id: BuildingId,
        position: Position,
        capacity: int,
        required_level: EducationLevel = EducationLevel.NONE,
    ) -> None:
        self.pipeline(kind).register_supply(building_id, position, capacity, required_level)

    def register_house(self, building_id: BuildingId, position: Position, capacity: int) -> None:
        logger.info(f"Register house {building_id} at {position} ({capacity} beds)")
        self.housing.register_supply(building_id, position, capacity)

    def register_office(
        self,
        building_id: BuildingId,
        position: Position,
        capacity: int,
        required_level: EducationLevel = EducationLevel.NONE,
    ) -> None:
        logger.info(f"Register office {building_id} at {position} ({capacity} desks)")
        self.employment.register_supply(building_id, position, capacity, required_level)

    def take_slots(self, kind: AssignmentKind, building_id: BuildingId, count: int) -> int:
        return self.pipeline(kind).take_supply(building_id, count)

    def return_slots(
        self, kind: AssignmentKind, building_id: BuildingId, position: Position, count: int
    ) -> None:
        self.pipeline(kind).return_supply(building_id, position, count)

    # ------------------------------------------------------------------
    # Demand
    # ------------------------------------------------------------------

    def introduce_demand(
        self,
        kind: AssignmentKind,
        inhabitant_id: InhabitantId,
        education_level: EducationLevel = EducationLevel.NONE,
        origin: Optional[Position] = None,
    ) -> None:
        self.pipeline(kind).introduce_demand(inhabitant_id, education_level, origin)

    def introduce_inhabitant(self, inhabitant: Inhabitant) -> None:
        """Add a newcomer to the housing demand pool."""
        self._inhabitants.setdefault(inhabitant.id, inhabitant)
        self.housing.introduce_demand(inhabitant.id, inhabitant.education_level)

    def register_job_seeker(self, inhabitant_id: InhabitantId) -> bool:
        """Queue a housed, unemployed inhabitant for a job.

        Returns:
            False when the inhabitant is unknown, homeless or employed.
        """
        inhabitant = self._inhabitants.get(inhabitant_id)
        if inhabitant is None or inhabitant.home is None or inhabitant.workplace is not None:
            return False
        self.employment.introduce_demand(
            inhabitant_id, inhabitant.education_level, inhabitant.home.house_position
        )
        return True

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match_housing(self) -> List[AssignmentResult]:
        return self.housing.match_one()

    def match_employment(self) -> List[AssignmentResult]:
        return self.employment.match_one()

    def resign(self, assignment: AssignmentResult) -> None:
        self.pipeline(assignment.kind).resign(assignment)

    def confirm(self, assignment: AssignmentResult) -> Optional[Inhabitant]:
        """Finalise a proposal and record it on the inhabitant.

        Returns:
            The updated inhabitant record, if the queue knows it.
        """
        self.pipeline(assignment.kind).confirm(assignment)
        inhabitant = self._inhabitants.get(assignment.from_id)
        if inhabitant is None:
            return None
        if assignment.kind is AssignmentKind.HOUSING:
            inhabitant.home_found(assignment.to_building_id, assignment.to_position)
            logger.info(f"Found home for {assignment.from_id} in {assignment.to_building_id}")
        else:
            inhabitant.workplace_found(assignment.to_building_id, assignment.to_position)
            logger.info(f"Found work for {assignment.from_id} in {assignment.to_building_id}")
        return inhabitant

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def inhabitant(self, inhabitant_id: InhabitantId) -> Optional[Inhabitant]:
        return self._inhabitants.get(inhabitant_id)

    @property
    def inhabitants(self) -> List[Inhabitant]:
        return list(self._inhabitants.values())

    @property
    def free_housing(self) -> int:
        return self.housing.free_capacity

    @property
    def waiting_home_seekers(self) -> int:
        return self.housing.pending_count
