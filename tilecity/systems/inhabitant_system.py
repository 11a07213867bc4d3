"""Inhabitants: immigration, matching with route validation, and travel.

Per tick the engine drives this system through three steps:

1. ``immigrate``: newcomers arrive at the entry point while there are more
   free beds than people already waiting for one;
2. ``match``: proposals from the assignment queue are validated against
   the street graph. A proposal with a route is confirmed and becomes a
   trip; one without is resigned and retried on a later tick;
3. ``advance_trips``: every trip moves one step. A finished trip moves its
   traveller into the building and announces the new occupancy.

A confirmed home turns the inhabitant into a job seeker, whose employment
proposals start from that home.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from tilecity.buildings.registry import BuildingRegistry
from tilecity.config.city_config import CityConfig
from tilecity.entity_ids import IdAllocator, InhabitantId
from tilecity.enums import AssignmentKind, BuildingKind
from tilecity.events import (
    BuildingCompleted,
    EventBus,
    HomeAssigned,
    InhabitantsArrived,
    JobAssigned,
    OccupancyChanged,
)
from tilecity.inhabitants.assignment_queue import AssignmentQueue, AssignmentResult
from tilecity.inhabitants.inhabitant import Inhabitant
from tilecity.navigation.street_graph import Path, StreetGraph
from tilecity.systems.base import BaseSystem, SystemResult

logger = logging.getLogger(__name__)


@dataclass
class Trip:
    """A confirmed assignment on its way to the building."""

    assignment: AssignmentResult
    path: Path


@dataclass
class MatchOutcome:
    confirmed: int = 0
    resigned: int = 0


class InhabitantSystem(BaseSystem):
    def __init__(
        self,
        bus: EventBus,
        queue: AssignmentQueue,
        graph: StreetGraph,
        registry: BuildingRegistry,
        ids: IdAllocator,
        config: CityConfig,
    ) -> None:
        super().__init__("Inhabitants")
        self._bus = bus
        self._queue = queue
        self._graph = graph
        self._registry = registry
        self._ids = ids
        self._config = config
        self._trips: List[Trip] = []
        bus.subscribe(BuildingCompleted, self.on_building_completed)

    @property
    def queue(self) -> AssignmentQueue:
        return self._queue

    @property
    def trips(self) -> List[Trip]:
        return list(self._trips)

    def on_building_completed(self, event: BuildingCompleted) -> None:
        if event.kind is BuildingKind.HOUSE:
            self._queue.register_house(event.building_id, event.position, event.capacity)
        elif event.kind is BuildingKind.OFFICE:
            self._queue.register_office(
                event.building_id,
                event.position,
                event.capacity,
                self._config.buildings.office.required_education,
            )

    # ------------------------------------------------------------------
    # Immigration
    # ------------------------------------------------------------------

    def immigrate(self, tick: int) -> List[InhabitantId]:
        """Spawn newcomers for the beds nobody is waiting for yet."""
        room = self._queue.free_housing - self._queue.waiting_home_seekers
        count = min(self._config.max_inhabitants_per_tick, room)
        if count <= 0:
            return []

        arrived = []
        for _ in range(count):
            inhabitant = Inhabitant(self._ids.next_inhabitant_id())
            self._queue.introduce_inhabitant(inhabitant)
            arrived.append(inhabitant.id)

        logger.info(f"{count} inhabitant(s) arrived at {self._config.entry_position}")
        self._bus.emit(InhabitantsArrived(inhabitant_ids=tuple(arrived), tick=tick))
        return arrived

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match(self, kind: AssignmentKind, tick: int) -> MatchOutcome:
        """Propose, validate and settle pairings for one pipeline.

        At most one attempt per requester waiting at the start of the call,
        so a tick where nothing is reachable still terminates.
        """
        pipeline = self._queue.pipeline(kind)
        outcome = MatchOutcome()

        for _ in range(pipeline.pending_count):
            proposals = pipeline.match_one()
            if not proposals:
                break
            for assignment in proposals:
                path = self._graph.get_route(assignment.from_position, assignment.to_position)
                if path is None:
                    self._queue.resign(assignment)
                    outcome.resigned += 1
                    continue
                self._settle(assignment, path, tick)
                outcome.confirmed += 1

        if outcome.confirmed or outcome.resigned:
            logger.debug(
                f"{kind.value} matching: {outcome.confirmed} confirmed, "
                f"{outcome.resigned} resigned"
            )
        return outcome

    def _settle(self, assignment: AssignmentResult, path: Path, tick: int) -> None:
        self._queue.confirm(assignment)
        self._trips.append(Trip(assignment, path))

        if assignment.kind is AssignmentKind.HOUSING:
            self._bus.emit(
                HomeAssigned(
                    inhabitant_id=assignment.from_id,
                    house_id=assignment.to_building_id,
                    house_position=assignment.to_position,
                    tick=tick,
                )
            )
            self._queue.register_job_seeker(assignment.from_id)
        else:
            self._bus.emit(
                JobAssigned(
                    inhabitant_id=assignment.from_id,
                    office_id=assignment.to_building_id,
                    office_position=assignment.to_position,
                    tick=tick,
                )
            )

    # ------------------------------------------------------------------
    # Travel
    # ------------------------------------------------------------------

    def advance_trips(self, tick: int) -> int:
        """Move every traveller one step; returns how many arrived."""
        arrived = 0
        travelling: List[Trip] = []

        for trip in self._trips:
            trip.path.advance()
            if not trip.path.is_completed():
                travelling.append(trip)
                continue

            assignment = trip.assignment
            occupancy = self._registry.record_arrival(assignment.to_building_id, assignment.count)
            arrived += 1
            if occupancy is None:
                continue
            building = self._registry.get(assignment.to_building_id)
            self._bus.emit(
                OccupancyChanged(
                    building_id=assignment.to_building_id,
                    kind=building.kind,
                    delta_count=assignment.count,
                    occupancy=occupancy,
                    tick=tick,
                )
            )

        self._trips = travelling
        return arrived

    def _do_update(self, tick: int) -> SystemResult:
        return SystemResult(
            details={
                "inhabitants": len(self._queue.inhabitants),
                "travelling": len(self._trips),
            }
        )

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            **super().get_debug_info(),
            "inhabitants": len(self._queue.inhabitants),
            "waiting_for_home": self._queue.housing.pending_count,
            "waiting_for_job": self._queue.employment.pending_count,
            "travelling": len(self._trips),
        }
