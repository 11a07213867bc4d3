"""Headless city simulation - the slim coordinator.

Design Decisions:
-----------------
1. The engine is a COORDINATOR, not a DOER. It owns the core components
   (street graph, desirability fields, assignment queue, power allocation,
   building registry) and the systems wrapping them, but the per-tick work
   lives in the systems and the pipeline steps.

2. Components are plain owned objects built once from the ``CityConfig``.
   There is no global state: two engines in one process do not interact.

3. ``tick()`` runs the ``TickPipeline``; its step order is documented in
   ``tilecity.simulation.pipeline.default_pipeline``.

4. The methods of the four components that the surrounding game layer
   calls directly (``get_path``, ``query_desirability``, ``match_housing``,
   ``dedicate_power`` ...) are exposed here as thin delegations.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from tilecity.buildings.registry import BuildingRegistry
from tilecity.config.city_config import CityConfig
from tilecity.desirability.field import DesirabilityManager, is_positive
from tilecity.entity_ids import BuildingId, IdAllocator
from tilecity.enums import AssignmentKind, BuildingKind
from tilecity.events import BuildingCompleted, EventBus, OccupancyChanged
from tilecity.exceptions import PlacementError, SimulationError
from tilecity.inhabitants.assignment_queue import AssignmentQueue, AssignmentResult
from tilecity.navigation.street_graph import Path, StreetGraph
from tilecity.power.allocation import ChangeSet, PowerAllocation
from tilecity.simulation.pipeline import TickPipeline, default_pipeline
from tilecity.simulation.report import TickReport
from tilecity.simulation.tick_context import TickContext
from tilecity.simulation.trace import TraceSink
from tilecity.spatial.position import Position
from tilecity.systems.base import BaseSystem, SystemResult
from tilecity.systems.desirability_system import DesirabilitySystem
from tilecity.systems.inhabitant_system import InhabitantSystem
from tilecity.systems.navigation_system import NavigationSystem
from tilecity.systems.power_system import PowerSystem
from tilecity.systems.registry import SystemRegistry

logger = logging.getLogger(__name__)

_OCCUPIED_KINDS = {
    BuildingKind.HOUSE: AssignmentKind.HOUSING,
    BuildingKind.OFFICE: AssignmentKind.EMPLOYMENT,
}


class CitySimulation:
    """A headless, deterministic city core.

    Architecture:
        CitySimulation (coordinator)
        ├── BuildingRegistry (placement, construction, occupancy)
        ├── EventBus (BuildingCompleted, OccupancyChanged, ...)
        ├── SystemRegistry
        │   ├── NavigationSystem   -> StreetGraph
        │   ├── DesirabilitySystem -> DesirabilityManager
        │   ├── InhabitantSystem   -> AssignmentQueue
        │   └── PowerSystem        -> PowerAllocation
        └── TraceSink (optional JSONL output)

    Attributes:
        config: Validated city configuration
        tick_count: Ticks run so far
        last_report: Summary of the latest tick (None before the first)
    """

    def __init__(
        self,
        config: Optional[CityConfig] = None,
        *,
        pipeline: Optional[TickPipeline] = None,
    ) -> None:
        self.config = config or CityConfig()
        self.tick_count = 0
        self.last_report: Optional[TickReport] = None
        self.pipeline = pipeline or default_pipeline()

        # Observability: unique identifier for this run
        self.run_id: str = str(uuid.uuid4())

        entry = self.config.entry_position
        self.ids = IdAllocator()
        self.event_bus = EventBus()
        self.graph = StreetGraph(origin=entry)
        self.desirability = DesirabilityManager()
        self.queue = AssignmentQueue(entry_point=entry)
        self.allocation = PowerAllocation()
        self.registry = BuildingRegistry(self.config.buildings, self.ids, self.desirability)
        self.registry.reserve(entry)

        # Subscription order is dispatch order: the graph learns about a
        # street before anything else reacts to the same event.
        self.navigation_system = NavigationSystem(self.event_bus, self.graph)
        self.desirability_system = DesirabilitySystem(
            self.event_bus, self.desirability, self.config.buildings
        )
        self.inhabitant_system = InhabitantSystem(
            self.event_bus, self.queue, self.graph, self.registry, self.ids, self.config
        )
        self.power_system = PowerSystem(self.event_bus, self.allocation, self.config.buildings)

        self._system_registry = SystemRegistry()
        self._system_registry.register(self.navigation_system)
        self._system_registry.register(self.desirability_system)
        self._system_registry.register(self.inhabitant_system)
        self._system_registry.register(self.power_system)

        self._trace: Optional[TraceSink] = None
        if self.config.trace_output:
            self._trace = TraceSink(self.config.trace_output)

        logger.info(f"CitySimulation initialized with run_id={self.run_id}, entry point {entry}")

    # =========================================================================
    # Construction and external events
    # =========================================================================

    def request_construction(self, kind: BuildingKind, position: Any) -> Optional[BuildingId]:
        """Start building *kind* at *position*.

        Returns:
            The id of the building site, or None if the site was rejected.
        """
        position = Position.from_any(position)
        try:
            site = self.registry.start_construction(BuildingKind(kind), position)
        except PlacementError as exc:
            logger.warning(
                f"Construction of {BuildingKind(kind).value} at {position} rejected: {exc}"
            )
            return None
        return site.building.id

    def ingest(self, event: object) -> bool:
        """Feed an event reported by the surrounding game layer.

        ``BuildingCompleted`` adds the building to the registry, with the
        event's capacity, before it is announced. ``OccupancyChanged`` is
        applied to the registry and the matching queue first; the event
        announced on the bus carries the delta actually applied and the
        occupancy the registry now holds.

        Returns:
            False when the event was dropped (see the warning log).

        Raises:
            SimulationError: For event types the core does not consume.
        """
        if isinstance(event, BuildingCompleted):
            return self._ingest_building(event)
        if isinstance(event, OccupancyChanged):
            return self._ingest_occupancy(event)
        raise SimulationError(f"cannot ingest {type(event).__name__}")

    def _ingest_building(self, event: BuildingCompleted) -> bool:
        try:
            self.registry.adopt(event.kind, event.building_id, event.position, event.capacity)
        except PlacementError as exc:
            logger.warning(f"Completed {event.kind.value} {event.building_id} rejected: {exc}")
            return False
        self.event_bus.emit(event)
        return True

    def _ingest_occupancy(self, event: OccupancyChanged) -> bool:
        building = self.registry.get(event.building_id)
        if building is None or building.kind not in _OCCUPIED_KINDS:
            logger.warning(
                f"Occupancy change for {event.building_id} ignored: not a house or office"
            )
            return False

        kind = _OCCUPIED_KINDS[building.kind]
        if event.delta_count >= 0:
            # travellers already hold their slots, so only free ones can be taken
            applied = self.queue.take_slots(kind, building.id, event.delta_count)
            if applied:
                self.registry.record_arrival(building.id, applied)
        else:
            leaving = min(-event.delta_count, building.occupancy)
            if leaving:
                self.registry.record_departure(building.id, leaving)
                self.queue.return_slots(kind, building.id, building.position, leaving)
            applied = -leaving

        if applied != event.delta_count:
            logger.warning(
                f"Occupancy change for {building.id} clipped from {event.delta_count} to {applied}"
            )
        if applied == 0:
            return False

        self.event_bus.emit(
            OccupancyChanged(
                building_id=building.id,
                delta_count=applied,
                kind=building.kind,
                occupancy=building.occupancy,
                tick=self.tick_count,
            )
        )
        return True

    # =========================================================================
    # Tick loop
    # =========================================================================

    def tick(self) -> TickReport:
        """Run one tick of the pipeline and return its summary."""
        self.tick_count += 1
        self.pipeline.run(self, self.tick_count)
        assert self.last_report is not None and self.last_report.tick == self.tick_count, (
            "pipeline finished without a report step"
        )
        return self.last_report

    def run(self, ticks: int) -> List[TickReport]:
        return [self.tick() for _ in range(ticks)]

    def record_report(self, ctx: TickContext) -> TickReport:
        """Turn a finished tick context into a report (and trace it)."""
        report = TickReport(
            tick=ctx.tick,
            buildings_completed=len(ctx.completed),
            streets_linked=ctx.streets_linked,
            inhabitants_arrived=len(ctx.arrivals),
            homes_confirmed=ctx.homes_confirmed,
            homes_resigned=ctx.homes_resigned,
            jobs_confirmed=ctx.jobs_confirmed,
            jobs_resigned=ctx.jobs_resigned,
            trips_completed=ctx.trips_completed,
            power_consumers_changed=len(ctx.power_changes.consumers),
            power_producers_changed=len(ctx.power_changes.producers),
            missing_power_wh=self.allocation.missing_power(),
            population=(
                ctx.population if ctx.population is not None else self.desirability.total_population
            ),
            system_events=SystemResult.combine(ctx.system_results).events,
            power_changes=ctx.power_changes.to_dict(),
        )
        self.last_report = report
        if self._trace is not None:
            self._trace.write(report)
        return report

    def close(self) -> None:
        if self._trace is not None:
            self._trace.close()

    def __enter__(self) -> "CitySimulation":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Component API (delegations)
    # =========================================================================

    def get_path(self, start: Position, target: Position) -> Optional[Path]:
        return self.graph.get_path(start, target)

    def query_desirability(
        self, position: Position, kind: BuildingKind = BuildingKind.HOUSE
    ) -> int:
        """Desirability of *position* for a house (default) or an office."""
        if BuildingKind(kind) is BuildingKind.OFFICE:
            return self.desirability.query_office(position)
        return self.desirability.query_house(position)

    @staticmethod
    def is_positive(value: int) -> bool:
        return is_positive(value)

    def match_housing(self) -> List[AssignmentResult]:
        return self.queue.match_housing()

    def match_employment(self) -> List[AssignmentResult]:
        return self.queue.match_employment()

    def resign(self, assignment: AssignmentResult) -> None:
        self.queue.resign(assignment)

    def dedicate_power(self) -> ChangeSet:
        return self.allocation.dedicate_power()

    def missing_power(self) -> int:
        return self.allocation.missing_power()

    # =========================================================================
    # Systems and stats
    # =========================================================================

    def get_systems(self) -> List[BaseSystem]:
        """Get all registered systems in execution order."""
        return self._system_registry.get_all()

    def get_system(self, name: str) -> Optional[BaseSystem]:
        return self._system_registry.get(name)

    def set_system_enabled(self, name: str, enabled: bool) -> bool:
        return self._system_registry.set_enabled(name, enabled)

    def get_systems_debug_info(self) -> Dict[str, Any]:
        return self._system_registry.get_debug_info()

    def get_stats(self) -> Dict[str, Any]:
        """Snapshot of city-wide counters for logging."""
        inhabitants = self.queue.inhabitants
        return {
            "tick": self.tick_count,
            "buildings": len(self.registry.buildings),
            "under_construction": len(self.registry.under_construction),
            "street_nodes": len(self.graph),
            "inhabitants": len(inhabitants),
            "housed": sum(1 for i in inhabitants if i.is_housed),
            "employed": sum(1 for i in inhabitants if i.is_employed),
            "population": self.desirability.total_population,
            "missing_power_wh": self.allocation.missing_power(),
        }
