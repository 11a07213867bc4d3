"""Tick pipeline.

``CitySimulation.tick()`` runs a ``TickPipeline``: an ordered list of named
steps, each receiving the engine and the tick's ``TickContext``. Custom
pipelines can drop, add or reorder steps (tests use this to run a single
component in isolation) without touching the engine.

Design Notes:
- Steps receive the engine AND a TickContext for explicit data flow
- Events emitted by a step are fully dispatched before the step returns
- A disabled system's step is a no-op
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List
from collections.abc import Callable

from tilecity.enums import AssignmentKind
from tilecity.events import BuildingCompleted
from tilecity.buildings.models import capacity_of
from tilecity.simulation.tick_context import TickContext

if TYPE_CHECKING:
    from tilecity.simulation.engine import CitySimulation


@dataclass
class PipelineStep:
    """A single step of the tick.

    Attributes:
        name: Identifier for the step (e.g. "navigation")
        fn: Function that executes this step, receiving engine and context
    """

    name: str
    fn: Callable[[CitySimulation, TickContext], None]


class TickPipeline:
    """Ordered sequence of steps making up one tick."""

    def __init__(self, steps: List[PipelineStep]) -> None:
        self._steps = steps

    @property
    def steps(self) -> List[PipelineStep]:
        return self._steps

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    def run(self, engine: CitySimulation, tick: int) -> TickContext:
        """Execute all steps in order and return the filled context."""
        ctx = TickContext(tick=tick)
        for step in self._steps:
            step.fn(engine, ctx)
        return ctx


# =============================================================================
# Default pipeline
# =============================================================================


def _step_construction(engine: CitySimulation, ctx: TickContext) -> None:
    """CONSTRUCTION: progress building sites, announce finished buildings."""
    ctx.completed = engine.registry.advance_construction()
    for building in ctx.completed:
        engine.event_bus.emit(
            BuildingCompleted(
                building_id=building.id,
                kind=building.kind,
                position=building.position,
                capacity=capacity_of(building),
                tick=ctx.tick,
            )
        )


def _step_navigation(engine: CitySimulation, ctx: TickContext) -> None:
    """NAVIGATION: link queued streets into the graph."""
    result = engine.navigation_system.update(ctx.tick)
    ctx.system_results.append(result)
    ctx.streets_linked = result.details.get("streets_linked", 0)


def _step_immigration(engine: CitySimulation, ctx: TickContext) -> None:
    """IMMIGRATION: newcomers arrive for beds nobody waits for."""
    if engine.inhabitant_system.enabled:
        ctx.arrivals = engine.inhabitant_system.immigrate(ctx.tick)


def _step_housing(engine: CitySimulation, ctx: TickContext) -> None:
    """HOUSING: match newcomers to houses reachable from the entry point."""
    if engine.inhabitant_system.enabled:
        outcome = engine.inhabitant_system.match(AssignmentKind.HOUSING, ctx.tick)
        ctx.homes_confirmed = outcome.confirmed
        ctx.homes_resigned = outcome.resigned


def _step_employment(engine: CitySimulation, ctx: TickContext) -> None:
    """EMPLOYMENT: match housed job seekers to reachable offices."""
    if engine.inhabitant_system.enabled:
        outcome = engine.inhabitant_system.match(AssignmentKind.EMPLOYMENT, ctx.tick)
        ctx.jobs_confirmed = outcome.confirmed
        ctx.jobs_resigned = outcome.resigned


def _step_travel(engine: CitySimulation, ctx: TickContext) -> None:
    """TRAVEL: move every traveller one step along its path."""
    system = engine.inhabitant_system
    if system.enabled:
        ctx.trips_completed = system.advance_trips(ctx.tick)
    ctx.system_results.append(system.update(ctx.tick))


def _step_power(engine: CitySimulation, ctx: TickContext) -> None:
    """POWER: cover consumers that are still short."""
    result = engine.power_system.update(ctx.tick)
    ctx.system_results.append(result)
    if not result.skipped:
        ctx.power_changes = engine.power_system.last_changes


def _step_report(engine: CitySimulation, ctx: TickContext) -> None:
    """REPORT: snapshot the population and record the tick summary."""
    result = engine.desirability_system.update(ctx.tick)
    ctx.system_results.append(result)
    if not result.skipped:
        ctx.population = result.details["population"]
    engine.record_report(ctx)


def default_pipeline() -> TickPipeline:
    """Build the canonical tick.

    Step Order:
        1. construction: progress sites, emit BuildingCompleted
        2. navigation: rebuild the street graph
        3. immigration: spawn newcomers
        4. housing: match, validate routes, confirm or resign
        5. employment: same for jobs
        6. travel: advance trips, emit OccupancyChanged on arrival, update the
           inhabitant system
        7. power: dedicate power
        8. report: snapshot population, build the TickReport

    Returns:
        TickPipeline with the canonical step order
    """
    return TickPipeline(
        [
            PipelineStep("construction", _step_construction),
            PipelineStep("navigation", _step_navigation),
            PipelineStep("immigration", _step_immigration),
            PipelineStep("housing", _step_housing),
            PipelineStep("employment", _step_employment),
            PipelineStep("travel", _step_travel),
            PipelineStep("power", _step_power),
            PipelineStep("report", _step_report),
        ]
    )
