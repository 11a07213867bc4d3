"""TickContext - explicit per-tick state for pipeline steps.

A fresh context is created at the start of every tick and handed to each
pipeline step in turn, so data flows from step to step through typed
fields instead of ad-hoc engine attributes. The ``report`` step turns the
finished context into a ``TickReport``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from tilecity.buildings.models import Building
from tilecity.entity_ids import InhabitantId
from tilecity.power.allocation import ChangeSet
from tilecity.systems.base import SystemResult


@dataclass
class TickContext:
    """Values computed by one step and read by later ones.

    Attributes:
        tick: Number of the tick being run (1 for the first tick)
        completed: Buildings finished by the construction step
        streets_linked: Street cells linked into the graph by ``rebuild``
        arrivals: Newcomers spawned by the immigration step
        homes_confirmed / homes_resigned: Housing proposals settled
        jobs_confirmed / jobs_resigned: Employment proposals settled
        trips_completed: Travellers who reached their building
        power_changes: Everything the power step moved
        population: Population snapshot taken by the report step
        system_results: Results of the system updates run this tick
    """

    tick: int = 0

    # construction / navigation
    completed: List[Building] = field(default_factory=list)
    streets_linked: int = 0

    # immigration / matching
    arrivals: List[InhabitantId] = field(default_factory=list)
    homes_confirmed: int = 0
    homes_resigned: int = 0
    jobs_confirmed: int = 0
    jobs_resigned: int = 0

    # travel / power
    trips_completed: int = 0
    power_changes: ChangeSet = field(default_factory=ChangeSet)
    population: Optional[int] = None

    # results of the systems updated during the tick
    system_results: List[SystemResult] = field(default_factory=list)
