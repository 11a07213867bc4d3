"""Keeps the street graph in step with completed streets.

Completed streets are only queued on the graph when their
``BuildingCompleted`` event arrives; the per-tick update links the queue in
one ``rebuild`` pass.
"""

import logging
from typing import Any, Dict

from tilecity.enums import BuildingKind
from tilecity.events import BuildingCompleted, EventBus
from tilecity.navigation.street_graph import StreetGraph
from tilecity.systems.base import BaseSystem, SystemResult

logger = logging.getLogger(__name__)


class NavigationSystem(BaseSystem):
    def __init__(self, bus: EventBus, graph: StreetGraph) -> None:
        super().__init__("Navigation")
        self._graph = graph
        self._streets_queued = 0
        bus.subscribe(BuildingCompleted, self.on_building_completed)

    @property
    def graph(self) -> StreetGraph:
        return self._graph

    def on_building_completed(self, event: BuildingCompleted) -> None:
        if event.kind is not BuildingKind.STREET:
            return
        self._graph.add_node(event.position)
        self._streets_queued += 1

    def _do_update(self, tick: int) -> SystemResult:
        linked = self._graph.rebuild()
        return SystemResult(
            affected=linked,
            details={"streets_linked": linked, "streets_pending": len(self._graph.pending)},
        )

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            **super().get_debug_info(),
            "nodes": len(self._graph),
            "pending": len(self._graph.pending),
            "streets_queued": self._streets_queued,
        }
