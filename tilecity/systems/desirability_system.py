"""Feeds building influence and population into the desirability fields.

Each completed building contributes the house and/or office sources its
config section declares, centred on its cell. Residents moving in or out
of houses adjust the population counter.
"""

import logging
from typing import Any, Dict, Optional

from tilecity.config.city_config import BuildingsConfig, SourceConfig
from tilecity.desirability.field import DesirabilityManager, DesirabilitySource
from tilecity.enums import BuildingKind
from tilecity.events import BuildingCompleted, EventBus, OccupancyChanged
from tilecity.spatial.position import Position
from tilecity.systems.base import BaseSystem, SystemResult

logger = logging.getLogger(__name__)


def _source_at(origin: Position, source: Optional[SourceConfig]) -> Optional[DesirabilitySource]:
    if source is None:
        return None
    return DesirabilitySource(
        origin=origin,
        value=source.value,
        inner_radius=source.inner_radius,
        outer_radius=source.outer_radius,
        decay=source.decay,
    )


class DesirabilitySystem(BaseSystem):
    """Event-driven; the per-tick update only reports."""

    def __init__(
        self, bus: EventBus, desirability: DesirabilityManager, config: BuildingsConfig
    ) -> None:
        super().__init__("Desirability")
        self._desirability = desirability
        self._config = config
        bus.subscribe(BuildingCompleted, self.on_building_completed)
        bus.subscribe(OccupancyChanged, self.on_occupancy_changed)

    def on_building_completed(self, event: BuildingCompleted) -> None:
        section = self._config.for_kind(event.kind)
        self._desirability.add_house_source(_source_at(event.position, section.house_source))
        self._desirability.add_office_source(_source_at(event.position, section.office_source))

    def on_occupancy_changed(self, event: OccupancyChanged) -> None:
        if event.kind is not BuildingKind.HOUSE:
            return
        total = self._desirability.increment_population(event.delta_count)
        logger.info(f"Population is now {total}")

    def _do_update(self, tick: int) -> SystemResult:
        return SystemResult(details={"population": self._desirability.total_population})

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            **super().get_debug_info(),
            "house_sources": len(self._desirability.houses),
            "office_sources": len(self._desirability.offices),
            "population": self._desirability.total_population,
        }
