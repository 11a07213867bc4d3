"""Registers consumers and producers and runs the allocation pass.

Houses and offices become consumers requesting ``base_wh + consume_wh *
occupancy``; power plants become producers. Occupancy changes are applied
as they happen (releasing surplus immediately) and the per-tick update
covers whatever is still short.
"""

import logging
from typing import Any, Dict

from tilecity.config.city_config import BuildingsConfig
from tilecity.enums import BuildingKind
from tilecity.events import BuildingCompleted, EventBus, OccupancyChanged, PowerRebalanced
from tilecity.power.allocation import ChangeSet, PowerAllocation
from tilecity.systems.base import BaseSystem, SystemResult

logger = logging.getLogger(__name__)


class PowerSystem(BaseSystem):
    def __init__(self, bus: EventBus, allocation: PowerAllocation, config: BuildingsConfig) -> None:
        super().__init__("Power")
        self._bus = bus
        self._allocation = allocation
        self._config = config
        self._pending_changes = ChangeSet()
        self._last_changes = ChangeSet()
        bus.subscribe(BuildingCompleted, self.on_building_completed)
        bus.subscribe(OccupancyChanged, self.on_occupancy_changed)

    @property
    def last_changes(self) -> ChangeSet:
        """Everything that moved during the latest update."""
        return self._last_changes

    def on_building_completed(self, event: BuildingCompleted) -> None:
        if event.kind is BuildingKind.HOUSE:
            house = self._config.house
            self._allocation.register_consumer(
                event.building_id, event.position, house.base_wh, house.consume_wh
            )
        elif event.kind is BuildingKind.OFFICE:
            office = self._config.office
            self._allocation.register_consumer(
                event.building_id, event.position, office.base_wh, office.consume_wh
            )
        elif event.kind is BuildingKind.BIOMASS_POWER_PLANT:
            self._allocation.register_producer(event.building_id, event.position, event.capacity)

    def on_occupancy_changed(self, event: OccupancyChanged) -> None:
        released = self._allocation.update_occupancy(event.building_id, event.occupancy)
        self._pending_changes.merge(released)

    def _do_update(self, tick: int) -> SystemResult:
        changes = self._pending_changes.merge(self._allocation.dedicate_power())
        self._pending_changes = ChangeSet()
        self._last_changes = changes
        missing = self._allocation.missing_power()

        if changes.is_empty():
            return SystemResult(details={"missing_wh": missing})

        self._bus.emit(
            PowerRebalanced(
                consumers_changed=len(changes.consumers),
                producers_changed=len(changes.producers),
                missing_wh=missing,
                tick=tick,
            )
        )
        if missing:
            logger.debug(f"Tick {tick}: {missing} Wh still missing")
        return SystemResult(
            affected=len(changes.consumers) + len(changes.producers),
            events=1,
            details={"missing_wh": missing},
        )

    def get_debug_info(self) -> Dict[str, Any]:
        return {
            **super().get_debug_info(),
            "consumers": len(self._allocation.consumers),
            "producers": len(self._allocation.producers),
            "uncovered": len(self._allocation.uncovered),
            "missing_wh": self._allocation.missing_power(),
        }
