"""Common shape of the city's systems.

A system wraps one core component. It reacts to bus events as they are
emitted and does its per-tick work in ``_do_update``; the engine decides
when that runs. Components reach a system through its constructor, never
through module globals.

Example:
    class CensusSystem(BaseSystem):
        def __init__(self, bus: EventBus):
            super().__init__("Census")
            bus.subscribe(InhabitantsArrived, self.on_arrival)

        def _do_update(self, tick: int) -> SystemResult:
            return SystemResult(details={"arrivals": self.arrivals})
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

__all__ = [
    "BaseSystem",
    "SystemResult",
]


@dataclass
class SystemResult:
    """Outcome of one system update.

    Attributes:
        affected: Graph nodes, consumers, producers... touched by the update
        events: Events the update put on the bus
        skipped: The system was disabled and did nothing
        details: Named counters specific to the system
    """

    affected: int = 0
    events: int = 0
    skipped: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def skipped_result(cls) -> "SystemResult":
        return cls(skipped=True)

    @classmethod
    def combine(cls, results: Iterable["SystemResult"]) -> "SystemResult":
        """Sum the non-skipped results; numeric details add up, others are overwritten."""
        total = cls()
        ran = False
        for result in results:
            if result.skipped:
                continue
            ran = True
            total.affected += result.affected
            total.events += result.events
            for key, value in result.details.items():
                previous = total.details.get(key)
                if isinstance(value, int) and isinstance(previous, int):
                    total.details[key] = previous + value
                else:
                    total.details[key] = value
        total.skipped = not ran
        return total


class BaseSystem(ABC):
    """A named, switchable unit of per-tick work.

    Attributes:
        name: Unique name used by the registry
        enabled: Disabled systems return a skipped result from ``update``
        updates: Completed (non-skipped) updates so far
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.enabled = True
        self.updates = 0

    def update(self, tick: int) -> SystemResult:
        if not self.enabled:
            return SystemResult.skipped_result()
        result = self._do_update(tick)
        self.updates += 1
        return result if result is not None else SystemResult()

    @abstractmethod
    def _do_update(self, tick: int) -> Optional[SystemResult]:
        """Per-tick work of the concrete system."""

    def get_debug_info(self) -> Dict[str, Any]:
        return {"name": self.name, "enabled": self.enabled, "updates": self.updates}

    def __repr__(self) -> str:
        state = "on" if self.enabled else "off"
        return f"<{type(self).__name__} {self.name} ({state})>"
