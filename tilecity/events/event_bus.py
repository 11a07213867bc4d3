"""Synchronous event bus connecting the city's systems.

The surrounding game layer and the systems talk through typed events: a
completed building is announced once and every interested system reacts.
Dispatch happens inside ``emit``, in subscription order, so a tick stays
deterministic and no handler ever runs "later".

Example:
    bus = EventBus()
    bus.subscribe(BuildingCompleted, navigation.on_building_completed)
    bus.emit(BuildingCompleted(building_id=..., kind=BuildingKind.STREET, ...))
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Dict, List, Type, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")
Handler = Callable[[E], None]


class EventBus:
    """Routes each event to the handlers registered for its exact type."""

    def __init__(self) -> None:
        self._routes: Dict[type, List[Callable]] = {}
        self._counts: Counter = Counter()

    def subscribe(self, event_type: Type[E], handler: Handler) -> None:
        self._routes.setdefault(event_type, []).append(handler)
        name = getattr(handler, "__qualname__", handler)
        logger.debug(f"{name} listens to {event_type.__name__}")

    def unsubscribe(self, event_type: Type[E], handler: Handler) -> bool:
        """Stop delivering *event_type* to *handler*.

        Returns:
            False when the handler was not subscribed.
        """
        route = self._routes.get(event_type, [])
        if handler not in route:
            return False
        route.remove(handler)
        return True

    def emit(self, event: object) -> None:
        """Deliver *event* now; handlers subscribed during delivery wait for the next one."""
        self._counts[type(event)] += 1
        for handler in tuple(self._routes.get(type(event), ())):
            handler(event)

    def has_subscribers(self, event_type: type) -> bool:
        return bool(self._routes.get(event_type))

    def emitted_count(self, event_type: type) -> int:
        """How many events of *event_type* went through the bus so far."""
        return self._counts[event_type]

    def emitted_totals(self) -> Dict[str, int]:
        return {event_type.__name__: n for event_type, n in self._counts.items()}
