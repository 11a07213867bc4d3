"""Typed domain events and the synchronous bus that carries them."""

from tilecity.events.domain_events import (
    BuildingCompleted,
    HomeAssigned,
    InhabitantsArrived,
    JobAssigned,
    OccupancyChanged,
    PowerRebalanced,
)
from tilecity.events.event_bus import EventBus

__all__ = [
    "BuildingCompleted",
    "EventBus",
    "HomeAssigned",
    "InhabitantsArrived",
    "JobAssigned",
    "OccupancyChanged",
    "PowerRebalanced",
]
