"""Per-component systems driven by the engine each tick."""

from tilecity.systems.base import BaseSystem, SystemResult
from tilecity.systems.desirability_system import DesirabilitySystem
from tilecity.systems.inhabitant_system import InhabitantSystem, MatchOutcome, Trip
from tilecity.systems.navigation_system import NavigationSystem
from tilecity.systems.power_system import PowerSystem
from tilecity.systems.registry import SystemRegistry

__all__ = [
    "BaseSystem",
    "DesirabilitySystem",
    "InhabitantSystem",
    "MatchOutcome",
    "NavigationSystem",
    "PowerSystem",
    "SystemRegistry",
    "SystemResult",
]
