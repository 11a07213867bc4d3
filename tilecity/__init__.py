"""Tile City: a headless, tick-driven city simulation core.

Street pathfinding, desirability fields, housing/employment matching and
power allocation, wired together by ``CitySimulation``.
"""

from tilecity.config.city_config import CityConfig, load_config
from tilecity.enums import BuildingKind, EducationLevel
from tilecity.simulation.engine import CitySimulation
from tilecity.spatial.position import Position

__version__ = "0.1.0"

__all__ = [
    "BuildingKind",
    "CityConfig",
    "CitySimulation",
    "EducationLevel",
    "Position",
    "load_config",
]
