"""Building records and the construction registry."""

from tilecity.buildings.models import (
    BiomassPowerPlant,
    Building,
    Garden,
    House,
    Office,
    Street,
    capacity_of,
)
from tilecity.buildings.registry import BuildingRegistry, BuildingUnderConstruction

__all__ = [
    "BiomassPowerPlant",
    "Building",
    "BuildingRegistry",
    "BuildingUnderConstruction",
    "Garden",
    "House",
    "Office",
    "Street",
    "capacity_of",
]
