"""Configuration for the city core.

``buildings`` holds the default constants per building kind;
``city_config`` holds the validated, versioned ``CityConfig`` model built
from them.
"""

from tilecity.config.city_config import (
    BiomassPowerPlantConfig,
    BuildingsConfig,
    CityConfig,
    GardenConfig,
    HouseConfig,
    OfficeConfig,
    SourceConfig,
    StreetConfig,
    load_config,
)

__all__ = [
    "BiomassPowerPlantConfig",
    "BuildingsConfig",
    "CityConfig",
    "GardenConfig",
    "HouseConfig",
    "OfficeConfig",
    "SourceConfig",
    "StreetConfig",
    "load_config",
]
