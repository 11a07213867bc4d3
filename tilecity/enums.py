"""Enumerations shared across the city core."""

from enum import Enum, IntEnum


class BuildingKind(str, Enum):
    """Every kind of building a player can place."""

    HOUSE = "house"
    OFFICE = "office"
    GARDEN = "garden"
    STREET = "street"
    BIOMASS_POWER_PLANT = "biomass_power_plant"


class EducationLevel(IntEnum):
    """Education of an inhabitant, ordered so that ``LOW > NONE``.

    Offices require a minimum level; a worker qualifies when its level is
    greater than or equal to the office's requirement.
    """

    NONE = 0
    LOW = 1


class AssignmentKind(str, Enum):
    """Which matching pipeline produced an assignment."""

    HOUSING = "housing"
    EMPLOYMENT = "employment"
