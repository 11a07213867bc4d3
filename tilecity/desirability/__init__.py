"""Spatial desirability ("palatability") fields."""

from tilecity.desirability.field import (
    DesirabilityField,
    DesirabilityManager,
    DesirabilitySource,
    is_positive,
)

__all__ = ["DesirabilityField", "DesirabilityManager", "DesirabilitySource", "is_positive"]
