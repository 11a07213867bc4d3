"""Inhabitants and their matching to houses and offices."""

from tilecity.inhabitants.assignment_queue import (
    AssignmentQueue,
    AssignmentResult,
    DemandEntry,
    MatchingPipeline,
    SupplyEntry,
)
from tilecity.inhabitants.inhabitant import Home, Inhabitant, Workplace

__all__ = [
    "AssignmentQueue",
    "AssignmentResult",
    "DemandEntry",
    "Home",
    "Inhabitant",
    "MatchingPipeline",
    "SupplyEntry",
    "Workplace",
]
