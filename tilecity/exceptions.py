"""Tile City exception hierarchy.

Centralised base classes so callers can catch narrowly. The four core
components (street graph, desirability, assignment queue, power allocation)
never raise for expected outcomes; "no path", "no match" and "not enough
power" are ordinary return values. Exceptions here cover invalid input at
the outer seams only.
"""


class CityError(Exception):
    """Root of all Tile City domain exceptions."""


class SimulationError(CityError):
    """Errors during simulation execution (engine, systems)."""


class PlacementError(CityError):
    """A construction request cannot be honoured at the requested site."""


class ConfigurationError(CityError):
    """Invalid or missing configuration."""
