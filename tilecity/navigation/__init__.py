"""Street-graph pathfinding."""

from tilecity.navigation.street_graph import Path, StreetGraph

__all__ = ["Path", "StreetGraph"]
