"""Grid coordinates and the Manhattan metric shared by every component."""

from tilecity.spatial.position import Position, distance

__all__ = ["Position", "distance"]
