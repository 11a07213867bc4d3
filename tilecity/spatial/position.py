"""Integer grid positions.

Every component of the city core works on the same discrete grid: streets,
buildings and desirability sources all live on integer cells. Adjacency is
4-directional (no diagonals) and distances are Manhattan distances.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

# Orthogonal offsets, in a fixed order so that iteration is deterministic.
_DELTAS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass(frozen=True, order=True)
class Position:
    """Immutable cell coordinate.

    Positions compare and hash by value, and sort by ``(x, y)`` which is
    what the pathfinder relies on for a stable expansion order.
    """

    x: int
    y: int

    def neighbors(self) -> Iterator["Position"]:
        """Yield the 4 orthogonally adjacent cells."""
        for dx, dy in _DELTAS:
            yield Position(self.x + dx, self.y + dy)

    def distance(self, other: "Position") -> int:
        """Manhattan distance to *other* (always >= 0)."""
        return abs(other.x - self.x) + abs(other.y - self.y)

    def is_adjacent(self, other: "Position") -> bool:
        return self.distance(other) == 1

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_any(cls, value: Any) -> "Position":
        """Build a Position from a Position, an ``(x, y)`` pair or a mapping."""
        if isinstance(value, Position):
            return value
        if isinstance(value, dict):
            return cls(int(value["x"]), int(value["y"]))
        x, y = value
        return cls(int(x), int(y))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


def distance(a: Position, b: Position) -> int:
    """Manhattan distance between two positions."""
    return a.distance(b)
