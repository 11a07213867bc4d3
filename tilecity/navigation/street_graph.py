"""Dynamic street graph with A* path queries.

Streets are added one cell at a time while the city grows. New cells are
only *queued* by ``add_node``; ``rebuild`` links them into the graph in a
batch, so a tick that completes many streets pays for one pass.

Linking rule
------------
A queued cell is linked when at least one of its 4 neighbours is already a
graph node. Cells are processed in the order they were queued and a cell
linked earlier in the same pass counts as a graph node for the cells after
it, so a street laid outwards from the network links in a single call. A
cell whose neighbours are all still queued (for instance a stretch of road
built away from the network and only later connected) stays queued and may
need several ``rebuild`` calls to be absorbed; each call is cheap and never
grows the queue.

Path queries
------------
Buildings are not graph nodes, so a path "reaches" a building when it ends
on any street cell next to it. ``get_path`` runs A* with unit edge costs and
the heuristic ``(|dx| + |dy|) // 3``, appends the building cell itself and
returns the steps reversed so that a traveller consumes them with ``pop()``.

Public API
----------
``StreetGraph.add_node(position)``
``StreetGraph.rebuild()`` -> number of cells linked
``StreetGraph.get_path(start, target)`` -> ``Path`` or ``None``
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Dict, Iterable, List, Optional, Set

from tilecity.spatial.position import Position

logger = logging.getLogger(__name__)


class Path:
    """Steps left to walk towards a target.

    Steps are stored last-first: ``advance`` pops from the end. The path is
    a tiny state machine, in progress until the list runs dry, then
    completed; advancing a completed path does nothing.
    """

    def __init__(self, steps: List[Position]) -> None:
        self._steps = steps

    @property
    def steps(self) -> List[Position]:
        """Remaining steps, next step last."""
        return list(self._steps)

    @property
    def next_step(self) -> Optional[Position]:
        return self._steps[-1] if self._steps else None

    @property
    def destination(self) -> Optional[Position]:
        return self._steps[0] if self._steps else None

    def advance(self) -> Optional[Position]:
        """Consume one step and return it (``None`` once completed)."""
        if not self._steps:
            return None
        return self._steps.pop()

    def is_completed(self) -> bool:
        return not self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"Path(remaining={len(self._steps)}, destination={self.destination})"


class StreetGraph:
    """Undirected adjacency graph over street cells.

    Attributes:
        origin: Optional seed cell that is a node from the start.

    Example:
        graph = StreetGraph(origin=Position(0, 0))
        for x in range(1, 4):
            graph.add_node(Position(x, 0))
        graph.rebuild()  # 3
        path = graph.get_path(Position(0, 0), Position(4, 0))
        len(path)  # 5
    """

    def __init__(self, origin: Optional[Position] = None) -> None:
        self.origin = origin
        self._nodes: Dict[Position, Set[Position]] = {}
        # dict used as an insertion-ordered set
        self._pending: Dict[Position, None] = {}
        if origin is not None:
            self._nodes[origin] = set()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Dict[Position, Set[Position]]:
        """Read-only view of the adjacency (do not mutate)."""
        return self._nodes

    @property
    def pending(self) -> List[Position]:
        """Queued cells not yet linked, in queue order."""
        return list(self._pending)

    def __contains__(self, position: Position) -> bool:
        return position in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def neighbors_of(self, position: Position) -> Set[Position]:
        return set(self._nodes.get(position, ()))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_node(self, position: Position) -> None:
        """Queue *position* for linking on the next ``rebuild``."""
        if position in self._nodes:
            return
        self._pending[position] = None

    def add_nodes(self, positions: Iterable[Position]) -> None:
        for position in positions:
            self.add_node(position)

    def rebuild(self) -> int:
        """Link every queued cell that touches the graph.

        Returns:
            Number of cells linked by this call (0 when nothing is queued).
        """
        if not self._pending:
            return 0

        queued = list(self._pending)
        self._pending = {}

        if not self._nodes:
            # Empty graph: the first queued cell becomes the seed.
            seed = queued.pop(0)
            self._nodes[seed] = set()
            logger.debug(f"Street graph seeded at {seed}")
            linked = 1
        else:
            linked = 0

        for position in queued:
            touching = [n for n in position.neighbors() if n in self._nodes]
            if not touching:
                self._pending[position] = None
                continue

            edges = self._nodes.setdefault(position, set())
            for neighbor in touching:
                edges.add(neighbor)
                self._nodes[neighbor].add(position)
            linked += 1
            logger.debug(f"Linked street {position} to {len(touching)} neighbour(s)")

        if linked:
            logger.debug(
                f"Street graph rebuild linked {linked} cell(s), {len(self._pending)} still pending"
            )
        return linked

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_path(self, start: Position, target: Position) -> Optional[Path]:
        """Find a street route from *start* to a cell next to *target*.

        Args:
            start: Street cell to leave from (must be a graph node).
            target: Cell to reach; usually a building, not a street.

        Returns:
            A ``Path`` whose steps run start -> ... -> cell next to target
            -> target, stored reversed; ``None`` when no route exists.
        """
        if start not in self._nodes:
            return None

        goals = set(target.neighbors())

        def heuristic(p: Position) -> int:
            return (abs(p.x - target.x) + abs(p.y - target.y)) // 3

        tie = itertools.count()
        open_set: List = [(heuristic(start), next(tie), start)]
        g_score: Dict[Position, int] = {start: 0}
        came_from: Dict[Position, Position] = {}
        closed: Set[Position] = set()

        while open_set:
            _f, _t, current = heapq.heappop(open_set)
            if current in closed:
                continue
            closed.add(current)

            if current in goals:
                route = [current]
                while current in came_from:
                    current = came_from[current]
                    route.append(current)
                # route runs goal -> start; prefix the target to get the
                # pop-from-the-end order
                steps = [target] + route
                logger.debug(f"Path {start} -> {target}: {len(steps)} steps")
                return Path(steps)

            for neighbor in sorted(self._nodes[current]):
                if neighbor in closed:
                    continue
                tentative = g_score[current] + 1
                if tentative < g_score.get(neighbor, tentative + 1):
                    g_score[neighbor] = tentative
                    came_from[neighbor] = current
                    heapq.heappush(
                        open_set, (tentative + heuristic(neighbor), next(tie), neighbor)
                    )

        return None

    def get_route(self, origin: Position, target: Position) -> Optional[Path]:
        """Like ``get_path`` but *origin* may be a building next to the streets.

        When *origin* is not a street cell, the search leaves from each
        adjacent street cell and the shortest result wins (ties go to the
        smallest cell).
        """
        if origin in self._nodes:
            return self.get_path(origin, target)

        best: Optional[Path] = None
        for start in sorted(n for n in origin.neighbors() if n in self._nodes):
            path = self.get_path(start, target)
            if path is not None and (best is None or len(path) < len(best)):
                best = path
        return best
