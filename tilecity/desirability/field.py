"""Distance-decayed desirability fields.

Completed buildings may radiate influence on their surroundings: gardens
make nearby cells attractive, houses make their immediate surroundings a
little less so. Each influence is a ``DesirabilitySource``; a
``DesirabilityField`` answers "how desirable is this cell?" by summing
every source's contribution there.

Contribution of one source at distance ``d`` from its origin:

    d <  inner_radius                  -> value
    inner_radius <= d < outer_radius   -> value - decay * (d - inner_radius),
                                          never crossing zero
    otherwise                          -> 0

Queries are O(number of sources) and nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from tilecity.spatial.position import Position

logger = logging.getLogger(__name__)


def is_positive(total: int) -> bool:
    """Whether a summed desirability is acceptable (zero counts as acceptable)."""
    return total >= 0


@dataclass(frozen=True)
class DesirabilitySource:
    """A single immutable point of influence."""

    origin: Position
    value: int
    inner_radius: int
    outer_radius: int
    decay: int

    def contribution(self, position: Position) -> int:
        d = self.origin.distance(position)

        if d < self.inner_radius:
            return self.value

        if d < self.outer_radius:
            decayed = self.value - self.decay * (d - self.inner_radius)
            # Decay fades towards neutral, it never flips the sign.
            if self.value > 0:
                return max(decayed, 0)
            return min(decayed, 0)

        return 0


class DesirabilityField:
    """A list of sources queried by summation."""

    def __init__(self, name: str = "desirability") -> None:
        self.name = name
        self._sources: List[DesirabilitySource] = []

    @property
    def sources(self) -> List[DesirabilitySource]:
        return list(self._sources)

    def add_source(self, source: DesirabilitySource) -> None:
        self._sources.append(source)
        logger.debug(f"{self.name}: added source {source}")

    def query(self, position: Position) -> int:
        return sum(source.contribution(position) for source in self._sources)

    def is_desirable(self, position: Position) -> bool:
        return is_positive(self.query(position))

    def __len__(self) -> int:
        return len(self._sources)


class DesirabilityManager:
    """Owns the house and office fields plus the population counter.

    Housing and employment care about different things, so each building
    kind may feed the house field, the office field, both or neither.

    Attributes:
        houses: Field consulted before placing a house.
        offices: Field consulted before placing an office.
    """

    def __init__(self) -> None:
        self.houses = DesirabilityField("house desirability")
        self.offices = DesirabilityField("office desirability")
        self._total_population = 0

    def add_house_source(self, source: Optional[DesirabilitySource]) -> None:
        if source is not None:
            self.houses.add_source(source)

    def add_office_source(self, source: Optional[DesirabilitySource]) -> None:
        if source is not None:
            self.offices.add_source(source)

    def query_house(self, position: Position) -> int:
        return self.houses.query(position)

    def query_office(self, position: Position) -> int:
        return self.offices.query(position)

    def increment_population(self, delta: int) -> int:
        """Shift the population by *delta* (never below zero) and return it."""
        self._total_population = max(self._total_population + delta, 0)
        return self._total_population

    @property
    def total_population(self) -> int:
        return self._total_population
