"""Typed identifiers and the service that hands them out.

Buildings and inhabitants are keyed by ids the city core owns itself,
never by handles borrowed from a host engine. Each kind of id is its own
type, so a building id can never be mistaken for an inhabitant id:

    house = BuildingId(3)
    resident = InhabitantId(3)
    house == resident  # False

Ids come from an ``IdAllocator``. Nothing is ever removed from the city,
so one increasing counter per kind already makes every id unique and
never reused; the numbers double as creation order, which keeps matching
and power allocation deterministic.

Design Notes:
- ids are frozen and hashable, usable as dict keys and set members
- ids of the same kind sort by value
- an id also equals its raw int, which keeps test assertions short
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional


@dataclass(frozen=True, eq=False)
class EntityId:
    """Base class for the typed ids."""

    value: int
    prefix: ClassVar[str] = "Entity"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"{type(self).__name__} needs an int, got {self.value!r}")
        if self.value < 0:
            raise ValueError(f"{type(self).__name__} cannot be negative ({self.value})")

    def _other_value(self, other: Any) -> Optional[int]:
        if type(other) is type(self):
            return other.value
        if isinstance(other, int) and not isinstance(other, (bool, EntityId)):
            return other
        return None

    def __eq__(self, other: Any) -> bool:
        value = self._other_value(other)
        return NotImplemented if value is None else self.value == value

    def __hash__(self) -> int:
        return hash(self.value)

    def __lt__(self, other: Any) -> bool:
        value = self._other_value(other)
        return NotImplemented if value is None else self.value < value

    def __le__(self, other: Any) -> bool:
        value = self._other_value(other)
        return NotImplemented if value is None else self.value <= value

    def __gt__(self, other: Any) -> bool:
        value = self._other_value(other)
        return NotImplemented if value is None else self.value > value

    def __ge__(self, other: Any) -> bool:
        value = self._other_value(other)
        return NotImplemented if value is None else self.value >= value

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.prefix}#{self.value}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"


@dataclass(frozen=True, eq=False)
class BuildingId(EntityId):
    """Any building: house, office, street, garden or power plant."""

    prefix: ClassVar[str] = "Building"


@dataclass(frozen=True, eq=False)
class InhabitantId(EntityId):
    prefix: ClassVar[str] = "Inhabitant"


class IdAllocator:
    """Hands out fresh ids, one counter per id kind.

    Example:
        ids = IdAllocator()
        ids.next_building_id()    # BuildingId(0)
        ids.next_building_id()    # BuildingId(1)
        ids.next_inhabitant_id()  # InhabitantId(0)
    """

    def __init__(self) -> None:
        self._counters: Dict[type, int] = {}

    def _next(self, id_type: type) -> int:
        value = self._counters.get(id_type, 0)
        self._counters[id_type] = value + 1
        return value

    def next_building_id(self) -> BuildingId:
        return BuildingId(self._next(BuildingId))

    def next_inhabitant_id(self) -> InhabitantId:
        return InhabitantId(self._next(InhabitantId))

    def issued(self, id_type: type) -> int:
        """Number of ids of *id_type* handed out so far."""
        return self._counters.get(id_type, 0)

    def observe(self, entity_id: EntityId) -> None:
        """Account for an id issued elsewhere so it is never handed out again."""
        id_type = type(entity_id)
        if entity_id.value >= self._counters.get(id_type, 0):
            self._counters[id_type] = entity_id.value + 1
