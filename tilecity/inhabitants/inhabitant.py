"""Inhabitant records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tilecity.entity_ids import BuildingId, InhabitantId
from tilecity.enums import EducationLevel
from tilecity.spatial.position import Position


@dataclass(frozen=True)
class Home:
    house_id: BuildingId
    house_position: Position


@dataclass(frozen=True)
class Workplace:
    office_id: BuildingId
    office_position: Position


@dataclass
class Inhabitant:
    """A person living (or about to live) in the city.

    A home and a workplace are each assigned at most once; moving house or
    changing job is not modelled.
    """

    id: InhabitantId
    education_level: EducationLevel = EducationLevel.NONE
    home: Optional[Home] = None
    workplace: Optional[Workplace] = None

    def home_found(self, house_id: BuildingId, house_position: Position) -> None:
        assert self.home is None, f"{self.id} already has a home"
        self.home = Home(house_id, house_position)

    def workplace_found(self, office_id: BuildingId, office_position: Position) -> None:
        assert self.workplace is None, f"{self.id} already has a job"
        self.workplace = Workplace(office_id, office_position)

    @property
    def is_housed(self) -> bool:
        return self.home is not None

    @property
    def is_employed(self) -> bool:
        return self.workplace is not None
