"""Versioned, validated city configuration.

One ``CityConfig`` is built at startup (from defaults or a JSON file) and
handed to ``CitySimulation``, which passes the relevant sub-sections to each
component. The model is frozen: tuning changes mean building a new config,
never mutating a shared one.

Example:
    config = CityConfig()
    config.buildings.house.max_residents  # 8

    tuned = config.with_overrides(max_inhabitants_per_tick=2)
    loaded = load_config("city.json")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tilecity.config import buildings as defaults
from tilecity.enums import BuildingKind, EducationLevel
from tilecity.exceptions import ConfigurationError
from tilecity.spatial.position import Position

logger = logging.getLogger(__name__)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SourceConfig(_FrozenModel):
    """A desirability source emitted by a completed building."""

    value: int
    inner_radius: int = Field(ge=0)
    outer_radius: int = Field(ge=0)
    decay: int = 0


class BuildingConfig(_FrozenModel):
    """Settings common to every building kind."""

    time_for_building: int = Field(ge=0)
    house_source: Optional[SourceConfig] = None
    office_source: Optional[SourceConfig] = None

    @property
    def capacity(self) -> int:
        """Occupants (or watt-hours for producers) the building offers."""
        return 0


class HouseConfig(BuildingConfig):
    time_for_building: int = Field(default=defaults.HOUSE_TIME_FOR_BUILDING, ge=0)
    house_source: Optional[SourceConfig] = SourceConfig(**defaults.HOUSE_SOURCE_FOR_HOUSE)
    max_residents: int = Field(default=defaults.HOUSE_MAX_RESIDENTS, ge=0)
    base_wh: int = Field(default=0, ge=0)
    consume_wh: int = Field(default=defaults.HOUSE_CONSUME_WH, ge=0)

    @property
    def capacity(self) -> int:
        return self.max_residents


class OfficeConfig(BuildingConfig):
    time_for_building: int = Field(default=defaults.OFFICE_TIME_FOR_BUILDING, ge=0)
    office_source: Optional[SourceConfig] = SourceConfig(**defaults.OFFICE_SOURCE_FOR_OFFICE)
    max_workers: int = Field(default=defaults.OFFICE_MAX_WORKERS, ge=0)
    required_education: EducationLevel = EducationLevel.NONE
    base_wh: int = Field(default=0, ge=0)
    consume_wh: int = Field(default=defaults.OFFICE_CONSUME_WH, ge=0)

    @property
    def capacity(self) -> int:
        return self.max_workers


class GardenConfig(BuildingConfig):
    time_for_building: int = Field(default=defaults.GARDEN_TIME_FOR_BUILDING, ge=0)
    house_source: Optional[SourceConfig] = SourceConfig(**defaults.GARDEN_SOURCE_FOR_HOUSE)
    office_source: Optional[SourceConfig] = SourceConfig(**defaults.GARDEN_SOURCE_FOR_OFFICE)


class StreetConfig(BuildingConfig):
    time_for_building: int = Field(default=defaults.STREET_TIME_FOR_BUILDING, ge=0)


class BiomassPowerPlantConfig(BuildingConfig):
    time_for_building: int = Field(
        default=defaults.BIOMASS_POWER_PLANT_TIME_FOR_BUILDING, ge=0
    )
    capacity_wh: int = Field(default=defaults.BIOMASS_POWER_PLANT_CAPACITY_WH, ge=0)

    @property
    def capacity(self) -> int:
        return self.capacity_wh


class BuildingsConfig(_FrozenModel):
    house: HouseConfig = Field(default_factory=HouseConfig)
    office: OfficeConfig = Field(default_factory=OfficeConfig)
    garden: GardenConfig = Field(default_factory=GardenConfig)
    street: StreetConfig = Field(default_factory=StreetConfig)
    biomass_power_plant: BiomassPowerPlantConfig = Field(
        default_factory=BiomassPowerPlantConfig
    )

    def for_kind(self, kind: BuildingKind) -> BuildingConfig:
        """Return the section configuring *kind*."""
        return getattr(self, BuildingKind(kind).value)


class CityConfig(_FrozenModel):
    """Root configuration.

    Attributes:
        version: Schema version; only the current version is accepted.
        entry_point: Cell where newcomers arrive and the street graph starts.
        max_inhabitants_per_tick: Cap on newcomers spawned per tick.
        trace_output: Optional JSONL file receiving one record per tick.
        buildings: Per-kind building settings.
    """

    version: int = defaults.CONFIG_VERSION
    entry_point: Tuple[int, int] = defaults.ENTRY_POINT
    max_inhabitants_per_tick: int = Field(default=defaults.MAX_INHABITANTS_PER_TICK, ge=0)
    trace_output: Optional[str] = None
    buildings: BuildingsConfig = Field(default_factory=BuildingsConfig)

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value != defaults.CONFIG_VERSION:
            raise ValueError(
                f"unsupported config version {value} (expected {defaults.CONFIG_VERSION})"
            )
        return value

    @property
    def entry_position(self) -> Position:
        return Position(*self.entry_point)

    def with_overrides(self, **overrides: Any) -> "CityConfig":
        """Return a validated copy with top-level fields replaced."""
        data = self.model_dump()
        data.update(overrides)
        try:
            return CityConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


def load_config(path: Union[str, Path]) -> CityConfig:
    """Read and validate a JSON configuration file.

    Raises:
        ConfigurationError: The file is missing, is not JSON, or fails validation.
    """
    path = Path(path)
    try:
        raw = orjson.loads(path.read_bytes())
    except OSError as exc:
        raise ConfigurationError(f"cannot read config {path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigurationError(f"config {path} is not valid JSON: {exc}") from exc

    try:
        config = CityConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid config {path}: {exc}") from exc

    logger.info(f"Loaded city config v{config.version} from {path}")
    return config
