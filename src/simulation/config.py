from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class BuildingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    floors: int = Field(ge=1)
    basement_floors: int = Field(default=0, ge=0)

    @property
    def floor_range(self) -> range:
        start = -self.basement_floors if self.basement_floors > 0 else 1
        return range(start, self.floors + 1)


class ElevatorConfig(BaseModel):
    """Physical constraints shared by every car in the bank."""

    model_config = ConfigDict(extra="forbid")

    count: int = Field(ge=1)
    capacity: int = Field(ge=1)
    speed_floors_per_second: float = Field(gt=0)
    door_open_time: float = Field(ge=0)
    door_close_time: float = Field(ge=0)
    service_floors: Optional[Annotated[List[int], Field(min_length=1)]] = None


class ElevatorsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    main: ElevatorConfig


class SimulationSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration_minutes: float = Field(gt=0)
    user_spawn_rate: float = Field(ge=0)
    random_seed: Optional[int] = None


class UserBehaviorConfig(BaseModel):
    # Reserved for richer passenger models; only the press delay is used.
    movement_speed: Optional[Annotated[float, Field(gt=0)]] = None
    button_press_delay: float = Field(default=0.0, ge=0)
    floor_distribution: Optional[str] = None


class SimulationConfig(BaseModel):
    """Validated configuration for one simulation run."""

    model_config = ConfigDict(extra="ignore")

    building: BuildingConfig
    elevators: ElevatorsConfig
    simulation: SimulationSettings
    users: UserBehaviorConfig = Field(default_factory=UserBehaviorConfig)

    @model_validator(mode="after")
    def _check_service_floors(self) -> "SimulationConfig":
        service_floors = self.elevators.main.service_floors
        if service_floors:
            floor_range = self.building.floor_range
            outside = sorted(f for f in set(service_floors) if f not in floor_range)
            if outside:
                raise ValueError(
                    f"service_floors {outside} outside building floor range "
                    f"{floor_range.start}..{floor_range.stop - 1}"
                )
        return self

    @property
    def floor_range(self) -> range:
        return self.building.floor_range

    @property
    def elevator(self) -> ElevatorConfig:
        return self.elevators.main

    @property
    def service_floors(self) -> List[int]:
        if self.elevators.main.service_floors:
            return sorted(set(self.elevators.main.service_floors))
        return list(self.floor_range)

    @property
    def duration_seconds(self) -> float:
        return self.simulation.duration_minutes * 60.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def load_config(path: Union[str, Path]) -> SimulationConfig:
    config_path = Path(path)
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML configuration: {exc}") from exc
    config = SimulationConfig.from_dict(data)
    logger.info("Loaded configuration from %s", config_path)
    return config
