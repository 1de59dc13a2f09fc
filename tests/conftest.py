from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List

import pytest

from simulation import ArrivalEntry, ArrivalQueue, SimulationConfig
from simulation.arrivals import QueueMetadata

BASE_CONFIG: Dict[str, Any] = {
    "building": {"floors": 10, "basement_floors": 0},
    "elevators": {
        "main": {
            "count": 1,
            "capacity": 4,
            "speed_floors_per_second": 2.0,
            "door_open_time": 1.0,
            "door_close_time": 1.0,
        }
    },
    "simulation": {"duration_minutes": 1, "user_spawn_rate": 0.1, "random_seed": 42},
}


def build_config_dict(**overrides: Any) -> Dict[str, Any]:
    data = copy.deepcopy(BASE_CONFIG)
    for key, value in overrides.items():
        if key in ("floors", "basement_floors"):
            data["building"][key] = value
        elif key in ("duration_minutes", "user_spawn_rate", "random_seed"):
            data["simulation"][key] = value
        elif key == "button_press_delay":
            data.setdefault("users", {})[key] = value
        else:
            data["elevators"]["main"][key] = value
    return data


@pytest.fixture
def make_config() -> Callable[..., SimulationConfig]:
    def factory(**overrides: Any) -> SimulationConfig:
        return SimulationConfig.from_dict(build_config_dict(**overrides))

    return factory


@pytest.fixture
def make_queue() -> Callable[[List[tuple]], ArrivalQueue]:
    """Build a queue from ``(spawn_time, start_floor, destination_floor)`` tuples."""

    def factory(trips: List[tuple]) -> ArrivalQueue:
        entries = [
            ArrivalEntry(entry_id=index, spawn_time=spawn, start_floor=start, destination_floor=dest)
            for index, (spawn, start, dest) in enumerate(trips, start=1)
        ]
        metadata = QueueMetadata(
            seed=0,
            duration_minutes=1,
            spawn_rate=0.0,
            generated_at="2024-01-01T00:00:00+00:00",
        )
        return ArrivalQueue(entries, metadata)

    return factory
