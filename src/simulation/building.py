from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import ElevatorConfig, SimulationConfig
from .elevator import Elevator
from .errors import InvalidFloorError
from .floor import Floor
from .user import User


@dataclass
class Building:
    """Container for floors and the elevator bank serving them."""

    num_floors: int
    elevator_config: ElevatorConfig
    basement_floors: int = 0
    floors: Dict[int, Floor] = field(init=False)
    elevators: List[Elevator] = field(init=False)

    def __post_init__(self) -> None:
        if self.num_floors < 1:
            raise ValueError("Building needs at least one floor")
        if self.basement_floors < 0:
            raise ValueError("Basement floor count cannot be negative")
        self.floors = {number: Floor(number) for number in self.floor_range}
        service_floors = self.elevator_config.service_floors or list(self.floor_range)
        for number in service_floors:
            self._check_floor(number)
        self.elevators = [
            Elevator(
                elevator_id=index,
                capacity=self.elevator_config.capacity,
                speed=self.elevator_config.speed_floors_per_second,
                door_open_time=self.elevator_config.door_open_time,
                door_close_time=self.elevator_config.door_close_time,
                service_floors=list(service_floors),
            )
            for index in range(1, self.elevator_config.count + 1)
        ]

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "Building":
        return cls(
            num_floors=config.building.floors,
            elevator_config=config.elevator,
            basement_floors=config.building.basement_floors,
        )

    @property
    def floor_range(self) -> range:
        start = -self.basement_floors if self.basement_floors > 0 else 1
        return range(start, self.num_floors + 1)

    @property
    def total_floors(self) -> int:
        return len(self.floor_range)

    def valid_floor(self, floor_number: int) -> bool:
        return floor_number in self.floor_range

    def floor(self, floor_number: int) -> Floor:
        self._check_floor(floor_number)
        return self.floors[floor_number]

    def add_user_to_floor(self, user: User, floor_number: int) -> None:
        self.floor(floor_number).add_user(user)

    def remove_user_from_floor(self, user: User, floor_number: int) -> bool:
        return self.floor(floor_number).remove_user(user)

    def people_waiting_on_floor(self, floor_number: int) -> List[User]:
        return list(self.floor(floor_number).waiting)

    def elevator_by_id(self, elevator_id: int) -> Optional[Elevator]:
        for elevator in self.elevators:
            if elevator.elevator_id == elevator_id:
                return elevator
        return None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "floors": [
                {
                    "number": floor.number,
                    "waiting": len(floor),
                    "in_transit": floor.in_transit,
                }
                for floor in self.floors.values()
            ],
            "elevators": [elevator.status() for elevator in self.elevators],
        }

    def _check_floor(self, floor_number: int) -> None:
        if not self.valid_floor(floor_number):
            raise InvalidFloorError(
                f"Floor {floor_number} is outside the building range "
                f"{self.floor_range.start}..{self.floor_range.stop - 1}"
            )
