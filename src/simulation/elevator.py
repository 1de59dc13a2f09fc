from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dispatch import FLOOR_EPSILON, ElevatorSnapshot, ElevatorState

from .user import User

# Slack for floating point drift when comparing timers and distances.
_TIME_EPSILON = 1e-9


@dataclass
class Elevator:
    """A single car with movement, door timing and passenger handling.

    Commands return ``False`` when the current state does not allow them;
    the car is left untouched in that case.
    """

    elevator_id: int
    capacity: int
    speed: float
    door_open_time: float
    door_close_time: float
    service_floors: List[int]
    current_floor: float = field(init=False)
    target_floor: Optional[int] = None
    state: ElevatorState = ElevatorState.IDLE
    passengers: List[User] = field(default_factory=list)
    active_time: float = 0.0
    _doors_open: bool = False
    _door_timer: float = 0.0

    def __post_init__(self) -> None:
        if not self.service_floors:
            raise ValueError(f"Elevator {self.elevator_id} needs at least one service floor")
        self.service_floors = sorted(set(self.service_floors))
        self.current_floor = float(self.service_floors[0])

    def can_service_floor(self, floor: int) -> bool:
        return floor in self.service_floors

    @property
    def available_capacity(self) -> int:
        return self.capacity - len(self.passengers)

    @property
    def is_full(self) -> bool:
        return len(self.passengers) >= self.capacity

    @property
    def idle(self) -> bool:
        return self.state == ElevatorState.IDLE

    @property
    def moving(self) -> bool:
        return self.state.moving

    @property
    def doors_open(self) -> bool:
        if self.state == ElevatorState.DOORS_OPENING:
            return True
        return self.state == ElevatorState.IDLE and self._doors_open

    def at_floor(self, floor: int) -> bool:
        return abs(self.current_floor - floor) < FLOOR_EPSILON

    def floor_number(self) -> Optional[int]:
        nearest = round(self.current_floor)
        if self.at_floor(nearest):
            return int(nearest)
        return None

    @property
    def car_calls(self) -> List[int]:
        return sorted({p.destination_floor for p in self.passengers})

    def move_to_floor(self, floor: int) -> bool:
        if not self.can_service_floor(floor):
            return False
        if self.state in (ElevatorState.DOORS_OPENING, ElevatorState.DOORS_CLOSING):
            return False
        if self.idle and self._doors_open:
            return False
        if self.idle and self.at_floor(floor):
            return True
        self.target_floor = floor
        self.state = ElevatorState.MOVING_UP if floor > self.current_floor else ElevatorState.MOVING_DOWN
        return True

    def stop(self) -> bool:
        """Halt at the nearest serviceable floor ahead, never past the target."""
        if not self.moving or self.target_floor is None:
            return False
        target = self.target_floor
        if self.state == ElevatorState.MOVING_UP:
            ahead = [f for f in self.service_floors if self.current_floor - FLOOR_EPSILON <= f <= target]
            stop_floor = min(ahead)
        else:
            ahead = [f for f in self.service_floors if target <= f <= self.current_floor + FLOOR_EPSILON]
            stop_floor = max(ahead)
        if self.at_floor(stop_floor):
            self._arrive(stop_floor)
        else:
            self.target_floor = stop_floor
        return True

    def open_doors(self) -> bool:
        if not self.idle or self._doors_open:
            return False
        self.state = ElevatorState.DOORS_OPENING
        self._door_timer = self.door_open_time
        return True

    def close_doors(self) -> bool:
        if not self.idle or not self._doors_open:
            return False
        self.state = ElevatorState.DOORS_CLOSING
        self._door_timer = self.door_close_time
        return True

    def add_passenger(self, user: User) -> bool:
        if self.is_full:
            return False
        self.passengers.append(user)
        return True

    def remove_passenger(self, user: User) -> bool:
        try:
            self.passengers.remove(user)
        except ValueError:
            return False
        return True

    def update(self, time_delta: float) -> None:
        if self.state != ElevatorState.IDLE:
            self.active_time += time_delta
        if self.moving:
            self._update_movement(time_delta)
        elif self.state in (ElevatorState.DOORS_OPENING, ElevatorState.DOORS_CLOSING):
            self._update_doors(time_delta)

    def _update_movement(self, time_delta: float) -> None:
        if self.target_floor is None:
            self.state = ElevatorState.IDLE
            return
        distance = self.target_floor - self.current_floor
        step = self.speed * time_delta
        if abs(distance) <= step + _TIME_EPSILON:
            self._arrive(self.target_floor)
        else:
            self.current_floor += math.copysign(step, distance)

    def _update_doors(self, time_delta: float) -> None:
        self._door_timer -= time_delta
        if self._door_timer > _TIME_EPSILON:
            return
        self._door_timer = 0.0
        self._doors_open = self.state == ElevatorState.DOORS_OPENING
        self.state = ElevatorState.IDLE

    def _arrive(self, floor: int) -> None:
        self.current_floor = float(floor)
        self.target_floor = None
        self.state = ElevatorState.IDLE

    def snapshot(self) -> ElevatorSnapshot:
        return ElevatorSnapshot(
            elevator_id=self.elevator_id,
            current_floor=self.current_floor,
            state=self.state,
            passenger_count=len(self.passengers),
            capacity=self.capacity,
            target_floor=self.target_floor,
            service_floors=tuple(self.service_floors),
            car_calls=tuple(self.car_calls),
        )

    def status(self) -> Dict[str, Any]:
        return {
            "id": self.elevator_id,
            "current_floor": self.current_floor,
            "target_floor": self.target_floor,
            "state": self.state.value,
            "doors_open": self.doors_open,
            "passengers": len(self.passengers),
            "capacity": self.capacity,
            "available_capacity": self.available_capacity,
            "service_floors": list(self.service_floors),
        }
