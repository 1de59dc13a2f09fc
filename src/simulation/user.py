from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from dispatch import Direction, UserView


class UserState(str, Enum):
    WAITING = "waiting_for_elevator"
    RIDING = "riding_elevator"
    COMPLETED = "completed"


@dataclass
class User:
    """Represents a rider moving between floors.

    The lifecycle only moves forward: waiting, riding, completed. Each
    transition records a timestamp, and the derived durations stay ``None``
    until the transitions they depend on have happened.
    """

    user_id: int
    origin_floor: int
    destination_floor: int
    spawn_time: float
    state: UserState = UserState.WAITING
    ride_start_time: Optional[float] = None
    completion_time: Optional[float] = None
    button_pressed_at: Optional[float] = None
    elevator_id: Optional[int] = None
    time_in_system: float = 0.0

    def __post_init__(self) -> None:
        if self.origin_floor == self.destination_floor:
            raise ValueError(
                f"User {self.user_id} destination must differ from origin floor {self.origin_floor}"
            )

    @property
    def direction(self) -> Direction:
        return Direction.between(self.origin_floor, self.destination_floor)

    @property
    def wait_start_time(self) -> float:
        return self.spawn_time

    @property
    def waiting(self) -> bool:
        return self.state == UserState.WAITING

    @property
    def riding(self) -> bool:
        return self.state == UserState.RIDING

    @property
    def completed(self) -> bool:
        return self.state == UserState.COMPLETED

    def can_press_button(self, current_time: float, delay: float = 0.0) -> bool:
        return self.waiting and current_time >= self.spawn_time + delay

    def press_button(self, current_time: float) -> None:
        if self.button_pressed_at is None:
            self.button_pressed_at = current_time

    def board_elevator(self, current_time: float, elevator_id: int) -> bool:
        if not self.waiting:
            return False
        self.state = UserState.RIDING
        self.ride_start_time = current_time
        self.elevator_id = elevator_id
        return True

    def exit_elevator(self, current_time: float) -> bool:
        if not self.riding:
            return False
        self.state = UserState.COMPLETED
        self.completion_time = current_time
        return True

    def update(self, current_time: float) -> None:
        end = self.completion_time if self.completion_time is not None else current_time
        self.time_in_system = end - self.spawn_time

    @property
    def wait_time(self) -> Optional[float]:
        if self.ride_start_time is None:
            return None
        return self.ride_start_time - self.wait_start_time

    @property
    def ride_time(self) -> Optional[float]:
        if self.ride_start_time is None or self.completion_time is None:
            return None
        return self.completion_time - self.ride_start_time

    @property
    def total_time(self) -> Optional[float]:
        if self.completion_time is None:
            return None
        return self.completion_time - self.spawn_time

    def view(self) -> UserView:
        return UserView(
            user_id=self.user_id,
            origin_floor=self.origin_floor,
            destination_floor=self.destination_floor,
            spawn_time=self.spawn_time,
        )

    def status(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "origin_floor": self.origin_floor,
            "destination_floor": self.destination_floor,
            "state": self.state.value,
            "spawn_time": self.spawn_time,
            "elevator_id": self.elevator_id,
            "wait_time": self.wait_time,
            "ride_time": self.ride_time,
            "total_time": self.total_time,
        }
