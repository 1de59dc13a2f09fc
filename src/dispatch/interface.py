from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

# Distance (in floors) within which an elevator counts as standing at a floor.
FLOOR_EPSILON = 0.1


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"

    @classmethod
    def between(cls, origin: int, destination: int) -> "Direction":
        return cls.UP if destination > origin else cls.DOWN


class ElevatorState(str, Enum):
    IDLE = "idle"
    MOVING_UP = "moving_up"
    MOVING_DOWN = "moving_down"
    DOORS_OPENING = "doors_opening"
    DOORS_CLOSING = "doors_closing"

    @property
    def moving(self) -> bool:
        return self in (ElevatorState.MOVING_UP, ElevatorState.MOVING_DOWN)


class Action(str, Enum):
    MOVE_TO_FLOOR = "move_to_floor"
    STOP = "stop"
    OPEN_DOORS = "open_doors"
    CLOSE_DOORS = "close_doors"


@dataclass(frozen=True)
class UserView:
    """Read-only copy of the rider that raised a call."""

    user_id: int
    origin_floor: int
    destination_floor: int
    spawn_time: float


@dataclass(frozen=True)
class CallView:
    """Representation of a pending hall call for strategies."""

    floor: int
    direction: Direction
    user: UserView
    raised_at: float

    @property
    def key(self) -> Tuple[int, Direction]:
        return (self.floor, self.direction)


@dataclass(frozen=True)
class ElevatorSnapshot:
    """Lightweight view of an elevator for dispatch decisions."""

    elevator_id: int
    current_floor: float
    state: ElevatorState
    passenger_count: int
    capacity: int
    target_floor: Optional[int]
    service_floors: Tuple[int, ...]
    car_calls: Tuple[int, ...] = ()

    @property
    def available_capacity(self) -> int:
        return max(0, self.capacity - self.passenger_count)

    @property
    def idle(self) -> bool:
        return self.state == ElevatorState.IDLE

    def floor_number(self) -> Optional[int]:
        """Return the floor the car is standing at, or None between floors."""
        nearest = round(self.current_floor)
        if abs(self.current_floor - nearest) < FLOOR_EPSILON:
            return int(nearest)
        return None

    def at_floor(self, floor: int) -> bool:
        return abs(self.current_floor - floor) < FLOOR_EPSILON

    def serves(self, floor: int) -> bool:
        return floor in self.service_floors


@dataclass(frozen=True)
class Assignment:
    """A strategy's directive to one elevator."""

    elevator_id: int
    action: Action
    target_floor: Optional[int] = None

    @classmethod
    def move_to(cls, elevator_id: int, floor: int) -> "Assignment":
        return cls(elevator_id, Action.MOVE_TO_FLOOR, floor)

    @classmethod
    def stop(cls, elevator_id: int) -> "Assignment":
        return cls(elevator_id, Action.STOP)

    @classmethod
    def open_doors(cls, elevator_id: int) -> "Assignment":
        return cls(elevator_id, Action.OPEN_DOORS)

    @classmethod
    def close_doors(cls, elevator_id: int) -> "Assignment":
        return cls(elevator_id, Action.CLOSE_DOORS)


class DispatchStrategy(ABC):
    """Strategy interface for dispatching elevators to hall calls.

    The engine calls :meth:`dispatch` once per tick with the calls that are
    still pending and a snapshot of every elevator. Strategies never touch
    engine state; they only return assignments, and the engine drops the
    ones it cannot honour.
    """

    name: str = "strategy"

    @abstractmethod
    def dispatch(
        self,
        calls: Sequence[CallView],
        elevators: Sequence[ElevatorSnapshot],
    ) -> List[Assignment]:
        """Return the assignments to apply this tick."""

    def initialize_simulation(self) -> None:
        """Called once before the first tick."""

    def finalize_simulation(self, statistics: Any) -> None:
        """Called once after the last tick with the final statistics."""
