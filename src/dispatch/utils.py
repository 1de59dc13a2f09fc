from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .interface import Assignment, CallView, Direction, ElevatorSnapshot, ElevatorState

CallKey = Tuple[int, Direction]


def estimate_distance(elevator: ElevatorSnapshot, floor: int) -> float:
    """Estimate how many floors a car must cover before it can serve a floor.

    A moving car first has to finish its current leg, so the remaining
    distance to its target is added before measuring from there.
    """

    if elevator.state.moving and elevator.target_floor is not None:
        leg = abs(elevator.target_floor - elevator.current_floor)
        return leg + abs(elevator.target_floor - floor)
    return abs(elevator.current_floor - floor)


def sort_floors_in_direction(floors: Iterable[int], direction: int) -> List[int]:
    """Sort floors to mirror SCAN behavior for a given direction."""

    key = (lambda floor: floor) if direction >= 0 else (lambda floor: -floor)
    return sorted(set(floors), key=key)


def send_to(elevator: ElevatorSnapshot, floor: int) -> List[Assignment]:
    """Head an idle car to a floor.

    The close command is ignored by the engine when the doors are already
    shut, and the move is ignored until they are, so repeating this pair
    every tick gets the car underway.
    """

    if elevator.at_floor(floor):
        return []
    return [
        Assignment.close_doors(elevator.elevator_id),
        Assignment.move_to(elevator.elevator_id, floor),
    ]


def deliver_riders(elevator: ElevatorSnapshot) -> Optional[List[Assignment]]:
    """Serve the car's own floor selections, or return None when it has none."""

    if not elevator.car_calls:
        return None
    here = elevator.floor_number()
    if here is not None and here in elevator.car_calls:
        return [Assignment.open_doors(elevator.elevator_id)]
    nearest = min(elevator.car_calls, key=lambda floor: (abs(floor - elevator.current_floor), floor))
    return send_to(elevator, nearest)


def available_for_pickup(elevator: ElevatorSnapshot, floor: int) -> bool:
    return (
        elevator.idle
        and not elevator.car_calls
        and elevator.available_capacity > 0
        and elevator.serves(floor)
    )


class ClaimBook:
    """Remembers which car is on its way to which hall call."""

    def __init__(self) -> None:
        self._claims: Dict[CallKey, int] = {}

    def refresh(self, calls: Sequence[CallView], elevators: Sequence[ElevatorSnapshot]) -> None:
        pending = {call.key for call in calls}
        by_id = {elevator.elevator_id: elevator for elevator in elevators}
        for key, elevator_id in list(self._claims.items()):
            elevator = by_id.get(elevator_id)
            floor = key[0]
            # A car working its doors has not left for the call yet.
            still_heading = elevator is not None and (
                elevator.target_floor == floor
                or (elevator.target_floor is None and elevator.at_floor(floor))
                or elevator.state in (ElevatorState.DOORS_OPENING, ElevatorState.DOORS_CLOSING)
            )
            if key not in pending or not still_heading:
                del self._claims[key]

    def claim(self, call: CallView, elevator: ElevatorSnapshot) -> None:
        self._claims[call.key] = elevator.elevator_id

    def is_claimed(self, call: CallView) -> bool:
        return call.key in self._claims

    def busy_elevators(self) -> Set[int]:
        return set(self._claims.values())

    def clear(self) -> None:
        self._claims.clear()

    def __len__(self) -> int:
        return len(self._claims)
