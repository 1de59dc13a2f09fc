from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .interface import (
    FLOOR_EPSILON,
    Assignment,
    CallView,
    Direction,
    DispatchStrategy,
    ElevatorSnapshot,
    ElevatorState,
)
from .utils import ClaimBook, send_to, sort_floors_in_direction


class ScanStrategy(DispatchStrategy):
    """Implements an elevator SCAN algorithm (elevator algorithm).

    Each car keeps sweeping in one direction, stopping for its own riders
    and for hall calls along the way, and only turns around once nothing
    is left ahead of it.
    """

    name = "scan"

    def __init__(self) -> None:
        self.claims = ClaimBook()
        self.sweep: Dict[int, int] = {}

    def initialize_simulation(self) -> None:
        self.claims.clear()
        self.sweep.clear()

    def dispatch(
        self,
        calls: Sequence[CallView],
        elevators: Sequence[ElevatorSnapshot],
    ) -> List[Assignment]:
        assignments: List[Assignment] = []
        self.claims.refresh(calls, elevators)

        for elevator in elevators:
            if elevator.state == ElevatorState.MOVING_UP:
                self.sweep[elevator.elevator_id] = 1
            elif elevator.state == ElevatorState.MOVING_DOWN:
                self.sweep[elevator.elevator_id] = -1

        # Prioritize calls along current travel directions
        for elevator in elevators:
            if elevator.state.moving:
                assignments.extend(self._pick_up_in_path(elevator, calls))

        for elevator in elevators:
            if elevator.idle:
                assignments.extend(self._next_stop(elevator, calls))
        return assignments

    def _pick_up_in_path(
        self, elevator: ElevatorSnapshot, calls: Sequence[CallView]
    ) -> List[Assignment]:
        if elevator.available_capacity <= 0 or elevator.target_floor is None:
            return []
        direction = 1 if elevator.state == ElevatorState.MOVING_UP else -1
        wanted = Direction.UP if direction > 0 else Direction.DOWN
        in_path = [
            call for call in calls
            if call.direction == wanted
            and not self.claims.is_claimed(call)
            and elevator.serves(call.floor)
            and self._is_ahead(elevator, call.floor, direction)
            and (call.floor - elevator.target_floor) * direction < 0
        ]
        if not in_path:
            return []
        call = min(in_path, key=lambda c: abs(c.floor - elevator.current_floor))
        self.claims.claim(call, elevator)
        return [Assignment.move_to(elevator.elevator_id, call.floor)]

    def _next_stop(
        self, elevator: ElevatorSnapshot, calls: Sequence[CallView]
    ) -> List[Assignment]:
        here = elevator.floor_number()
        if here is not None and here in elevator.car_calls:
            return [Assignment.open_doors(elevator.elevator_id)]

        direction = self.sweep.get(elevator.elevator_id, 1)
        for heading in (direction, -direction):
            floor = self._nearest_ahead(elevator, calls, heading)
            if floor is None:
                continue
            self.sweep[elevator.elevator_id] = heading
            for call in calls:
                if call.floor == floor and not self.claims.is_claimed(call):
                    self.claims.claim(call, elevator)
            return send_to(elevator, floor)
        return []

    def _nearest_ahead(
        self, elevator: ElevatorSnapshot, calls: Sequence[CallView], direction: int
    ) -> Optional[int]:
        stops = list(elevator.car_calls)
        if elevator.available_capacity > 0:
            stops.extend(
                call.floor for call in calls
                if not self.claims.is_claimed(call) and elevator.serves(call.floor)
            )
        ahead = [floor for floor in stops if self._is_ahead(elevator, floor, direction)]
        ordered = sort_floors_in_direction(ahead, direction)
        return ordered[0] if ordered else None

    @staticmethod
    def _is_ahead(elevator: ElevatorSnapshot, floor: int, direction: int) -> bool:
        return (floor - elevator.current_floor) * direction > FLOOR_EPSILON
