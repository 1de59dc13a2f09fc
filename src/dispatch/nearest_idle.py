from __future__ import annotations

from typing import List, Optional, Sequence

from .interface import Assignment, CallView, DispatchStrategy, ElevatorSnapshot
from .utils import ClaimBook, available_for_pickup, deliver_riders, estimate_distance, send_to


class NearestIdleStrategy(DispatchStrategy):
    """Sends the closest idle car to each hall call, oldest call first.

    Cars carrying riders finish their deliveries before they are
    considered for a new pickup.
    """

    name = "nearest_idle"

    def __init__(self) -> None:
        self.claims = ClaimBook()

    def initialize_simulation(self) -> None:
        self.claims.clear()

    def dispatch(
        self,
        calls: Sequence[CallView],
        elevators: Sequence[ElevatorSnapshot],
    ) -> List[Assignment]:
        assignments: List[Assignment] = []
        self.claims.refresh(calls, elevators)

        for elevator in elevators:
            if not elevator.idle:
                continue
            delivery = deliver_riders(elevator)
            if delivery is not None:
                assignments.extend(delivery)

        for call in sorted(calls, key=lambda c: c.raised_at):
            if self.claims.is_claimed(call):
                continue
            candidate = self._choose_elevator(elevators, call)
            if candidate is None:
                continue
            self.claims.claim(call, candidate)
            assignments.extend(send_to(candidate, call.floor))
        return assignments

    def _choose_elevator(
        self, elevators: Sequence[ElevatorSnapshot], call: CallView
    ) -> Optional[ElevatorSnapshot]:
        busy = self.claims.busy_elevators()
        available = [
            e for e in elevators
            if e.elevator_id not in busy and available_for_pickup(e, call.floor)
        ]
        if not available:
            return None
        available.sort(key=lambda e: (estimate_distance(e, call.floor), e.elevator_id))
        return available[0]
