from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .interface import Assignment, CallView, DispatchStrategy, ElevatorSnapshot
from .utils import CallKey, ClaimBook, available_for_pickup, deliver_riders, send_to


class FirstComeFirstServedStrategy(DispatchStrategy):
    """Assigns elevators to the oldest outstanding calls.

    Calls are kept in a private backlog in the order they were first seen,
    so a call that is re-raised after a partial pickup keeps its place.
    The oldest backlog entry goes to the first free car by id.
    """

    name = "fcfs"

    def __init__(self) -> None:
        self.backlog: Dict[CallKey, CallView] = {}
        self.claims = ClaimBook()

    def initialize_simulation(self) -> None:
        self.backlog.clear()
        self.claims.clear()

    def dispatch(
        self,
        calls: Sequence[CallView],
        elevators: Sequence[ElevatorSnapshot],
    ) -> List[Assignment]:
        assignments: List[Assignment] = []
        self._update_backlog(calls)
        self.claims.refresh(calls, elevators)

        for elevator in elevators:
            if not elevator.idle:
                continue
            delivery = deliver_riders(elevator)
            if delivery is not None:
                assignments.extend(delivery)

        for call in list(self.backlog.values()):
            if self.claims.is_claimed(call):
                continue
            candidate = self._first_available(elevators, call)
            if candidate is None:
                continue
            self.claims.claim(call, candidate)
            assignments.extend(send_to(candidate, call.floor))
        return assignments

    def _update_backlog(self, calls: Sequence[CallView]) -> None:
        pending = {call.key: call for call in calls}
        for key in list(self.backlog):
            if key not in pending:
                del self.backlog[key]
        for key, call in pending.items():
            if key not in self.backlog:
                self.backlog[key] = call

    def _first_available(
        self, elevators: Sequence[ElevatorSnapshot], call: CallView
    ) -> Optional[ElevatorSnapshot]:
        busy = self.claims.busy_elevators()
        for elevator in sorted(elevators, key=lambda e: e.elevator_id):
            if elevator.elevator_id in busy:
                continue
            if available_for_pickup(elevator, call.floor):
                return elevator
        return None
