from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from dispatch import Action, Assignment, DispatchStrategy, load_strategy

from .arrivals import ArrivalEntry, ArrivalQueue
from .building import Building
from .calls import CallBoard
from .config import SimulationConfig
from .elevator import Elevator
from .errors import InvalidFloorError
from .user import User

logger = logging.getLogger(__name__)

DEFAULT_TICK = 0.1


@dataclass(frozen=True)
class SimulationStatistics:
    simulation_time: float
    total_users: int
    completed_users: int
    average_wait_time: float
    average_ride_time: float
    average_total_time: float
    elevator_utilization: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _average(values: Iterable[Optional[float]]) -> float:
    collected = [value for value in values if value is not None]
    if not collected:
        return 0.0
    return sum(collected) / len(collected)


class Simulation:
    """Fixed-timestep elevator simulation driven by a dispatch strategy.

    Each call to :meth:`step` spawns due arrivals, lets users press buttons
    and leave cars, asks the strategy for assignments, applies the valid
    ones, moves the cars, boards waiting users and advances the clock by
    one tick.
    """

    def __init__(
        self,
        config: SimulationConfig,
        strategy: DispatchStrategy,
        queue: Optional[ArrivalQueue] = None,
        tick: float = DEFAULT_TICK,
    ) -> None:
        if tick <= 0:
            raise ValueError("tick must be positive")
        self.config = config
        self.strategy = strategy
        self.queue = queue if queue is not None else ArrivalQueue.generate(config)
        self.tick = tick
        self.building = Building.from_config(config)
        self._check_queue()
        self.call_board = CallBoard()
        self.users: List[User] = []
        self.completed_users: List[User] = []
        self.current_time: float = 0.0
        self.tick_count: int = 0
        self.running = False
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self._initialized = False

    def _check_queue(self) -> None:
        for entry in self.queue.entries:
            for floor in (entry.start_floor, entry.destination_floor):
                if not self.building.valid_floor(floor):
                    floor_range = self.building.floor_range
                    raise InvalidFloorError(
                        f"Arrival {entry.entry_id} uses floor {floor} outside the building range "
                        f"{floor_range.start}..{floor_range.stop - 1}"
                    )

    @property
    def duration_seconds(self) -> float:
        return self.config.duration_seconds

    @property
    def finished(self) -> bool:
        return self.current_time >= self.duration_seconds

    def start(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        self.running = True
        logger.info(
            "Starting simulation with strategy %s for %.1fs (%d queued arrivals)",
            self.strategy.name,
            self.duration_seconds,
            self.queue.remaining,
        )
        self.strategy.initialize_simulation()

    def finish(self) -> SimulationStatistics:
        self.running = False
        statistics = self.statistics()
        self.strategy.finalize_simulation(statistics)
        logger.info(
            "Simulation finished at %.1fs: %d/%d users completed",
            statistics.simulation_time,
            statistics.completed_users,
            statistics.total_users,
        )
        return statistics

    def run(self) -> SimulationStatistics:
        self.start()
        while self.running and not self.finished:
            self.step()
        return self.finish()

    def stop(self) -> None:
        self.running = False

    def step(self) -> None:
        now = self.current_time
        self._spawn_users(now)
        self._process_user_interactions(now)

        calls = self.call_board.views()
        snapshots = tuple(elevator.snapshot() for elevator in self.building.elevators)
        assignments = self.strategy.dispatch(calls, snapshots)
        self._apply_assignments(assignments)

        for elevator in self.building.elevators:
            elevator.update(self.tick)

        self._board_waiting_users(now)

        for user in self.users:
            user.update(now)
        self._collect_completed_users()

        self.tick_count += 1
        self.current_time = round(self.tick_count * self.tick, 6)
        self._emit("tick", {"time": self.current_time})

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def statistics(self) -> SimulationStatistics:
        completed = self.completed_users
        elevators = self.building.elevators
        if elevators and self.current_time > 0:
            utilization = sum(e.active_time for e in elevators) / (len(elevators) * self.current_time)
        else:
            utilization = 0.0
        return SimulationStatistics(
            simulation_time=self.current_time,
            total_users=len(self.users) + len(completed),
            completed_users=len(completed),
            average_wait_time=_average(u.wait_time for u in completed),
            average_ride_time=_average(u.ride_time for u in completed),
            average_total_time=_average(u.total_time for u in completed),
            elevator_utilization=utilization,
        )

    def current_state(self) -> Dict[str, Any]:
        return {
            "time": self.current_time,
            "strategy": self.strategy.name,
            "running": self.running,
            "building": self.building.snapshot(),
            "users": [user.status() for user in self.users],
            "call_requests": [
                {
                    "floor": call.floor,
                    "direction": call.direction.value,
                    "user_id": call.user.user_id,
                    "raised_at": call.raised_at,
                }
                for call in self.call_board
            ],
            "statistics": self.statistics().to_dict(),
        }

    def _spawn_users(self, now: float) -> None:
        for entry in self.queue.drain_due(now):
            user = self._spawn_user(entry, now)
            self._emit("spawn", user)

    def _spawn_user(self, entry: ArrivalEntry, now: float) -> User:
        user = User(
            user_id=entry.entry_id,
            origin_floor=entry.start_floor,
            destination_floor=entry.destination_floor,
            spawn_time=now,
        )
        self.building.add_user_to_floor(user, user.origin_floor)
        self.users.append(user)
        return user

    def _process_user_interactions(self, now: float) -> None:
        delay = self.config.users.button_press_delay
        for user in list(self.users):
            if user.waiting:
                if not self.call_board.covers(user) and user.can_press_button(now, delay):
                    self.call_board.raise_call(user, now)
                    user.press_button(now)
            elif user.riding:
                elevator = self.building.elevator_by_id(user.elevator_id)
                if elevator is None:
                    continue
                if elevator.at_floor(user.destination_floor) and elevator.doors_open:
                    user.exit_elevator(now)
                    elevator.remove_passenger(user)
                    floor = self.building.floor(user.destination_floor)
                    floor.in_transit = max(0, floor.in_transit - 1)
                    self._emit("complete", user)

    def _apply_assignments(self, assignments: Optional[Sequence[Assignment]]) -> None:
        if not assignments:
            return
        for assignment in assignments:
            self._apply_assignment(assignment)

    def _apply_assignment(self, assignment: object) -> bool:
        if not isinstance(assignment, Assignment):
            logger.debug("Dropping non-assignment %r", assignment)
            return False
        elevator = self.building.elevator_by_id(assignment.elevator_id)
        if elevator is None:
            logger.debug("Dropping assignment for unknown elevator %r", assignment.elevator_id)
            return False
        try:
            action = Action(assignment.action)
        except ValueError:
            logger.debug("Dropping unknown action %r for elevator %s", assignment.action, elevator.elevator_id)
            return False

        if action == Action.MOVE_TO_FLOOR:
            target = assignment.target_floor
            if not self._valid_target(elevator, target):
                return False
            accepted = elevator.move_to_floor(target)
        elif action == Action.STOP:
            accepted = elevator.stop()
        elif action == Action.OPEN_DOORS:
            accepted = elevator.open_doors()
        else:
            accepted = elevator.close_doors()

        if not accepted:
            logger.debug(
                "Elevator %s rejected %s in state %s",
                elevator.elevator_id,
                action.value,
                elevator.state.value,
            )
        return accepted

    def _valid_target(self, elevator: Elevator, target: Optional[int]) -> bool:
        if not isinstance(target, int) or not self.building.valid_floor(target):
            logger.debug("Elevator %s given invalid target floor %r", elevator.elevator_id, target)
            return False
        if not elevator.can_service_floor(target):
            logger.debug("Elevator %s does not serve floor %s", elevator.elevator_id, target)
            return False
        return True

    def _board_waiting_users(self, now: float) -> None:
        for elevator in self.building.elevators:
            if not elevator.idle or elevator.target_floor is not None or elevator.is_full:
                continue
            floor_number = elevator.floor_number()
            if floor_number is None or not self.building.valid_floor(floor_number):
                continue
            floor = self.building.floor(floor_number)
            eligible = floor.eligible(
                lambda user: user.waiting and elevator.can_service_floor(user.destination_floor)
            )
            if not eligible:
                continue
            elevator.open_doors()
            boarded = set()
            for user in eligible:
                if not elevator.add_passenger(user):
                    break
                floor.remove_user(user)
                user.board_elevator(now, elevator.elevator_id)
                self.building.floor(user.destination_floor).in_transit += 1
                boarded.add(user.direction)
                self._emit("board", {"user": user, "elevator_id": elevator.elevator_id, "time": now})
            for direction in boarded:
                left_behind = any(user.direction == direction for user in floor.waiting)
                self.call_board.retire(floor_number, direction, carry_over=left_behind)

    def _collect_completed_users(self) -> None:
        completed = [user for user in self.users if user.completed]
        if not completed:
            return
        self.completed_users.extend(completed)
        self.users = [user for user in self.users if not user.completed]

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)


def compare_strategies(
    config: SimulationConfig,
    names: Sequence[str],
    queue: Optional[ArrivalQueue] = None,
    tick: float = DEFAULT_TICK,
) -> Dict[str, SimulationStatistics]:
    """Run every named strategy against the same arrivals."""

    if queue is None:
        queue = ArrivalQueue.generate(config)
    results: Dict[str, SimulationStatistics] = {}
    for name in names:
        queue.reset()
        simulation = Simulation(config, load_strategy(name), queue=queue, tick=tick)
        results[name] = simulation.run()
    return results
