"""Simulation primitives for the elevator dispatch simulator."""

from .arrivals import ArrivalEntry, ArrivalQueue, generate_arrivals
from .building import Building
from .calls import CallBoard, CallRequest
from .config import SimulationConfig, load_config
from .elevator import Elevator
from .errors import ConfigurationError, InvalidFloorError, QueueFileError, SimulationError
from .floor import Floor
from .simulation import Simulation, SimulationStatistics, compare_strategies
from .user import User, UserState

__all__ = [
    "ArrivalEntry",
    "ArrivalQueue",
    "Building",
    "CallBoard",
    "CallRequest",
    "ConfigurationError",
    "Elevator",
    "Floor",
    "InvalidFloorError",
    "QueueFileError",
    "Simulation",
    "SimulationConfig",
    "SimulationError",
    "SimulationStatistics",
    "User",
    "UserState",
    "compare_strategies",
    "generate_arrivals",
    "load_config",
]
