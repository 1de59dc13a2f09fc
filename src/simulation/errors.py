from __future__ import annotations


class SimulationError(Exception):
    """Base class for errors raised before or around a simulation run."""


class ConfigurationError(SimulationError):
    """Missing or invalid configuration; raised before any state is built."""


class QueueFileError(SimulationError):
    """A persisted arrival queue could not be read or parsed."""


class InvalidFloorError(SimulationError, ValueError):
    """A floor outside the building's floor range was requested."""
