from __future__ import annotations

import json
import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from .config import SimulationConfig
from .errors import QueueFileError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArrivalEntry:
    entry_id: int
    spawn_time: float
    start_floor: int
    destination_floor: int


class QueueMetadata(BaseModel):
    seed: Optional[int] = None
    duration_minutes: float
    spawn_rate: float
    generated_at: str


class QueueEntryModel(BaseModel):
    id: int = Field(ge=1)
    spawn_time: float = Field(ge=0)
    start_floor: int
    destination_floor: int

    @model_validator(mode="after")
    def _check_trip(self) -> "QueueEntryModel":
        if self.start_floor == self.destination_floor:
            raise ValueError(f"entry {self.id} starts and ends on floor {self.start_floor}")
        return self


class QueueDocument(BaseModel):
    """On-disk layout of a persisted arrival queue."""

    metadata: QueueMetadata
    people: List[QueueEntryModel]

    @model_validator(mode="after")
    def _check_order(self) -> "QueueDocument":
        previous = 0.0
        for entry in self.people:
            if entry.spawn_time < previous:
                raise ValueError(f"entry {entry.id} spawns before the entry preceding it")
            previous = entry.spawn_time
        return self


def _draw_seed() -> int:
    return random.SystemRandom().randrange(2**32)


def generate_arrivals(config: SimulationConfig, rng: Optional[random.Random] = None) -> List[ArrivalEntry]:
    """Sample a Poisson arrival process over the configured duration.

    Inter-arrival gaps are exponential with the configured rate, origins are
    uniform over the floor range and destinations are redrawn until they
    differ from the origin.
    """

    rate = config.simulation.user_spawn_rate
    floors = list(config.floor_range)
    if rate <= 0 or len(floors) < 2:
        return []
    if rng is None:
        rng = random.Random(config.simulation.random_seed)

    duration = config.duration_seconds
    entries: List[ArrivalEntry] = []
    current_time = 0.0
    while True:
        current_time += -math.log(1.0 - rng.random()) / rate
        if current_time >= duration:
            break
        origin = rng.choice(floors)
        destination = rng.choice(floors)
        while destination == origin:
            destination = rng.choice(floors)
        entries.append(
            ArrivalEntry(
                entry_id=len(entries) + 1,
                spawn_time=round(current_time, 1),
                start_floor=origin,
                destination_floor=destination,
            )
        )
    return entries


class ArrivalQueue:
    """Ordered arrivals consumed through a forward-only cursor."""

    def __init__(self, entries: List[ArrivalEntry], metadata: QueueMetadata) -> None:
        self.entries = list(entries)
        self.metadata = metadata
        self._cursor = 0

    @classmethod
    def generate(cls, config: SimulationConfig) -> "ArrivalQueue":
        seed = config.simulation.random_seed
        if seed is None:
            seed = _draw_seed()
        entries = generate_arrivals(config, random.Random(seed))
        metadata = QueueMetadata(
            seed=seed,
            duration_minutes=config.simulation.duration_minutes,
            spawn_rate=config.simulation.user_spawn_rate,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info("Generated %d arrivals with seed %s", len(entries), seed)
        return cls(entries, metadata)

    def peek_due(self, current_time: float) -> Optional[ArrivalEntry]:
        if self._cursor >= len(self.entries):
            return None
        entry = self.entries[self._cursor]
        if entry.spawn_time > current_time + 1e-9:
            return None
        return entry

    def pop_due(self, current_time: float) -> Optional[ArrivalEntry]:
        entry = self.peek_due(current_time)
        if entry is not None:
            self._cursor += 1
        return entry

    def drain_due(self, current_time: float) -> List[ArrivalEntry]:
        due: List[ArrivalEntry] = []
        entry = self.pop_due(current_time)
        while entry is not None:
            due.append(entry)
            entry = self.pop_due(current_time)
        return due

    def reset(self) -> None:
        self._cursor = 0

    @property
    def remaining(self) -> int:
        return len(self.entries) - self._cursor

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_document(self) -> QueueDocument:
        return QueueDocument(
            metadata=self.metadata,
            people=[
                QueueEntryModel(
                    id=entry.entry_id,
                    spawn_time=entry.spawn_time,
                    start_floor=entry.start_floor,
                    destination_floor=entry.destination_floor,
                )
                for entry in self.entries
            ],
        )

    def save(self, path: Union[str, Path]) -> None:
        target = Path(path)
        target.write_text(self.to_document().model_dump_json(indent=2))
        logger.info("Saved %d arrivals to %s", len(self.entries), target)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ArrivalQueue":
        source = Path(path)
        try:
            raw = json.loads(source.read_text())
        except FileNotFoundError as exc:
            raise QueueFileError(f"Queue file not found: {source}") from exc
        except json.JSONDecodeError as exc:
            raise QueueFileError(f"Queue file {source} is not valid JSON: {exc}") from exc
        try:
            document = QueueDocument.model_validate(raw)
        except ValidationError as exc:
            raise QueueFileError(f"Queue file {source} is malformed: {exc}") from exc
        entries = [
            ArrivalEntry(
                entry_id=item.id,
                spawn_time=item.spawn_time,
                start_floor=item.start_floor,
                destination_floor=item.destination_floor,
            )
            for item in document.people
        ]
        logger.info("Loaded %d arrivals from %s", len(entries), source)
        return cls(entries, document.metadata)
