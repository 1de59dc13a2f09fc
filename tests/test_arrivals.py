from __future__ import annotations

import json
import random

import pytest

from simulation import ArrivalQueue, QueueFileError, generate_arrivals


def test_same_seed_gives_same_arrivals(make_config):
    config = make_config(duration_minutes=10, user_spawn_rate=0.5)
    assert generate_arrivals(config) == generate_arrivals(config)


def test_different_seeds_differ(make_config):
    first = generate_arrivals(make_config(duration_minutes=10, random_seed=1))
    second = generate_arrivals(make_config(duration_minutes=10, random_seed=2))
    assert first != second


def test_explicit_rng_is_used(make_config):
    config = make_config(duration_minutes=5, random_seed=None)
    assert generate_arrivals(config, random.Random(9)) == generate_arrivals(config, random.Random(9))


def test_entries_are_well_formed(make_config):
    config = make_config(floors=6, basement_floors=2, duration_minutes=30, user_spawn_rate=1.0)
    entries = generate_arrivals(config)
    assert entries
    assert [e.entry_id for e in entries] == list(range(1, len(entries) + 1))
    times = [e.spawn_time for e in entries]
    assert times == sorted(times)
    assert all(0 <= t <= config.duration_seconds for t in times)
    assert all(round(t, 1) == t for t in times)
    assert all(e.start_floor != e.destination_floor for e in entries)
    floors = set(config.floor_range)
    assert {e.start_floor for e in entries} <= floors
    assert {e.destination_floor for e in entries} <= floors
    assert any(e.start_floor < 1 for e in entries)


def test_first_arrival_for_reference_seed(make_config):
    entries = generate_arrivals(make_config())
    assert entries
    assert entries[0].spawn_time == pytest.approx(10.2)


def test_zero_rate_gives_empty_queue(make_config):
    assert generate_arrivals(make_config(user_spawn_rate=0)) == []
    assert len(ArrivalQueue.generate(make_config(user_spawn_rate=0))) == 0


def test_single_floor_building_gives_empty_queue(make_config):
    assert generate_arrivals(make_config(floors=1)) == []


def test_missing_seed_is_drawn_and_recorded(make_config):
    queue = ArrivalQueue.generate(make_config(random_seed=None))
    assert queue.metadata.seed is not None
    replay = generate_arrivals(make_config(random_seed=queue.metadata.seed))
    assert replay == queue.entries


def test_cursor_consumes_due_entries_in_order(make_queue):
    queue = make_queue([(0.0, 1, 2), (0.0, 2, 3), (1.5, 3, 1)])
    assert queue.peek_due(0.0).entry_id == 1
    assert [e.entry_id for e in queue.drain_due(1.0)] == [1, 2]
    assert queue.pop_due(1.0) is None
    assert queue.remaining == 1
    assert queue.pop_due(1.5).entry_id == 3
    assert queue.exhausted
    queue.reset()
    assert queue.remaining == 3


def test_save_and_load_round_trip(make_config, tmp_path):
    queue = ArrivalQueue.generate(make_config(duration_minutes=5))
    path = tmp_path / "queue.json"
    queue.save(path)

    loaded = ArrivalQueue.load(path)
    assert loaded.entries == queue.entries
    assert loaded.metadata == queue.metadata
    assert loaded.remaining == len(queue)

    document = json.loads(path.read_text())
    assert set(document) == {"metadata", "people"}
    assert set(document["people"][0]) == {"id", "spawn_time", "start_floor", "destination_floor"}


def _write(tmp_path, payload) -> str:
    path = tmp_path / "queue.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    return str(path)


METADATA = {"seed": 1, "duration_minutes": 1, "spawn_rate": 0.1, "generated_at": "2024-01-01T00:00:00"}


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        {"people": []},
        {"metadata": METADATA, "people": [{"id": 1, "spawn_time": 0.5, "start_floor": 2}]},
        {"metadata": METADATA, "people": [{"id": 1, "spawn_time": 0.5, "start_floor": 2, "destination_floor": 2}]},
        {
            "metadata": METADATA,
            "people": [
                {"id": 1, "spawn_time": 3.0, "start_floor": 1, "destination_floor": 2},
                {"id": 2, "spawn_time": 1.0, "start_floor": 2, "destination_floor": 1},
            ],
        },
    ],
    ids=["bad-json", "no-metadata", "missing-field", "self-trip", "decreasing-times"],
)
def test_malformed_queue_file(tmp_path, payload):
    with pytest.raises(QueueFileError) as excinfo:
        ArrivalQueue.load(_write(tmp_path, payload))
    assert excinfo.value.__cause__ is not None


def test_missing_queue_file(tmp_path):
    with pytest.raises(QueueFileError, match="not found"):
        ArrivalQueue.load(tmp_path / "absent.json")
