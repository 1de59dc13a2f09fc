from __future__ import annotations

import json

import pytest

import run_simulation

CONFIG_TOML = """
[building]
floors = 6

[elevators.main]
count = 2
capacity = 4
speed_floors_per_second = 2.0
door_open_time = 1.0
door_close_time = 1.0

[simulation]
duration_minutes = 1
user_spawn_rate = 0.2
random_seed = 11
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "sim.toml"
    path.write_text(CONFIG_TOML)
    return path


def test_run_writes_results(config_path, tmp_path, capsys):
    output = tmp_path / "out" / "results.json"
    assert run_simulation.main(["run", str(config_path), "--algorithm", "fcfs", "--output", str(output)]) == 0
    results = json.loads(output.read_text())
    assert results["strategy"] == "fcfs"
    assert results["queue"]["seed"] == 11
    assert results["statistics"]["simulation_time"] == pytest.approx(60.0)
    assert "Elevator utilization" in capsys.readouterr().out


def test_generate_queue_then_replay(config_path, tmp_path):
    queue_path = tmp_path / "queue.json"
    assert run_simulation.main(["generate-queue", str(config_path), str(queue_path)]) == 0
    document = json.loads(queue_path.read_text())
    assert document["metadata"]["seed"] == 11

    output = tmp_path / "replay.json"
    assert run_simulation.main(
        ["run", str(config_path), "--queue", str(queue_path), "--output", str(output)]
    ) == 0
    results = json.loads(output.read_text())
    assert results["statistics"]["total_users"] == len(document["people"])


def test_compare_runs_each_strategy(config_path, tmp_path):
    output = tmp_path / "compare.json"
    code = run_simulation.main(
        ["compare", str(config_path), "--algorithm", "nearest_idle", "--algorithm", "scan", "--output", str(output)]
    )
    assert code == 0
    results = json.loads(output.read_text())
    assert list(results) == ["nearest_idle", "scan"]
    assert results["nearest_idle"]["total_users"] == results["scan"]["total_users"]


@pytest.mark.parametrize(
    "argv_tail",
    [
        ["--algorithm", "warp_drive"],
        ["--queue", "missing-queue.json"],
    ],
)
def test_bad_inputs_exit_with_status_two(config_path, argv_tail, capsys):
    assert run_simulation.main(["run", str(config_path), *argv_tail]) == 2
    assert "error:" in capsys.readouterr().err


def test_missing_config_exits_with_status_two(tmp_path, capsys):
    assert run_simulation.main(["run", str(tmp_path / "nope.toml")]) == 2
    assert "not found" in capsys.readouterr().err


def test_queue_for_a_taller_building_exits_with_status_two(config_path, tmp_path, capsys):
    queue_path = tmp_path / "tall.json"
    queue_path.write_text(
        json.dumps(
            {
                "metadata": {"seed": 1, "duration_minutes": 1, "spawn_rate": 0.1, "generated_at": "2024-01-01T00:00:00+00:00"},
                "people": [{"id": 1, "spawn_time": 0.0, "start_floor": 1, "destination_floor": 9}],
            }
        )
    )
    assert run_simulation.main(["run", str(config_path), "--queue", str(queue_path)]) == 2
    assert "floor 9 outside" in capsys.readouterr().err
