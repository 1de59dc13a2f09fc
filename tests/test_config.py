from __future__ import annotations

import pytest

from simulation import ConfigurationError, SimulationConfig, load_config

from conftest import build_config_dict

VALID_TOML = """
[building]
floors = 12
basement_floors = 1

[elevators.main]
count = 3
capacity = 6
speed_floors_per_second = 1.5
door_open_time = 2.0
door_close_time = 1.5
service_floors = [0, 1, 5, 12]

[simulation]
duration_minutes = 15
user_spawn_rate = 0.2
random_seed = 7

[users]
button_press_delay = 0.5
"""


def test_load_config_from_toml(tmp_path):
    path = tmp_path / "sim.toml"
    path.write_text(VALID_TOML)
    config = load_config(path)
    assert config.building.floors == 12
    assert config.elevator.count == 3
    assert config.service_floors == [0, 1, 5, 12]
    assert list(config.floor_range) == list(range(-1, 13))
    assert config.duration_seconds == 900.0
    assert config.users.button_press_delay == 0.5


def test_defaults_when_optional_sections_are_missing():
    config = SimulationConfig.from_dict(build_config_dict(random_seed=None))
    assert config.simulation.random_seed is None
    assert config.users.button_press_delay == 0.0
    assert config.service_floors == list(range(1, 11))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "absent.toml")


def test_invalid_toml(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[building\nfloors = 3")
    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_config(path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"floors": 0},
        {"basement_floors": -1},
        {"count": 0},
        {"capacity": 0},
        {"speed_floors_per_second": 0},
        {"door_open_time": -1},
        {"duration_minutes": 0},
        {"user_spawn_rate": -0.5},
        {"service_floors": []},
        {"service_floors": [1, 11]},
        {"button_press_delay": -1},
    ],
)
def test_invalid_values_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        SimulationConfig.from_dict(build_config_dict(**overrides))


def test_missing_section_raises():
    data = build_config_dict()
    del data["elevators"]
    with pytest.raises(ConfigurationError):
        SimulationConfig.from_dict(data)


def test_unknown_key_in_section_is_rejected():
    data = build_config_dict()
    data["building"]["lobbies"] = 2
    with pytest.raises(ConfigurationError):
        SimulationConfig.from_dict(data)
