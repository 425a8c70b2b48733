import os

import pytest

from heartbeat_scheduler.config import SchedulerConfig, load_env
from heartbeat_scheduler.runtime.errors import InvalidArgument


def test_defaults():
    config = SchedulerConfig()
    assert config.tick_rate == 60.0
    assert config.default_wait == 0.03
    assert config.default_lifetime == 10.0
    assert config.frame_interval == pytest.approx(1 / 60)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("HEARTBEAT_TICK_RATE", "30")
    monkeypatch.setenv("HEARTBEAT_DEFAULT_WAIT", "0.1")
    monkeypatch.setenv("HEARTBEAT_DEFAULT_LIFETIME", "")

    config = SchedulerConfig()

    assert config.tick_rate == 30.0
    assert config.default_wait == 0.1
    assert config.default_lifetime == 10.0


def test_malformed_environment_value(monkeypatch):
    monkeypatch.setenv("HEARTBEAT_TICK_RATE", "fast")
    with pytest.raises(InvalidArgument):
        SchedulerConfig()


@pytest.mark.parametrize(
    "kwargs",
    [{"tick_rate": 0}, {"default_wait": -1}, {"default_lifetime": -0.5}],
)
def test_invalid_values(kwargs):
    with pytest.raises(InvalidArgument):
        SchedulerConfig(**kwargs)


def test_load_env_reads_file(tmp_path, monkeypatch):
    env_file = tmp_path / "scheduler.env"
    env_file.write_text("HEARTBEAT_DEFAULT_LIFETIME=2.5\n")
    monkeypatch.setenv("HEARTBEAT_ENV_FILE", str(env_file))

    try:
        assert load_env() is True
        assert SchedulerConfig().default_lifetime == 2.5
    finally:
        os.environ.pop("HEARTBEAT_DEFAULT_LIFETIME", None)
