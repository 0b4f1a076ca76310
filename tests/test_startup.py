"""Tests for configuration loading and process startup behaviour."""

from pathlib import Path

import numpy as np
import pytest

from screenwatch import main
from screenwatch.capture.screen_capture import CommandCapture, MssCapture
from screenwatch.config import MonitorConfig, load_config
from screenwatch.errors import ConfigError
from screenwatch.monitor.frame_store import MemoryFrameStore
from screenwatch.monitor.runner import IdleMonitor, Scheduler

WEBHOOK_URL = "https://discord.com/api/webhooks/1/token"

_ENV_VARS = (
    "DISCORD_WEBHOOK_URL",
    "SCREENWATCH_INTERVAL_SECONDS",
    "SCREENWATCH_MAX_WARNINGS",
    "SCREENWATCH_WORKDIR",
    "SCREENWATCH_CAPTURE_BACKEND",
    "SCREENWATCH_CAPTURE_COMMAND",
    "SCREENWATCH_MONITOR_INDEX",
    "SCREENWATCH_SUBJECT",
    "SCREENWATCH_WEBHOOK_TIMEOUT",
    "SCREENWATCH_CAPTURE_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty environment and a cwd without a .env file.

    Each variable is set then deleted so values loaded from a .env file
    during the test are removed again on teardown.
    """
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_missing_webhook_url_raises(clean_env):
    with pytest.raises(ConfigError, match="DISCORD_WEBHOOK_URL"):
        load_config([])


def test_main_exits_nonzero_without_webhook(clean_env, caplog):
    clean_env.setattr(main, "_configure_logging", lambda _debug: None)

    assert main.main([]) == 1
    assert "DISCORD_WEBHOOK_URL" in caplog.text


def test_defaults(clean_env):
    clean_env.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)

    config = load_config([])

    assert config.webhook_url == WEBHOOK_URL
    assert config.interval_seconds == 60.0
    assert config.max_warnings == 3
    assert config.workdir == Path("screenshots")
    assert config.capture_backend == "command"
    assert config.capture_command == ("screencapture", "-x")
    assert (config.trim_width, config.trim_height) == (170, 30)


def test_env_values(clean_env):
    clean_env.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)
    clean_env.setenv("SCREENWATCH_INTERVAL_SECONDS", "180")
    clean_env.setenv("SCREENWATCH_MAX_WARNINGS", "5")
    clean_env.setenv("SCREENWATCH_CAPTURE_BACKEND", "mss")
    clean_env.setenv("SCREENWATCH_CAPTURE_COMMAND", "import -window root")
    clean_env.setenv("SCREENWATCH_SUBJECT", "keigo")

    config = load_config([])

    assert config.interval_seconds == 180.0
    assert config.max_warnings == 5
    assert config.capture_backend == "mss"
    assert config.capture_command == ("import", "-window", "root")
    assert config.subject == "keigo"


def test_cli_overrides_env(clean_env):
    clean_env.setenv("DISCORD_WEBHOOK_URL", "https://example.invalid/env")
    clean_env.setenv("SCREENWATCH_INTERVAL_SECONDS", "180")

    config = load_config(
        ["--webhook-url", WEBHOOK_URL, "--interval", "10", "--max-ticks", "2", "--debug"]
    )

    assert config.webhook_url == WEBHOOK_URL
    assert config.interval_seconds == 10.0
    assert config.max_ticks == 2
    assert config.debug is True


def test_dotenv_file_loaded(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(f"DISCORD_WEBHOOK_URL={WEBHOOK_URL}\nSCREENWATCH_SUBJECT=dotenv\n")

    config = load_config([])

    assert config.webhook_url == WEBHOOK_URL
    assert config.subject == "dotenv"


@pytest.mark.parametrize(
    "name,value",
    [
        ("SCREENWATCH_INTERVAL_SECONDS", "soon"),
        ("SCREENWATCH_INTERVAL_SECONDS", "0"),
        ("SCREENWATCH_INTERVAL_SECONDS", "nan"),
        ("SCREENWATCH_INTERVAL_SECONDS", "inf"),
        ("SCREENWATCH_MAX_WARNINGS", "0"),
        ("SCREENWATCH_CAPTURE_BACKEND", "x11"),
    ],
)
def test_invalid_values_rejected(clean_env, name, value):
    clean_env.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)
    clean_env.setenv(name, value)

    with pytest.raises(ConfigError):
        load_config([])


def test_build_scheduler_wires_components(tmp_path):
    config = MonitorConfig(webhook_url=WEBHOOK_URL, workdir=tmp_path / "shots", max_warnings=2)

    scheduler = main.build_scheduler(config)

    assert (tmp_path / "shots").is_dir()
    assert isinstance(scheduler.monitor.capture_source, CommandCapture)
    assert scheduler.monitor.capture_source.output_path == tmp_path / "shots" / "current.png"
    assert scheduler.monitor.state.max_warnings == 2
    assert scheduler.interval_seconds == 60.0

    config.capture_backend = "mss"
    assert isinstance(main.build_scheduler(config).monitor.capture_source, MssCapture)


class _StaticCapture:
    def __init__(self, frame=None, exc=None):
        self.frame = frame
        self.exc = exc

    def capture(self):
        if self.exc is not None:
            raise self.exc
        return self.frame


class _SilentNotifier:
    def __init__(self):
        self.messages = []
        self.closed = False

    def notify(self, message):
        self.messages.append(message)
        return True

    def close(self):
        self.closed = True


def _fake_scheduler(capture):
    notifier = _SilentNotifier()
    monitor = IdleMonitor(capture, MemoryFrameStore(), notifier)
    return Scheduler(monitor, interval_seconds=1.0, wait=lambda _seconds: False)


def test_run_monitor_exits_zero_on_halt(monkeypatch, tmp_path):
    monkeypatch.setattr(main.signal, "signal", lambda *_args: None)
    frame = np.zeros((80, 240, 3), dtype=np.uint8)
    scheduler = _fake_scheduler(_StaticCapture(frame))
    monkeypatch.setattr(main, "build_scheduler", lambda _config: scheduler)
    config = MonitorConfig(webhook_url=WEBHOOK_URL, workdir=tmp_path)

    assert main.run_monitor(config) == 0
    assert scheduler.monitor.halted is True
    assert len(scheduler.monitor.notifier.messages) == 4
    assert scheduler.monitor.notifier.closed is True


def test_run_monitor_exits_nonzero_on_crash(monkeypatch, tmp_path):
    monkeypatch.setattr(main.signal, "signal", lambda *_args: None)
    scheduler = _fake_scheduler(_StaticCapture(exc=RuntimeError("bug")))
    monkeypatch.setattr(main, "build_scheduler", lambda _config: scheduler)
    config = MonitorConfig(webhook_url=WEBHOOK_URL, workdir=tmp_path)

    assert main.run_monitor(config) == 1


@pytest.mark.parametrize("value", ["nan", "inf"])
def test_non_finite_interval_flag_rejected(clean_env, value):
    clean_env.setenv("DISCORD_WEBHOOK_URL", WEBHOOK_URL)

    with pytest.raises(ConfigError, match="Interval"):
        load_config(["--interval", value])
