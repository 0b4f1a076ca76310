"""Runtime configuration from CLI flags, environment and an optional .env file."""

from __future__ import annotations

import argparse
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, TypeVar

from dotenv import find_dotenv, load_dotenv

from .capture.screen_capture import DEFAULT_CAPTURE_COMMAND
from .cv.region_mask import TRIM_HEIGHT, TRIM_WIDTH
from .errors import ConfigError
from .monitor.escalation import MAX_WARNINGS
from .monitor.runner import DEFAULT_SUBJECT

CAPTURE_BACKENDS = ("command", "mss")

_T = TypeVar("_T", int, float, str)


@dataclass
class MonitorConfig:
    webhook_url: str
    interval_seconds: float = 60.0
    max_warnings: int = MAX_WARNINGS
    workdir: Path = Path("screenshots")
    capture_backend: str = "command"
    capture_command: tuple[str, ...] = DEFAULT_CAPTURE_COMMAND
    capture_timeout: float = 30.0
    monitor_index: int = 1
    webhook_timeout: float = 10.0
    subject: str = DEFAULT_SUBJECT
    trim_width: int = TRIM_WIDTH
    trim_height: int = TRIM_HEIGHT
    max_ticks: Optional[int] = None
    debug: bool = False

    def validate(self) -> None:
        if not self.webhook_url:
            raise ConfigError(
                "DISCORD_WEBHOOK_URL is not set. "
                "Usage: DISCORD_WEBHOOK_URL=your_webhook_url screenwatch"
            )
        if not (math.isfinite(self.interval_seconds) and self.interval_seconds > 0):
            raise ConfigError(f"Interval must be a positive number, got {self.interval_seconds}")
        if self.max_warnings < 1:
            raise ConfigError(f"Max warnings must be >= 1, got {self.max_warnings}")
        if self.capture_backend not in CAPTURE_BACKENDS:
            raise ConfigError(
                f"Unknown capture backend {self.capture_backend!r}, "
                f"expected one of {', '.join(CAPTURE_BACKENDS)}"
            )
        if self.max_ticks is not None and self.max_ticks < 1:
            raise ConfigError(f"Max ticks must be >= 1, got {self.max_ticks}")


def _env(name: str, default: _T) -> _T:
    """Read an environment variable, converting to the same type as *default*."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return type(default)(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Alert a webhook when the screen stops changing"
    )
    parser.add_argument(
        "--webhook-url",
        default=None,
        help="Webhook URL (fallback to DISCORD_WEBHOOK_URL env)",
    )
    parser.add_argument("--interval", type=float, default=None, help="Seconds between captures")
    parser.add_argument("--max-warnings", type=int, default=None)
    parser.add_argument("--workdir", default=None, help="Directory for capture files")
    parser.add_argument("--capture-backend", choices=CAPTURE_BACKENDS, default=None)
    parser.add_argument(
        "--capture-command",
        default=None,
        help="Capture command; the output path is appended (default: 'screencapture -x')",
    )
    parser.add_argument(
        "--monitor-index",
        type=int,
        default=None,
        help="MSS monitor index: 0 means all monitors, 1/2/... means specific monitor",
    )
    parser.add_argument("--subject", default=None, help="Name used in alert messages")
    parser.add_argument("--max-ticks", type=int, default=None, help="Stop after N ticks")
    parser.add_argument("--debug", action="store_true")
    return parser


def load_config(
    argv: Optional[Sequence[str]] = None,
    env_file: Optional[Path] = None,
) -> MonitorConfig:
    """
    Build and validate the monitor configuration.

    Priority: CLI flags, then environment (including ``.env``), then defaults.

    Raises:
        ConfigError: If the webhook URL is missing or a value is invalid
    """
    load_dotenv(env_file or find_dotenv(usecwd=True), override=False)
    args = _build_parser().parse_args(argv)

    command = args.capture_command or os.getenv("SCREENWATCH_CAPTURE_COMMAND")
    capture_command = tuple(command.split()) if command else DEFAULT_CAPTURE_COMMAND

    config = MonitorConfig(
        webhook_url=args.webhook_url or os.getenv("DISCORD_WEBHOOK_URL", ""),
        interval_seconds=(
            args.interval
            if args.interval is not None
            else _env("SCREENWATCH_INTERVAL_SECONDS", 60.0)
        ),
        max_warnings=(
            args.max_warnings
            if args.max_warnings is not None
            else _env("SCREENWATCH_MAX_WARNINGS", MAX_WARNINGS)
        ),
        workdir=Path(args.workdir or _env("SCREENWATCH_WORKDIR", "screenshots")),
        capture_backend=args.capture_backend or _env("SCREENWATCH_CAPTURE_BACKEND", "command"),
        capture_command=capture_command,
        capture_timeout=_env("SCREENWATCH_CAPTURE_TIMEOUT", 30.0),
        monitor_index=(
            args.monitor_index
            if args.monitor_index is not None
            else _env("SCREENWATCH_MONITOR_INDEX", 1)
        ),
        webhook_timeout=_env("SCREENWATCH_WEBHOOK_TIMEOUT", 10.0),
        subject=args.subject or _env("SCREENWATCH_SUBJECT", DEFAULT_SUBJECT),
        max_ticks=args.max_ticks,
        debug=args.debug,
    )
    config.validate()
    return config
