"""Command-line entry point for the idle-screen watchdog."""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional, Sequence

from .capture.screen_capture import create_capture_source
from .config import MonitorConfig, load_config
from .errors import ConfigError
from .monitor.escalation import EscalationState
from .monitor.frame_store import FileFrameStore
from .monitor.runner import IdleMonitor, Scheduler
from .notify.webhook import WebhookNotifier, redact_url

LOGGER = logging.getLogger("screenwatch")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def build_scheduler(config: MonitorConfig) -> Scheduler:
    """Wire capture, storage, notifier and escalation from a validated config."""
    frame_store = FileFrameStore(config.workdir)
    capture_source = create_capture_source(
        config.capture_backend,
        output_path=frame_store.current_capture_path,
        command=config.capture_command,
        timeout=config.capture_timeout,
        monitor_index=config.monitor_index,
    )
    notifier = WebhookNotifier(config.webhook_url, timeout=config.webhook_timeout)
    monitor = IdleMonitor(
        capture_source=capture_source,
        frame_store=frame_store,
        notifier=notifier,
        state=EscalationState(max_warnings=config.max_warnings),
        trim_width=config.trim_width,
        trim_height=config.trim_height,
        interval_seconds=config.interval_seconds,
        subject=config.subject,
    )
    return Scheduler(monitor, config.interval_seconds, max_ticks=config.max_ticks)


def run_monitor(config: MonitorConfig) -> int:
    LOGGER.info("starting screen monitor")
    LOGGER.info("webhook URL: %s", redact_url(config.webhook_url))
    LOGGER.info(
        "interval=%.1fs max_warnings=%d backend=%s workdir=%s",
        config.interval_seconds,
        config.max_warnings,
        config.capture_backend,
        config.workdir,
    )

    scheduler = build_scheduler(config)

    def _handle_signal(_sig: int, _frame: Any) -> None:
        LOGGER.info("stop requested, finishing current tick")
        scheduler.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        ticks = scheduler.run()
    except Exception:
        LOGGER.exception("monitor loop crashed")
        return 1
    finally:
        scheduler.monitor.notifier.close()

    LOGGER.info("screen monitor stopped after %d ticks", ticks)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = load_config(argv)
    except ConfigError as exc:
        _configure_logging(False)
        LOGGER.error("configuration error: %s", exc)
        return 1
    _configure_logging(config.debug)
    return run_monitor(config)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
