"""Tick orchestration and the fixed-interval scheduler."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Optional, Protocol

from ..capture.screen_capture import CaptureSource
from ..cv.frame_diff import diff_frames
from ..cv.region_mask import TRIM_HEIGHT, TRIM_WIDTH, mask_frame
from ..errors import CaptureError, MaskError
from ..models.schemas import TickReport
from .escalation import EscalationState, TickOutcome, TickVerdict
from .frame_store import FrameStore

LOGGER = logging.getLogger(__name__)

DEFAULT_SUBJECT = "The monitored user"
DEFAULT_ALERT_TEMPLATE = (
    "⚠️ {subject}'s screen has not changed for {idle_minutes:g} minutes "
    "({count}/{max_warnings})."
)
DEFAULT_HALT_TEMPLATE = (
    "🛑 {subject}'s screen stayed idle through {max_warnings} warnings. "
    "Screen monitoring has stopped."
)


class Notifier(Protocol):
    def notify(self, message: str) -> bool: ...

    def close(self) -> None: ...


class IdleMonitor:
    """Runs one capture → mask → diff → escalate → persist cycle per tick."""

    def __init__(
        self,
        capture_source: CaptureSource,
        frame_store: FrameStore,
        notifier: Notifier,
        state: Optional[EscalationState] = None,
        trim_width: int = TRIM_WIDTH,
        trim_height: int = TRIM_HEIGHT,
        interval_seconds: float = 60.0,
        subject: str = DEFAULT_SUBJECT,
        alert_template: str = DEFAULT_ALERT_TEMPLATE,
        halt_template: str = DEFAULT_HALT_TEMPLATE,
    ):
        self.capture_source = capture_source
        self.frame_store = frame_store
        self.notifier = notifier
        self.state = state or EscalationState()
        self.trim_width = trim_width
        self.trim_height = trim_height
        self.interval_seconds = float(interval_seconds)
        self.subject = subject
        self.alert_template = alert_template
        self.halt_template = halt_template
        self.tick_count = 0

    @property
    def halted(self) -> bool:
        return self.state.halted

    def tick(self) -> TickReport:
        """
        Execute one monitoring cycle.

        Raises:
            CaptureError: Capture failed; state and baseline are untouched
            MaskError: Masking or baseline I/O failed. A failure while replacing
                the baseline happens after the verdict was applied and sent, so
                the next tick compares against the older baseline
        """
        self.tick_count += 1
        LOGGER.debug("tick %d: capturing screen", self.tick_count)

        frame = self.capture_source.capture()
        masked = mask_frame(frame, self.trim_width, self.trim_height)
        previous = self.frame_store.load_previous()
        self.frame_store.stage_current(masked)

        diff_pixels: Optional[int] = None
        if previous is None:
            verdict = self.state.first_run()
            LOGGER.info("first run: baseline stored, comparison starts next tick")
        else:
            diff_pixels = diff_frames(masked, previous)
            LOGGER.info("changed pixels: %d", diff_pixels)
            verdict = self.state.observe(diff_pixels)

        sent, delivered = self._dispatch(verdict)

        if not verdict.halt:
            self.frame_store.promote_current()

        return TickReport(
            tick=self.tick_count,
            outcome=verdict.outcome,
            diff_pixels=diff_pixels,
            consecutive_unchanged=verdict.consecutive_unchanged,
            notifications_sent=sent,
            notifications_delivered=delivered,
            halted=self.state.halted,
        )

    def _dispatch(self, verdict: TickVerdict) -> tuple[int, int]:
        if verdict.outcome == TickOutcome.CHANGED:
            LOGGER.info("screen changed")
            return 0, 0
        if verdict.outcome == TickOutcome.IGNORED:
            LOGGER.debug("warning limit already passed, nothing to send")
            return 0, 0

        messages = []
        if verdict.alert:
            LOGGER.warning(
                "screen unchanged (%d/%d)",
                verdict.consecutive_unchanged,
                self.state.max_warnings,
            )
            messages.append(self._format(self.alert_template, verdict))
        if verdict.halt:
            LOGGER.warning("warning limit reached, halting monitor")
            messages.append(self._format(self.halt_template, verdict))

        delivered = sum(1 for message in messages if self.notifier.notify(message))
        return len(messages), delivered

    def _format(self, template: str, verdict: TickVerdict) -> str:
        idle_minutes = round(verdict.consecutive_unchanged * self.interval_seconds / 60.0, 1)
        return template.format(
            subject=self.subject,
            count=verdict.consecutive_unchanged,
            max_warnings=self.state.max_warnings,
            idle_minutes=idle_minutes,
        )


class Scheduler:
    """
    Runs a tick immediately, then every ``interval_seconds`` from the start
    of the previous tick, until the monitor halts or ``stop()`` is called.
    """

    def __init__(
        self,
        monitor: IdleMonitor,
        interval_seconds: float,
        stop_event: Optional[threading.Event] = None,
        max_ticks: Optional[int] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        if not (math.isfinite(interval_seconds) and interval_seconds > 0):
            raise ValueError(f"interval_seconds must be a positive number, got {interval_seconds}")
        self.monitor = monitor
        self.interval_seconds = float(interval_seconds)
        self.stop_event = stop_event or threading.Event()
        self.max_ticks = max_ticks
        self._wait = wait or self.stop_event.wait

    def stop(self) -> None:
        self.stop_event.set()

    def run(self) -> int:
        """Run until halted or stopped. Returns the number of ticks executed."""
        ticks = 0
        while not self.stop_event.is_set():
            loop_start = time.perf_counter()
            ticks += 1
            try:
                report = self.monitor.tick()
            except (CaptureError, MaskError) as exc:
                LOGGER.warning("tick %d skipped: %s", ticks, exc)
            else:
                LOGGER.debug("tick report: %s", report.model_dump_json())
                if report.halted:
                    LOGGER.info("monitor halted after %d ticks", ticks)
                    break

            if self.max_ticks is not None and ticks >= self.max_ticks:
                break
            self._sleep_until_next(loop_start)
        return ticks

    def _sleep_until_next(self, loop_start: float) -> None:
        elapsed = time.perf_counter() - loop_start
        remaining = max(0.0, self.interval_seconds - elapsed)
        self._wait(remaining)
