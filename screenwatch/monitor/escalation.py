"""Three-strike escalation for consecutive unchanged screen captures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MAX_WARNINGS = 3


class TickOutcome(str, Enum):
    FIRST_RUN = "first_run"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    IGNORED = "ignored"


@dataclass(frozen=True)
class TickVerdict:
    outcome: TickOutcome
    consecutive_unchanged: int
    alert: bool = False
    halt: bool = False


@dataclass
class EscalationState:
    """
    Counter of consecutive no-change ticks and the halt latch.

    Each unchanged tick up to ``max_warnings`` raises one alert; the tick that
    reaches ``max_warnings`` also halts. A changed tick resets the counter.
    Once halted the state is terminal.
    """

    max_warnings: int = MAX_WARNINGS
    consecutive_unchanged: int = 0
    halted: bool = False

    def __post_init__(self) -> None:
        if self.max_warnings < 1:
            raise ValueError("max_warnings must be >= 1")

    def first_run(self) -> TickVerdict:
        self._ensure_active()
        return TickVerdict(TickOutcome.FIRST_RUN, self.consecutive_unchanged)

    def observe(self, diff_pixels: int) -> TickVerdict:
        self._ensure_active()
        if diff_pixels < 0:
            raise ValueError(f"diff_pixels must be non-negative, got {diff_pixels}")

        if diff_pixels > 0:
            if self.consecutive_unchanged > 0:
                self.consecutive_unchanged = 0
            return TickVerdict(TickOutcome.CHANGED, 0)

        self.consecutive_unchanged += 1
        count = self.consecutive_unchanged

        if count > self.max_warnings:
            return TickVerdict(TickOutcome.IGNORED, count)

        if count == self.max_warnings:
            self.halted = True
            return TickVerdict(TickOutcome.UNCHANGED, count, alert=True, halt=True)

        return TickVerdict(TickOutcome.UNCHANGED, count, alert=True)

    def _ensure_active(self) -> None:
        if self.halted:
            raise RuntimeError("Escalation already halted")
