"""Full-screen capture backends."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Protocol, Sequence

import cv2
import numpy as np

from ..errors import CaptureError

LOGGER = logging.getLogger(__name__)

DEFAULT_CAPTURE_COMMAND = ("screencapture", "-x")


class CaptureSource(Protocol):
    def capture(self) -> np.ndarray: ...


def _subprocess_error_detail(completed: subprocess.CompletedProcess) -> str:
    detail = (completed.stderr or completed.stdout or "").strip()
    if detail:
        return f"exit={completed.returncode} {detail}"
    return f"exit={completed.returncode}"


class CommandCapture:
    """Capture by running an external command that writes an image file.

    The output path is appended as the last argument, matching
    ``screencapture -x <path>`` on macOS and ``import -window root <path>``
    with ImageMagick.
    """

    def __init__(
        self,
        output_path: Path,
        command: Sequence[str] = DEFAULT_CAPTURE_COMMAND,
        timeout: Optional[float] = 30.0,
    ):
        if not command:
            raise ValueError("Capture command must not be empty")
        self.output_path = Path(output_path)
        self.command = list(command)
        self.timeout = timeout

    def capture(self) -> np.ndarray:
        args = [*self.command, str(self.output_path)]
        LOGGER.debug("running capture command: %s", shlex.join(args))

        try:
            self.output_path.unlink(missing_ok=True)
        except OSError as exc:
            raise CaptureError(f"Could not clear previous capture {self.output_path}: {exc}") from exc

        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CaptureError(f"Capture command not found: {self.command[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CaptureError(f"Capture command timed out after {self.timeout}s") from exc
        except OSError as exc:
            raise CaptureError(f"Capture command failed to start: {exc}") from exc

        if completed.returncode != 0:
            raise CaptureError(
                f"Capture command failed: {_subprocess_error_detail(completed)}"
            )

        if not self.output_path.is_file():
            raise CaptureError(f"Capture produced no file at {self.output_path}")

        try:
            frame = cv2.imread(str(self.output_path), cv2.IMREAD_COLOR)
        except cv2.error as exc:
            raise CaptureError(f"Could not read capture at {self.output_path}: {exc}") from exc
        if frame is None:
            raise CaptureError(f"Could not decode capture at {self.output_path}")
        return frame


class MssCapture:
    """Capture one monitor in-process with mss.

    Index 0 is mss's virtual screen spanning all monitors, 1/2/... are
    individual monitors.
    """

    def __init__(self, monitor_index: int = 1, output_path: Optional[Path] = None):
        self.monitor_index = int(monitor_index)
        self.output_path = Path(output_path) if output_path is not None else None

    def capture(self) -> np.ndarray:
        try:
            import mss
        except ImportError as exc:
            raise CaptureError(
                "mss is not installed. Install the 'screen' extra to use this backend"
            ) from exc

        try:
            with mss.mss() as sct:
                monitors = sct.monitors
                if self.monitor_index < 0 or self.monitor_index >= len(monitors):
                    raise CaptureError(
                        f"Invalid monitor index {self.monitor_index}, "
                        f"available range: 0..{len(monitors) - 1}"
                    )
                frame_raw = np.array(sct.grab(monitors[self.monitor_index]), dtype=np.uint8)
        except mss.exception.ScreenShotError as exc:
            raise CaptureError(f"mss capture failed: {exc}") from exc

        frame = cv2.cvtColor(frame_raw, cv2.COLOR_BGRA2BGR)
        if self.output_path is not None:
            try:
                written = cv2.imwrite(str(self.output_path), frame)
            except cv2.error:
                written = False
            if not written:
                LOGGER.warning("could not write capture to %s", self.output_path)
        return frame


def create_capture_source(
    backend: str,
    output_path: Path,
    command: Sequence[str] = DEFAULT_CAPTURE_COMMAND,
    timeout: Optional[float] = 30.0,
    monitor_index: int = 1,
) -> CaptureSource:
    """Build the capture backend named in the configuration."""
    if backend == "command":
        return CommandCapture(output_path=output_path, command=command, timeout=timeout)
    if backend == "mss":
        return MssCapture(monitor_index=monitor_index, output_path=output_path)
    raise ValueError(f"Unknown capture backend: {backend}")
