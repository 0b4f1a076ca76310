"""Storage for the previous masked frame used as the comparison baseline."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional, Protocol

import cv2
import numpy as np

from ..errors import MaskError

LOGGER = logging.getLogger(__name__)

CURRENT_CAPTURE_NAME = "current.png"
CURRENT_MASKED_NAME = "current_cropped.png"
PREVIOUS_MASKED_NAME = "previous_cropped.png"


class FrameStore(Protocol):
    def load_previous(self) -> Optional[np.ndarray]: ...

    def stage_current(self, masked: np.ndarray) -> None: ...

    def promote_current(self) -> None: ...


class MemoryFrameStore:
    """Keeps the baseline in process memory only."""

    def __init__(self) -> None:
        self._previous: Optional[np.ndarray] = None
        self._current: Optional[np.ndarray] = None

    @property
    def previous(self) -> Optional[np.ndarray]:
        return self._previous

    def load_previous(self) -> Optional[np.ndarray]:
        return self._previous

    def stage_current(self, masked: np.ndarray) -> None:
        self._current = masked

    def promote_current(self) -> None:
        if self._current is None:
            return
        self._previous = self._current
        self._current = None


class FileFrameStore:
    """
    Working-directory layout::

        current.png            last full capture (written by the capture backend)
        current_cropped.png    last masked capture
        previous_cropped.png   baseline read by the next tick

    A baseline left over from an earlier process is deleted on construction,
    so every run starts with a first-run tick.
    """

    def __init__(self, workdir: Path):
        self.workdir = Path(workdir)
        self.workdir.mkdir(parents=True, exist_ok=True)
        self.current_capture_path = self.workdir / CURRENT_CAPTURE_NAME
        self.current_masked_path = self.workdir / CURRENT_MASKED_NAME
        self.previous_masked_path = self.workdir / PREVIOUS_MASKED_NAME

        if self.previous_masked_path.exists():
            LOGGER.info("discarding stale baseline %s", self.previous_masked_path)
            self.previous_masked_path.unlink()

    def load_previous(self) -> Optional[np.ndarray]:
        if not self.previous_masked_path.is_file():
            return None
        try:
            frame = cv2.imread(str(self.previous_masked_path), cv2.IMREAD_UNCHANGED)
        except cv2.error as exc:
            raise MaskError(f"Could not read baseline {self.previous_masked_path}: {exc}") from exc
        if frame is None:
            raise MaskError(f"Could not decode baseline {self.previous_masked_path}")
        return frame

    def stage_current(self, masked: np.ndarray) -> None:
        try:
            written = cv2.imwrite(str(self.current_masked_path), masked)
        except cv2.error as exc:
            raise MaskError(
                f"Could not write masked capture {self.current_masked_path}: {exc}"
            ) from exc
        if not written:
            raise MaskError(f"Could not write masked capture {self.current_masked_path}")

    def promote_current(self) -> None:
        if not self.current_masked_path.is_file():
            return
        try:
            shutil.copyfile(self.current_masked_path, self.previous_masked_path)
        except OSError as exc:
            raise MaskError(f"Could not replace baseline {self.previous_masked_path}: {exc}") from exc
