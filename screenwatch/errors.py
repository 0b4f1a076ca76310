"""Exception hierarchy shared across the monitor components."""

from __future__ import annotations


class ScreenWatchError(Exception):
    """Base class for all screenwatch failures."""


class ConfigError(ScreenWatchError):
    """Required configuration is missing or invalid. Fatal at startup."""


class CaptureError(ScreenWatchError):
    """The screen capture backend failed to produce an image."""


class MaskError(ScreenWatchError):
    """Mask geometry is invalid or the masked image could not be produced."""


class DeliveryError(ScreenWatchError):
    """A webhook notification was rejected or could not be sent."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
