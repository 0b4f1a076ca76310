"""Screen capture backends."""

from .screen_capture import CaptureSource, CommandCapture, MssCapture, create_capture_source

__all__ = ["CaptureSource", "CommandCapture", "MssCapture", "create_capture_source"]
