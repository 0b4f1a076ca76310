"""Idle-screen watchdog: capture, compare, escalate to a webhook."""

__version__ = "0.1.0"
