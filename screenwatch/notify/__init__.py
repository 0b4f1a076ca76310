"""Notification transports."""

from .webhook import WebhookNotifier, redact_url

__all__ = ["WebhookNotifier", "redact_url"]
