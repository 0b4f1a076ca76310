"""Discord-style webhook notifier."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from ..errors import DeliveryError
from ..models.schemas import MAX_CONTENT_LENGTH, WebhookPayload

_LOGGER = logging.getLogger(__name__)


def redact_url(url: str, keep: int = 50) -> str:
    """Shorten a secret URL for logging."""
    if len(url) <= keep:
        return url
    return f"{url[:keep]}..."


def _truncate(message: str, limit: int = MAX_CONTENT_LENGTH) -> str:
    if len(message) <= limit:
        return message
    return message[: limit - 1] + "…"


class WebhookNotifier:
    """
    Posts ``{"content": message}`` as JSON to a webhook URL.

    Delivery failures are logged and reported through the return value of
    :meth:`notify`; they are never raised to the caller.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not url:
            raise ValueError("Webhook URL must not be empty")
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()

    def send(self, message: str) -> None:
        """Post one message, raising DeliveryError on failure."""
        payload = WebhookPayload(content=_truncate(message))
        try:
            response = self._session.post(
                self.url,
                json=payload.model_dump(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DeliveryError(f"Webhook request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f"Webhook returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

    def notify(self, message: str) -> bool:
        try:
            self.send(message)
        except DeliveryError as exc:
            _LOGGER.error("notification to %s failed: %s", redact_url(self.url), exc)
            return False
        _LOGGER.info("notification sent: %s", message)
        return True

    def close(self) -> None:
        self._session.close()
