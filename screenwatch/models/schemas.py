"""Pydantic models for webhook payloads and tick reports."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..monitor.escalation import TickOutcome

# Discord rejects message content longer than this.
MAX_CONTENT_LENGTH = 2000


class WebhookPayload(BaseModel):
    """Body posted to the notification webhook."""

    content: str = Field(max_length=MAX_CONTENT_LENGTH, description="Message text")


class TickReport(BaseModel):
    """Summary of one monitoring tick."""

    tick: int = Field(ge=1, description="1-based tick number")
    outcome: TickOutcome = Field(description="Escalation outcome for this tick")
    diff_pixels: int | None = Field(
        default=None, ge=0, description="Changed pixel count (None on first run)"
    )
    consecutive_unchanged: int = Field(ge=0, description="No-change counter after the tick")
    notifications_sent: int = Field(default=0, ge=0, description="Messages attempted")
    notifications_delivered: int = Field(default=0, ge=0, description="Messages accepted")
    halted: bool = Field(default=False, description="Whether monitoring stopped")
