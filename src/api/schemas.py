"""API-facing Pydantic models for WhatsApp calling webhooks."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SessionDescription(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sdp: str | None = None
    sdp_type: str | None = Field(default=None, description="Usually 'offer' on connect.")


class ConnectEvent(BaseModel):
    """Body of a ``connect`` webhook.

    Fields are optional here so that incomplete payloads reach the
    coordinator and are rejected as malformed events (400), not as FastAPI
    validation errors. Other platform fields (direction, from, ...) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    call_id: str | None = None
    session: SessionDescription | None = None

    @property
    def sdp_offer(self) -> str | None:
        return self.session.sdp if self.session else None


class TerminateEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    call_id: str | None = None


class WebhookAck(BaseModel):
    call_id: str
    state: str
    status: str = "ok"
