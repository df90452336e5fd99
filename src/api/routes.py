"""WhatsApp calling webhooks.

WhatsApp posts ``connect`` when a user calls the business number and
``terminate`` when either side hangs up. Coordinator errors are mapped to
HTTP statuses by the application's CallError handler.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_coordinator
from api.schemas import ConnectEvent, TerminateEvent, WebhookAck
from calls.coordinator import CallCoordinator
from calls.session import CallState

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/wa/calling", tags=["whatsapp-calling"])


@router.post("/connect", response_model=WebhookAck)
async def whatsapp_connect_webhook(
    event: ConnectEvent,
    coordinator: CallCoordinator = Depends(get_coordinator),
) -> WebhookAck:
    LOGGER.info("Received connect webhook call=%s", event.call_id)
    session = await coordinator.connect(event.call_id, event.sdp_offer)
    return WebhookAck(call_id=session.call_id, state=session.state.value)


@router.post("/terminate", response_model=WebhookAck)
async def whatsapp_terminate_webhook(
    event: TerminateEvent,
    coordinator: CallCoordinator = Depends(get_coordinator),
) -> WebhookAck:
    LOGGER.info("Received terminate webhook call=%s", event.call_id)
    closed = await coordinator.terminate(event.call_id)
    # "untracked": nothing local to close, WhatsApp was still notified.
    state = CallState.CLOSED.value if closed else "untracked"
    return WebhookAck(call_id=str(event.call_id), state=state)
