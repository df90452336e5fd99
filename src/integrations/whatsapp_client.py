"""WhatsApp Cloud API calling endpoints.

Every call action is a POST to ``{base}/{phone_number_id}/calls/{call_id}/<action>``
authenticated with the WhatsApp Business Account bearer token.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from config.settings import get_settings
from integrations.base import BaseCallingClient, SignalingError

LOGGER = logging.getLogger(__name__)


class WhatsAppCallingClient(BaseCallingClient):
    def __init__(
        self,
        base_url: str,
        phone_number_id: str,
        token: str,
        *,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._phone_number_id = phone_number_id
        self._token = token
        self._timeout = timeout
        self._transport = transport

    async def pre_accept(self, call_id: str, sdp_answer: str) -> None:
        # Pre-accepting with the answer lets WhatsApp set up media early and
        # avoids clipping the first words once the call is accepted.
        await self._call(call_id, "pre_accept", {"sdp": sdp_answer, "sdp_type": "answer"})

    async def accept(self, call_id: str) -> None:
        await self._call(call_id, "accept", {})

    async def terminate(self, call_id: str) -> None:
        await self._call(call_id, "terminate", {})

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    async def _call(self, call_id: str, action: str, payload: dict[str, Any]) -> None:
        url = f"{self._base_url}/{self._phone_number_id}/calls/{quote(call_id, safe='')}/{action}"
        LOGGER.debug("Calling WABA API: %s", url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SignalingError(f"WhatsApp {action} failed for call {call_id}: {exc}") from exc


def build_whatsapp_client() -> WhatsAppCallingClient:
    settings = get_settings()
    return WhatsAppCallingClient(
        settings.waba_base,
        settings.waba_phone_id,
        settings.waba_token,
        timeout=settings.request_timeout_seconds,
    )
