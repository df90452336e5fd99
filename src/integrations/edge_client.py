"""Client for the WebRTC media edge that terminates WhatsApp call audio."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from config.settings import get_settings
from integrations.base import BaseEdgeClient, EdgeNegotiation, EdgeProtocolError, SignalingError

LOGGER = logging.getLogger(__name__)


class EdgeClient(BaseEdgeClient):
    """HTTP client for the edge's ``/webrtc`` endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def negotiate(self, call_id: str, sdp_offer: str) -> EdgeNegotiation:
        data = await self._post("/webrtc/new", {"call_id": call_id, "sdp_offer": sdp_offer})
        if not isinstance(data, dict):
            raise EdgeProtocolError("Edge returned a non-object negotiate response")

        edge_session_id = data.get("edge_session_id")
        sdp_answer = data.get("sdp_answer")
        if not edge_session_id or not sdp_answer:
            raise EdgeProtocolError("Edge did not return edge_session_id or sdp_answer")
        return EdgeNegotiation(edge_session_id=str(edge_session_id), sdp_answer=str(sdp_answer))

    async def hangup(self, edge_session_id: str) -> None:
        await self._post("/webrtc/hangup", {"edge_session_id": edge_session_id}, expect_json=False)

    async def _post(self, path: str, payload: dict[str, Any], *, expect_json: bool = True) -> Any:
        url = f"{self._base_url}{path}"
        LOGGER.debug("Calling edge API: %s", url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SignalingError(f"Edge request to {path} failed: {exc}") from exc

        if not expect_json:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise EdgeProtocolError(f"Edge returned invalid JSON from {path}") from exc


def build_edge_client() -> EdgeClient:
    settings = get_settings()
    return EdgeClient(settings.edge_api, timeout=settings.request_timeout_seconds)
