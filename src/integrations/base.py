"""Shared abstractions for the two signaling peers: the media edge and WhatsApp."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class SignalingError(RuntimeError):
    """A request to a remote signaling peer failed or returned garbage."""


class EdgeProtocolError(SignalingError):
    """The edge answered 2xx but the payload breaks the negotiate contract."""


@dataclass(frozen=True, slots=True)
class EdgeNegotiation:
    edge_session_id: str
    sdp_answer: str


class BaseEdgeClient(ABC):
    """Abstract base class for media edge connectors."""

    @abstractmethod
    async def negotiate(self, call_id: str, sdp_offer: str) -> EdgeNegotiation:
        """Allocate a media session for the offer and return the edge's answer."""

    @abstractmethod
    async def hangup(self, edge_session_id: str) -> None:
        """Tear down a media session previously returned by ``negotiate``."""


class BaseCallingClient(ABC):
    """Abstract base class for the calling platform API."""

    @abstractmethod
    async def pre_accept(self, call_id: str, sdp_answer: str) -> None:
        """Hand the SDP answer to the platform before media is allowed to flow."""

    @abstractmethod
    async def accept(self, call_id: str) -> None:
        """Accept the call; media starts flowing once this returns."""

    @abstractmethod
    async def terminate(self, call_id: str) -> None:
        """Ask the platform to end the call."""
