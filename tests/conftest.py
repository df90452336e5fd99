from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Awaitable, Callable

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from calls.coordinator import CallCoordinator  # noqa: E402
from calls.store import InMemorySessionStore  # noqa: E402
from integrations.base import (  # noqa: E402
    BaseCallingClient,
    BaseEdgeClient,
    EdgeNegotiation,
    SignalingError,
)

Hook = Callable[[], Awaitable[None]]


class FakeEdge(BaseEdgeClient):
    """Edge double recording every request into a shared event log."""

    def __init__(self, events: list[tuple[str, ...]]) -> None:
        self.events = events
        self.fail: set[str] = set()
        self.answers: dict[str, EdgeNegotiation] = {}
        self.on_negotiate: Hook | None = None

    async def negotiate(self, call_id: str, sdp_offer: str) -> EdgeNegotiation:
        self.events.append(("negotiate", call_id, sdp_offer))
        if self.on_negotiate is not None:
            await self.on_negotiate()
        if "negotiate" in self.fail:
            raise SignalingError("edge could not allocate media")
        return self.answers.get(call_id) or EdgeNegotiation(
            edge_session_id=f"edge-{call_id}", sdp_answer=f"answer-{call_id}"
        )

    async def hangup(self, edge_session_id: str) -> None:
        self.events.append(("hangup", edge_session_id))
        if "hangup" in self.fail:
            raise SignalingError("edge unreachable")


class FakePlatform(BaseCallingClient):
    def __init__(self, events: list[tuple[str, ...]]) -> None:
        self.events = events
        self.fail: set[str] = set()
        self.on_accept: Hook | None = None

    async def pre_accept(self, call_id: str, sdp_answer: str) -> None:
        self.events.append(("pre_accept", call_id, sdp_answer))
        if "pre_accept" in self.fail:
            raise SignalingError("malformed SDP")

    async def accept(self, call_id: str) -> None:
        self.events.append(("accept", call_id))
        if self.on_accept is not None:
            await self.on_accept()
        if "accept" in self.fail:
            raise SignalingError("call already terminated")

    async def terminate(self, call_id: str) -> None:
        self.events.append(("terminate", call_id))
        if "terminate" in self.fail:
            raise SignalingError("graph api timeout")


@pytest.fixture()
def events() -> list[tuple[str, ...]]:
    return []


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def edge(events) -> FakeEdge:
    return FakeEdge(events)


@pytest.fixture()
def platform(events) -> FakePlatform:
    return FakePlatform(events)


@pytest.fixture()
def coordinator(store, edge, platform) -> CallCoordinator:
    return CallCoordinator(store=store, edge=edge, platform=platform)


@pytest.fixture(scope="session")
def app():
    # Must be set before importing main, which refuses to start without them.
    os.environ["WABA_TOKEN"] = "test-token"
    os.environ["WABA_PHONE_ID"] = "1234567890"
    os.environ["EDGE_API"] = "http://edge.test"

    import importlib

    for module_name in [
        "config.settings",
        "api.dependencies",
        "api.routes",
        "main",
    ]:
        sys.modules.pop(module_name, None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def client(app, coordinator):
    import api.dependencies as deps

    app.dependency_overrides[deps.get_coordinator] = lambda: coordinator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
