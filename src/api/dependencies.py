"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules.
"""

from __future__ import annotations

from functools import lru_cache

from calls.coordinator import CallCoordinator
from calls.store import InMemorySessionStore
from integrations.edge_client import build_edge_client
from integrations.whatsapp_client import build_whatsapp_client


@lru_cache(maxsize=1)
def _coordinator_factory() -> CallCoordinator:
    # One store per process: every webhook must see the same sessions.
    return CallCoordinator(
        store=InMemorySessionStore(),
        edge=build_edge_client(),
        platform=build_whatsapp_client(),
    )


def get_coordinator() -> CallCoordinator:
    return _coordinator_factory()
