"""Session store abstraction and the in-memory implementation."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable

from calls.errors import CallConflictError, SessionNotFoundError
from calls.session import CallSession, CallState

SessionMutator = Callable[[CallSession], CallSession]


class SessionStore(ABC):
    """Keyed storage for call sessions.

    Implementations must make ``create``, ``update`` and ``remove`` atomic
    with respect to each other for the same ``call_id``.
    """

    @abstractmethod
    async def create(self, call_id: str) -> CallSession:
        """Register a new NEGOTIATING session, raising CallConflictError if one exists."""

    @abstractmethod
    async def get(self, call_id: str) -> CallSession | None:
        """Return the current session for ``call_id`` without side effects."""

    @abstractmethod
    async def update(self, call_id: str, mutator: SessionMutator) -> CallSession:
        """Replace the session with ``mutator(session)``.

        Raises SessionNotFoundError if the session is gone. An exception
        raised by ``mutator`` leaves the stored session untouched.
        """

    @abstractmethod
    async def remove(self, call_id: str) -> CallSession | None:
        """Drop the session, returning it as CLOSED. Removing an unknown id is a no-op."""

    @abstractmethod
    async def snapshot(self) -> list[CallSession]:
        """Return every session currently tracked."""


class InMemorySessionStore(SessionStore):
    """In-memory session store.

    Note: This is a single-process store and is empty after a restart. For
    multi-worker deployments, replace with Redis or another shared store.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._sessions: dict[str, CallSession] = {}

    async def create(self, call_id: str) -> CallSession:
        async with self._lock:
            if call_id in self._sessions:
                raise CallConflictError(f"Call {call_id} is already being handled")
            session = CallSession(call_id=call_id)
            self._sessions[call_id] = session
            return session

    async def get(self, call_id: str) -> CallSession | None:
        async with self._lock:
            return self._sessions.get(call_id)

    async def update(self, call_id: str, mutator: SessionMutator) -> CallSession:
        async with self._lock:
            session = self._sessions.get(call_id)
            if session is None:
                raise SessionNotFoundError(f"No session for call {call_id}")
            updated = mutator(session)
            self._sessions[call_id] = updated
            return updated

    async def remove(self, call_id: str) -> CallSession | None:
        async with self._lock:
            session = self._sessions.pop(call_id, None)
        if session is None:
            return None
        return session.transition(CallState.CLOSED)

    async def snapshot(self) -> list[CallSession]:
        async with self._lock:
            return list(self._sessions.values())
