"""Call lifecycle coordination between WhatsApp and the media edge.

Connect: negotiate with the edge, then ``pre_accept`` and ``accept`` on
WhatsApp, strictly in that order. Terminate: hang up the edge session, drop
the local session, then notify WhatsApp.

Teardown of a session is *claimed* by moving it to TERMINATING inside an
atomic store update. Whichever flow wins the claim owns the edge hangup and
the removal, so a session's edge resource is released exactly once even when
a terminate webhook races an in-flight connect.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable

from calls.errors import (
    AcceptanceFailedError,
    CallAbortedError,
    MalformedEventError,
    NegotiationFailedError,
    SessionNotFoundError,
)
from calls.session import CallSession, CallState
from calls.store import SessionMutator, SessionStore
from integrations.base import BaseCallingClient, BaseEdgeClient, SignalingError

LOGGER = logging.getLogger(__name__)


async def best_effort(operation: str, awaitable: Awaitable[Any], **context: str) -> bool:
    """Await a remote call whose failure must never stop the caller.

    Returns False (and logs) when the call fails with a SignalingError.
    """

    details = " ".join(f"{key}={value}" for key, value in context.items())
    try:
        await awaitable
    except SignalingError as exc:
        LOGGER.warning("Best-effort %s failed (%s): %s", operation, details, exc)
        return False
    LOGGER.debug("Best-effort %s succeeded (%s)", operation, details)
    return True


class _TeardownAlreadyClaimed(Exception):
    pass


def _begin_teardown(attempt: str | None = None) -> SessionMutator:
    def claim(session: CallSession) -> CallSession:
        if session.is_tearing_down or (attempt is not None and session.attempt != attempt):
            raise _TeardownAlreadyClaimed(session.call_id)
        return session.transition(CallState.TERMINATING)

    return claim


def _while_negotiating(attempt: str, mutate: SessionMutator) -> SessionMutator:
    def guarded(session: CallSession) -> CallSession:
        # A session created by a later connect for the same call id is not ours.
        if session.attempt != attempt or session.state is not CallState.NEGOTIATING:
            raise CallAbortedError(f"Call {session.call_id} was terminated during setup")
        return mutate(session)

    return guarded


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise MalformedEventError(f"Invalid payload: {field} is required")
    return value


class CallCoordinator:
    """Drives the connect and terminate flows for WhatsApp calls."""

    def __init__(
        self,
        store: SessionStore,
        edge: BaseEdgeClient,
        platform: BaseCallingClient,
    ) -> None:
        self._store = store
        self._edge = edge
        self._platform = platform

    async def connect(self, call_id: str | None, sdp_offer: str | None) -> CallSession:
        call_id = _require(call_id, "call_id")
        sdp_offer = _require(sdp_offer, "sdp_offer")

        # Raises CallConflictError for a call we already track; the edge is
        # never asked to allocate twice for one call.
        created = await self._store.create(call_id)
        attempt = created.attempt
        LOGGER.info("Negotiating call=%s with edge", call_id)

        try:
            negotiation = await self._edge.negotiate(call_id, sdp_offer)
        except SignalingError as exc:
            await self._teardown(call_id, attempt=attempt)
            LOGGER.error("Edge negotiation failed for call=%s: %s", call_id, exc)
            raise NegotiationFailedError(f"Edge negotiation failed for call {call_id}") from exc
        except BaseException:
            await self._teardown(call_id, attempt=attempt)
            raise

        edge_session_id = negotiation.edge_session_id
        try:
            await self._advance(
                call_id,
                _while_negotiating(attempt, lambda current: current.with_edge_session(edge_session_id)),
            )
        except CallAbortedError:
            # Terminated before the edge session was recorded: nobody else
            # knows about it, so release it here.
            LOGGER.warning("Call=%s terminated during negotiation; releasing edge=%s", call_id, edge_session_id)
            await best_effort(
                "edge hangup",
                self._edge.hangup(edge_session_id),
                call_id=call_id,
                edge_session_id=edge_session_id,
            )
            raise

        step = "pre_accept"
        try:
            await self._platform.pre_accept(call_id, negotiation.sdp_answer)
            step = "accept"
            await self._platform.accept(call_id)
        except SignalingError as exc:
            LOGGER.error("WhatsApp %s failed for call=%s: %s", step, call_id, exc)
            await self._teardown(call_id, attempt=attempt)
            raise AcceptanceFailedError(f"WhatsApp {step} failed for call {call_id}") from exc
        except BaseException:
            LOGGER.exception("WhatsApp %s crashed for call=%s", step, call_id)
            await self._teardown(call_id, attempt=attempt)
            raise

        session = await self._advance(
            call_id,
            _while_negotiating(attempt, lambda current: current.transition(CallState.ACTIVE)),
        )
        LOGGER.info("Call=%s active on edge=%s", call_id, edge_session_id)
        return session

    async def terminate(self, call_id: str | None) -> bool:
        """Run the terminate flow; returns True if a local session was closed."""

        call_id = _require(call_id, "call_id")
        LOGGER.info("Terminating call=%s", call_id)

        closed = await self._teardown(call_id)
        if not closed:
            LOGGER.info("No local teardown for call=%s; notifying WhatsApp only", call_id)

        # WhatsApp cleans up on its side regardless; this is a courtesy.
        await best_effort("whatsapp terminate", self._platform.terminate(call_id), call_id=call_id)
        return closed

    async def _advance(self, call_id: str, mutate: SessionMutator) -> CallSession:
        try:
            return await self._store.update(call_id, mutate)
        except SessionNotFoundError as exc:
            raise CallAbortedError(f"Call {call_id} was terminated during setup") from exc

    async def _claim_teardown(self, call_id: str, attempt: str | None) -> CallSession | None:
        try:
            return await self._store.update(call_id, _begin_teardown(attempt))
        except (SessionNotFoundError, _TeardownAlreadyClaimed):
            return None

    async def _teardown(self, call_id: str, *, attempt: str | None = None) -> bool:
        """Hang up the edge session and drop the call, if this flow wins the claim.

        With ``attempt`` set, only the session created by that connect attempt
        is claimed. A claimed session is removed even if the hangup raises.
        """

        session = await self._claim_teardown(call_id, attempt)
        if session is None:
            return False

        try:
            if session.edge_session_id:
                # Hangup goes first: a lost registry entry must never hide a
                # live edge allocation.
                await best_effort(
                    "edge hangup",
                    self._edge.hangup(session.edge_session_id),
                    call_id=call_id,
                    edge_session_id=session.edge_session_id,
                )
        finally:
            # A TERMINATING entry blocks new connects, so this cannot drop a
            # newer session.
            await self._store.remove(call_id)
            LOGGER.info("Call=%s closed", call_id)
        return True
