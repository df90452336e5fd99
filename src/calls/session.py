"""Per-call session state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from uuid import uuid4


class CallState(str, Enum):
    NEGOTIATING = "negotiating"
    ACTIVE = "active"
    TERMINATING = "terminating"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class CallSession:
    """One bridged call, keyed by the WhatsApp ``call_id``.

    Sessions are values: every transition returns a new instance so that
    callers holding a snapshot never observe or cause a stored mutation.
    ``attempt`` identifies one connect attempt; it survives transitions but
    differs between sessions created for the same ``call_id``.
    """

    call_id: str
    edge_session_id: str | None = None
    state: CallState = CallState.NEGOTIATING
    attempt: str = field(default_factory=lambda: uuid4().hex, compare=False, repr=False)

    @property
    def is_tearing_down(self) -> bool:
        return self.state in (CallState.TERMINATING, CallState.CLOSED)

    def with_edge_session(self, edge_session_id: str) -> CallSession:
        return replace(self, edge_session_id=edge_session_id)

    def transition(self, state: CallState) -> CallSession:
        return replace(self, state=state)
