"""Domain-specific exceptions for the call lifecycle.

These exceptions are safe to import from API layers; each carries the HTTP
status the webhook dispatcher answers with.
"""

from __future__ import annotations


class CallError(Exception):
    """Base for failures the webhook dispatcher reports back with ``status_code``."""

    status_code: int = 500
    default_detail: str = "Call handling failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class MalformedEventError(CallError):
    status_code = 400
    default_detail = "Invalid payload"


class CallConflictError(CallError):
    status_code = 409
    default_detail = "Call is already being handled"


class SessionNotFoundError(CallError):
    status_code = 404
    default_detail = "No session for call"


class NegotiationFailedError(CallError):
    status_code = 502
    default_detail = "Media edge negotiation failed"


class AcceptanceFailedError(CallError):
    status_code = 502
    default_detail = "WhatsApp rejected call acceptance"


class CallAbortedError(CallError):
    status_code = 409
    default_detail = "Call was terminated during setup"
