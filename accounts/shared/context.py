"""Request context management using contextvars.

Holds request-scoped values that are only needed for diagnostics (the
request ID shown in log lines). Caller identity is NOT stored here; it is
passed explicitly to every service operation.
"""

from contextvars import ContextVar

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> None:
    """Set the request ID for the current async task."""
    _request_id.set(request_id)


def get_request_id() -> str | None:
    """Return the request ID for the current async task, or None outside a request."""
    return _request_id.get()
