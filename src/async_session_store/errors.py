"""Exception taxonomy for async-session-store.

Every error raised by the store derives from ``SessionStoreError`` so
callers can catch the whole family in one place.

Classes
-------
- SessionStoreError   — common base
- InvalidCookieError  — cookie value cannot be decoded or verified
- BackendError        — the key-value client failed
- SerializationError  — a payload cannot be encoded or decoded
- SchemaVersionError  — a stored record uses an unsupported schema version
"""
from __future__ import annotations


class SessionStoreError(Exception):
    """Base class for all session store errors."""


class InvalidCookieError(SessionStoreError, ValueError):
    """Raised when a cookie value cannot be turned into a session id.

    ``load_session`` treats this as "no session"; it is never a backend
    fault.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid session cookie: {reason}")


class BackendError(SessionStoreError):
    """Raised when the key-value backend fails.

    The originating client exception is available as ``__cause__``.

    Parameters
    ----------
    operation:
        Name of the backend primitive that failed (e.g. ``"get"``).
    detail:
        Human-readable description of the failure.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Backend {operation} failed: {detail}")


class SerializationError(SessionStoreError, ValueError):
    """Raised when a session cannot be encoded or a stored record decoded."""


class SchemaVersionError(SerializationError):
    """Raised when a stored record uses an unsupported schema version."""

    def __init__(self, version: str, supported: frozenset[str]) -> None:
        self.version = version
        listed = ", ".join(sorted(supported))
        super().__init__(
            f"Unsupported schema version {version!r}. Supported versions: {listed}"
        )


__all__ = [
    "BackendError",
    "InvalidCookieError",
    "SchemaVersionError",
    "SerializationError",
    "SessionStoreError",
]
