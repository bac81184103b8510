"""Session domain model.

``Session`` is a Pydantic BaseModel so that it validates on load and
serialises cleanly through the codecs in
``async_session_store.session.serializer``.

Only ``id``, ``expiry`` and ``data`` are persisted.  The cookie value and
the change/destroy flags are private, in-process state.

Classes
-------
- Session  — per-user session state addressed by a cookie-derived id
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from async_session_store.session.cookie import generate_cookie_value, id_from_cookie_value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """Server-side session state.

    Constructing a ``Session`` without an ``id`` mints a fresh cookie value
    and derives the id from it.  Sessions rebuilt from a stored record keep
    their id and carry no cookie value, so storing them again never hands
    out a new cookie.

    Parameters
    ----------
    id:
        Stable identifier derived from the cookie value.  Leave empty to
        mint a new session.
    data:
        Mapping of string keys to JSON-representable values.
    expiry:
        Absolute expiry time (UTC).  ``None`` means the session does not
        expire on its own.

    Example
    -------
    >>> session = Session()
    >>> session.insert("user_id", 42)
    >>> cookie = session.into_cookie_value()
    >>> session.into_cookie_value() is None
    True
    """

    id: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    expiry: datetime | None = None

    _cookie_value: str | None = PrivateAttr(default=None)
    _data_changed: bool = PrivateAttr(default=False)
    _destroyed: bool = PrivateAttr(default=False)

    model_config = {"frozen": False, "validate_assignment": True}

    def model_post_init(self, __context: Any) -> None:
        if not self.id:
            cookie_value = generate_cookie_value()
            self.id = id_from_cookie_value(cookie_value)
            self._cookie_value = cookie_value

    @field_validator("expiry")
    @classmethod
    def _expiry_is_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    def insert(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``; marks the session changed if the value differs."""
        if self.data.get(key, _MISSING) != value:
            self.data[key] = value
            self._data_changed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key`` or ``default``."""
        return self.data.get(key, default)

    def remove(self, key: str) -> None:
        """Remove ``key`` if present."""
        if key in self.data:
            del self.data[key]
            self._data_changed = True

    def clear(self) -> None:
        """Remove every key from the session."""
        if self.data:
            self.data.clear()
            self._data_changed = True

    def __len__(self) -> int:
        return len(self.data)

    @property
    def data_changed(self) -> bool:
        """True if the data was mutated through this object since the last reset."""
        return self._data_changed

    def reset_data_changed(self) -> None:
        self._data_changed = False

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    def set_expiry(self, expiry: datetime) -> None:
        """Set an absolute expiry time."""
        self.expiry = expiry

    def expire_in(self, ttl: timedelta | float) -> None:
        """Expire the session ``ttl`` (timedelta or seconds) from now."""
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        self.expiry = _utcnow() + ttl

    def expires_in(self) -> timedelta | None:
        """Return the time left before expiry, measured now.

        Returns ``None`` when the session has no expiry.  The result is
        zero or negative once the expiry has passed.
        """
        if self.expiry is None:
            return None
        return self.expiry - _utcnow()

    def is_expired(self) -> bool:
        remaining = self.expires_in()
        return remaining is not None and remaining <= timedelta(0)

    def validate_session(self) -> Session | None:
        """Return ``self`` unless the session has expired."""
        if self.is_expired():
            return None
        return self

    # ------------------------------------------------------------------
    # Cookie & lifecycle
    # ------------------------------------------------------------------

    def into_cookie_value(self) -> str | None:
        """Return the cookie value once; every later call returns ``None``."""
        cookie_value, self._cookie_value = self._cookie_value, None
        return cookie_value

    @property
    def has_cookie_value(self) -> bool:
        """True while a newly minted cookie value has not been handed out."""
        return self._cookie_value is not None

    def regenerate(self) -> None:
        """Give the session a new id and cookie value, keeping its data.

        The old record is not removed from the backend; callers destroy the
        previous session first if it was already stored.
        """
        cookie_value = generate_cookie_value()
        self.id = id_from_cookie_value(cookie_value)
        self._cookie_value = cookie_value

    def destroy(self) -> None:
        """Mark the session for destruction by the request layer."""
        self._destroyed = True

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def __repr__(self) -> str:
        return f"Session(id={self.id!r}, keys={len(self.data)}, expiry={self.expiry!r})"


_MISSING = object()

__all__ = ["Session"]
