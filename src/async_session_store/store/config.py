"""Construction-time configuration for ``SessionStore``.

Classes
-------
- StoreConfig  — immutable prefix / TTL / error-mode settings
"""
from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, field_validator


class StoreConfig(BaseModel):
    """Immutable session store settings.

    Parameters
    ----------
    prefix:
        String prepended to every storage key.  ``None`` means the store
        owns the backend's whole logical database, and ``clear_store``
        flushes it.
    fixed_ttl:
        Expiry applied to sessions that carry no expiry of their own.  A
        session's own expiry always takes precedence over this value.
    strict:
        When True (default), load and store failures raise.  When False,
        the legacy contract applies: failures are logged and turned into
        "no session" / "no cookie".

    Unknown fields are rejected rather than ignored, so a misspelled
    ``prefix`` cannot silently produce an unprefixed store.
    """

    prefix: str | None = None
    fixed_ttl: timedelta | None = None
    strict: bool = True

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("prefix")
    @classmethod
    def _empty_prefix_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("fixed_ttl")
    @classmethod
    def _ttl_positive(cls, value: timedelta | None) -> timedelta | None:
        if value is not None and value <= timedelta(0):
            raise ValueError("fixed_ttl must be positive")
        return value


__all__ = ["StoreConfig"]
