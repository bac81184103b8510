"""Abstract base class for async key-value backends.

The session store only ever talks to a backend through the primitives
defined here, so Redis can be swapped for another key-value service
without touching the store's orchestration logic.  Values are always
UTF-8 strings (an encoded session record).

Classes
-------
- AsyncKeyValueBackend  — abstract base for all async backends
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import timedelta


class AsyncKeyValueBackend(ABC):
    """Protocol for async key-value primitives.

    All methods are coroutines.  Implementations translate their client's
    failures into ``BackendError`` and never retry internally.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if it is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` with no expiry, overwriting any existing value."""

    @abstractmethod
    async def set_with_expiry(self, key: str, value: str, ttl: timedelta) -> None:
        """Store ``value`` under ``key`` so that it expires after ``ttl``.

        Parameters
        ----------
        key:
            Fully prefixed storage key.
        value:
            Encoded session record.
        ttl:
            Positive time-to-live.  Implementations honour at least
            millisecond precision where the backend supports it.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``.  Removing a missing key is a no-op."""

    @abstractmethod
    async def delete_many(self, keys: Iterable[str]) -> None:
        """Remove every key in ``keys`` in as few round trips as possible."""

    @abstractmethod
    async def keys_matching(self, pattern: str) -> set[str]:
        """Return all keys matching a Redis-style glob ``pattern``.

        Supported syntax: ``*``, ``?``, ``[...]`` classes and backslash
        escapes.
        """

    @abstractmethod
    async def key_count(self) -> int:
        """Return the number of keys in the backend's current database."""

    @abstractmethod
    async def flush_all(self) -> None:
        """Remove every key in the backend's current database."""

    @abstractmethod
    async def ttl(self, key: str) -> timedelta | None:
        """Return the remaining time-to-live of ``key``.

        Returns None when the key is missing or has no expiry.
        """

    async def aclose(self) -> None:
        """Release connections held by the backend.  Default: no-op."""


__all__ = ["AsyncKeyValueBackend"]
