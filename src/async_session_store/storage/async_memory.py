"""Async in-memory key-value backend.

Stores values in a plain Python dict guarded by ``asyncio.Lock``, with
lazy expiry against a monotonic clock.  All data is lost when the
process exits.  This backend is primarily useful for tests and local
prototyping.

Classes
-------
- AsyncInMemoryBackend  — dict-backed ephemeral async storage
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Callable, Iterable
from datetime import timedelta

from async_session_store.storage.async_base import AsyncKeyValueBackend


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a Redis-style glob into an anchored regular expression."""
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "\\" and i + 1 < n:
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[i + 1 : end].replace("\\", "\\\\")
                if body.startswith("^"):
                    body = "^" + body[1:].replace("^", "\\^")
                else:
                    body = body.replace("^", "\\^")
                parts.append(f"[{body}]")
                i = end + 1
                continue
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


class AsyncInMemoryBackend(AsyncKeyValueBackend):
    """Ephemeral async in-process key-value backend.

    An ``asyncio.Lock`` guards all mutations so that concurrent coroutines
    do not race on the internal dict.  Expired keys are dropped the next
    time any operation looks at them.

    Parameters
    ----------
    initial_data:
        Optional pre-populated mapping of keys to values (no expiry).
        A shallow copy is taken so the caller's dict is not mutated.
    clock:
        Zero-argument callable returning monotonic seconds.  Defaults to
        ``time.monotonic``; tests inject a fake to step over expiries.
    """

    def __init__(
        self,
        initial_data: dict[str, str] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._store: dict[str, tuple[str, float | None]] = {
            key: (value, None) for key, value in (initial_data or {}).items()
        }
        self._lock: asyncio.Lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [
            key
            for key, (_, deadline) in self._store.items()
            if deadline is not None and deadline <= now
        ]
        for key in expired:
            del self._store[key]

    # ------------------------------------------------------------------
    # AsyncKeyValueBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        async with self._lock:
            self._purge_expired()
            entry = self._store.get(key)
            return entry[0] if entry is not None else None

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._store[key] = (value, None)

    async def set_with_expiry(self, key: str, value: str, ttl: timedelta) -> None:
        async with self._lock:
            self._store[key] = (value, self._clock() + ttl.total_seconds())

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._store.pop(key, None)

    async def delete_many(self, keys: Iterable[str]) -> None:
        async with self._lock:
            for key in keys:
                self._store.pop(key, None)

    async def keys_matching(self, pattern: str) -> set[str]:
        regex = glob_to_regex(pattern)
        async with self._lock:
            self._purge_expired()
            return {key for key in self._store if regex.match(key)}

    async def key_count(self) -> int:
        async with self._lock:
            self._purge_expired()
            return len(self._store)

    async def flush_all(self) -> None:
        async with self._lock:
            self._store.clear()

    async def ttl(self, key: str) -> timedelta | None:
        async with self._lock:
            self._purge_expired()
            entry = self._store.get(key)
            if entry is None or entry[1] is None:
                return None
            return timedelta(seconds=entry[1] - self._clock())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"AsyncInMemoryBackend(keys={len(self._store)})"


__all__ = ["AsyncInMemoryBackend", "glob_to_regex"]
