"""Async Redis key-value backend built on ``redis.asyncio``.

Connection pooling, reconnection and transport security are handled by
the ``redis`` client; this module only maps the backend primitives onto
Redis commands and turns client failures into ``BackendError``.

Classes
-------
- AsyncRedisBackend  — redis.asyncio-backed key-value backend
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import timedelta

import redis.asyncio as redis_asyncio
from redis.exceptions import RedisError

from async_session_store.errors import BackendError
from async_session_store.storage.async_base import AsyncKeyValueBackend

logger = logging.getLogger(__name__)

_SCAN_COUNT: int = 100
_DELETE_BATCH: int = 500


class AsyncRedisBackend(AsyncKeyValueBackend):
    """Key-value primitives over a single ``redis.asyncio.Redis`` client.

    Every value is stored as a Redis string.  Keys are used exactly as
    given; namespacing is the session store's job.

    Parameters
    ----------
    client:
        A ``redis.asyncio.Redis`` client.  It must be created with
        ``decode_responses=True`` so that values come back as ``str``.
    """

    def __init__(self, client: redis_asyncio.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, **kwargs: object) -> AsyncRedisBackend:
        """Build a backend from a Redis URL such as ``"redis://localhost:6379/0"``.

        Raises
        ------
        BackendError
            If the URL cannot be parsed into connection settings.
        """
        try:
            client = redis_asyncio.Redis.from_url(url, decode_responses=True, **kwargs)
        except ValueError as exc:
            raise BackendError("connect", str(exc)) from exc
        return cls(client)

    @property
    def client(self) -> redis_asyncio.Redis:
        return self._client

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RedisError as exc:
            logger.debug("AsyncRedisBackend: %s failed: %s", operation, exc)
            raise BackendError(operation, str(exc) or type(exc).__name__) from exc

    # ------------------------------------------------------------------
    # AsyncKeyValueBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        with self._translate_errors("get"):
            value = await self._client.get(key)
        return None if value is None else str(value)

    async def set(self, key: str, value: str) -> None:
        with self._translate_errors("set"):
            await self._client.set(key, value)

    async def set_with_expiry(self, key: str, value: str, ttl: timedelta) -> None:
        milliseconds = max(1, int(ttl.total_seconds() * 1000))
        with self._translate_errors("set_with_expiry"):
            await self._client.set(key, value, px=milliseconds)

    async def delete(self, key: str) -> None:
        with self._translate_errors("delete"):
            await self._client.delete(key)

    async def delete_many(self, keys: Iterable[str]) -> None:
        pending = list(keys)
        with self._translate_errors("delete_many"):
            for start in range(0, len(pending), _DELETE_BATCH):
                await self._client.delete(*pending[start : start + _DELETE_BATCH])

    async def keys_matching(self, pattern: str) -> set[str]:
        """Return keys matching ``pattern`` using SCAN so the server is never blocked."""
        with self._translate_errors("keys_matching"):
            return {
                str(key)
                async for key in self._client.scan_iter(match=pattern, count=_SCAN_COUNT)
            }

    async def key_count(self) -> int:
        with self._translate_errors("key_count"):
            return int(await self._client.dbsize())

    async def flush_all(self) -> None:
        with self._translate_errors("flush_all"):
            await self._client.flushdb()

    async def ttl(self, key: str) -> timedelta | None:
        with self._translate_errors("ttl"):
            milliseconds = int(await self._client.pttl(key))
        # -2: missing key, -1: no expiry
        if milliseconds < 0:
            return None
        return timedelta(milliseconds=milliseconds)

    async def aclose(self) -> None:
        with self._translate_errors("close"):
            await self._client.aclose()

    def __repr__(self) -> str:
        return f"AsyncRedisBackend(client={self._client!r})"


__all__ = ["AsyncRedisBackend"]
