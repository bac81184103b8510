"""Storage backend subpackage.

All backends implement the ``AsyncKeyValueBackend`` ABC.

Public surface
--------------
- AsyncKeyValueBackend — abstract base class
- AsyncInMemoryBackend — dict-based backend with lazy expiry (useful for testing)
- AsyncRedisBackend    — redis.asyncio backend
"""
from __future__ import annotations

from async_session_store.storage.async_base import AsyncKeyValueBackend
from async_session_store.storage.async_memory import AsyncInMemoryBackend
from async_session_store.storage.async_redis import AsyncRedisBackend

__all__ = [
    "AsyncInMemoryBackend",
    "AsyncKeyValueBackend",
    "AsyncRedisBackend",
]
