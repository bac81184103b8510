"""async-session-store — Cookie-addressed session persistence in async key-value backends.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import async_session_store
>>> async_session_store.__version__
'0.1.0'
"""
from __future__ import annotations

from async_session_store.errors import (
    BackendError,
    InvalidCookieError,
    SchemaVersionError,
    SerializationError,
    SessionStoreError,
)
from async_session_store.session.cookie import generate_cookie_value, id_from_cookie_value
from async_session_store.session.serializer import JsonCodec, SessionCodec, YamlCodec
from async_session_store.session.state import Session
from async_session_store.storage.async_base import AsyncKeyValueBackend
from async_session_store.storage.async_memory import AsyncInMemoryBackend
from async_session_store.storage.async_redis import AsyncRedisBackend
from async_session_store.store.config import StoreConfig
from async_session_store.store.namespace import Namespace
from async_session_store.store.session_store import SessionStore

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "BackendError",
    "InvalidCookieError",
    "SchemaVersionError",
    "SerializationError",
    "SessionStoreError",
    # Session
    "JsonCodec",
    "Session",
    "SessionCodec",
    "YamlCodec",
    "generate_cookie_value",
    "id_from_cookie_value",
    # Storage
    "AsyncInMemoryBackend",
    "AsyncKeyValueBackend",
    "AsyncRedisBackend",
    # Store
    "Namespace",
    "SessionStore",
    "StoreConfig",
]
