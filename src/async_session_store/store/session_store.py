"""Session lifecycle orchestration.

``SessionStore`` loads, stores, destroys and clears sessions in an async
key-value backend.  It holds no state besides its immutable configuration,
so one instance is shared by every concurrent request.

Expiry policy
-------------
A session's own expiry always wins.  The remaining time is measured when
``store_session`` runs, so re-storing a session never extends its life.
Sessions without an expiry get the store's ``fixed_ttl`` when one is
configured, and are stored without expiry otherwise.

Clearing
--------
An unprefixed store owns its backend database: ``clear_store`` issues a
flush and removes every key in that database, including keys written by
anyone else.  A prefixed store scans its own namespace and deletes what
it finds.  The scan and the delete are separate steps, so a session
stored while a clear is running may or may not survive it.

Concurrency
-----------
No locking and no compare-and-swap: two concurrent stores of the same
session race at the backend and the last write wins.  No timeouts or
retries are applied; callers wrap calls in their own deadlines.

Classes
-------
- SessionStore  — load / store / destroy / clear / count
"""
from __future__ import annotations

import logging
from datetime import timedelta
from types import TracebackType
from typing import Any

from async_session_store.errors import (
    BackendError,
    InvalidCookieError,
    SerializationError,
)
from async_session_store.session.cookie import id_from_cookie_value
from async_session_store.session.serializer import JsonCodec, SessionCodec
from async_session_store.session.state import Session
from async_session_store.storage.async_base import AsyncKeyValueBackend
from async_session_store.store.config import StoreConfig
from async_session_store.store.namespace import Namespace

logger = logging.getLogger(__name__)


class SessionStore:
    """Persist sessions in an async key-value backend.

    Parameters
    ----------
    backend:
        Any ``AsyncKeyValueBackend``.
    config:
        Prefix, fixed TTL and error mode.  Defaults to an unprefixed,
        strict store with no fixed TTL.
    codec:
        Encoding of stored records.  Defaults to ``JsonCodec``.  Records
        written with one codec cannot be read with another.

    Example
    -------
    >>> store = SessionStore.from_url("redis://127.0.0.1/").with_prefix("sessions/")
    >>> session = Session()
    >>> session.insert("key", "value")
    >>> cookie_value = await store.store_session(session)
    >>> loaded = await store.load_session(cookie_value)
    """

    def __init__(
        self,
        backend: AsyncKeyValueBackend,
        config: StoreConfig | None = None,
        codec: SessionCodec | None = None,
    ) -> None:
        self._backend = backend
        self._config = config or StoreConfig()
        self._codec = codec or JsonCodec()
        self._namespace = Namespace(self._config.prefix)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        codec: SessionCodec | None = None,
        **config: Any,
    ) -> SessionStore:
        """Build a Redis-backed store from a connection URL.

        Keyword arguments other than ``codec`` are ``StoreConfig`` fields.
        Unknown keywords are rejected.

        Raises
        ------
        BackendError
            If ``url`` is not a valid Redis URL.
        pydantic.ValidationError
            If a keyword is not a ``StoreConfig`` field or has a bad value.
        """
        from async_session_store.storage.async_redis import AsyncRedisBackend

        settings = StoreConfig(**config)
        return cls(AsyncRedisBackend.from_url(url), settings, codec)

    @classmethod
    def from_client(
        cls,
        client: Any,
        *,
        codec: SessionCodec | None = None,
        **config: Any,
    ) -> SessionStore:
        """Build a store around an existing ``redis.asyncio.Redis`` client.

        The client must use ``decode_responses=True``.
        """
        from async_session_store.storage.async_redis import AsyncRedisBackend

        settings = StoreConfig(**config)
        return cls(AsyncRedisBackend(client), settings, codec)

    def _replace(self, **changes: Any) -> SessionStore:
        settings = self._config.model_dump()
        settings.update(changes)
        return SessionStore(self._backend, StoreConfig(**settings), self._codec)

    def with_prefix(self, prefix: str) -> SessionStore:
        """Return a store sharing this backend under the key ``prefix``."""
        return self._replace(prefix=prefix)

    def with_ttl(self, ttl: timedelta | float) -> SessionStore:
        """Return a store that expires sessions without their own expiry after ``ttl``."""
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        return self._replace(fixed_ttl=ttl)

    def with_strict(self, strict: bool) -> SessionStore:
        """Return a store using the strict (True) or legacy (False) error contract."""
        return self._replace(strict=strict)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def backend(self) -> AsyncKeyValueBackend:
        return self._backend

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def codec(self) -> SessionCodec:
        return self._codec

    @property
    def namespace(self) -> Namespace:
        return self._namespace

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def load_session(self, cookie_value: str) -> Session | None:
        """Return the session addressed by ``cookie_value``, or None.

        An undecodable cookie, a missing key and an expired record all
        mean "no session".  The backend TTL is not touched.

        Raises
        ------
        BackendError
            If the backend read fails (strict mode only).
        SerializationError
            If the stored record cannot be decoded (strict mode only).
        """
        try:
            session_id = id_from_cookie_value(cookie_value)
        except InvalidCookieError as exc:
            logger.debug("SessionStore: rejected cookie value: %s", exc.reason)
            return None

        key = self._namespace.prefixed(session_id)
        try:
            raw = await self._backend.get(key)
            if raw is None:
                logger.debug("SessionStore: no session stored under %r", key)
                return None
            session = self._codec.decode(raw)
            if session.id != session_id:
                raise SerializationError(
                    f"Record under {key!r} belongs to session {session.id!r}"
                )
        except (BackendError, SerializationError) as exc:
            return self._legacy_fallback("load_session", exc)

        if session.is_expired():
            logger.debug("SessionStore: session %r has expired", session_id)
            return None
        return session

    async def store_session(self, session: Session) -> str | None:
        """Persist ``session`` and return its cookie value on first persist.

        Returns the newly minted cookie value the first time a session is
        stored and None on every later store.  If the write fails, the
        cookie value is kept on the session so a retry can still return it.

        Raises
        ------
        SerializationError
            If the session data cannot be encoded (strict mode only).
        BackendError
            If the backend write fails (strict mode only).
        """
        key = self._namespace.prefixed(session.id)
        try:
            raw = self._codec.encode(session)
            remaining = session.expires_in()
            if remaining is not None and remaining <= timedelta(0):
                logger.debug("SessionStore: session %r already expired; removing", session.id)
                await self._backend.delete(key)
                return None
            ttl = remaining if remaining is not None else self._config.fixed_ttl
            if ttl is None:
                await self._backend.set(key, raw)
            else:
                await self._backend.set_with_expiry(key, raw, ttl)
        except (BackendError, SerializationError) as exc:
            return self._legacy_fallback("store_session", exc)

        logger.debug("SessionStore: stored session under %r (ttl=%s)", key, ttl)
        session.reset_data_changed()
        return session.into_cookie_value()

    async def destroy_session(self, session: Session) -> None:
        """Delete the stored record for ``session``.

        Destroying a session that is not stored is a no-op.

        Raises
        ------
        BackendError
            If the backend delete fails.
        """
        key = self._namespace.prefixed(session.id)
        await self._backend.delete(key)
        logger.debug("SessionStore: destroyed session under %r", key)

    async def clear_store(self) -> None:
        """Remove every session in this store's namespace.

        Unprefixed stores flush the backend's whole current database.

        Raises
        ------
        BackendError
            If a backend call fails.
        """
        if self._namespace.is_default:
            logger.warning("SessionStore: flushing the entire backend database")
            await self._backend.flush_all()
            return

        keys = await self._backend.keys_matching(self._namespace.pattern())
        if not keys:
            logger.debug("SessionStore: namespace %r already empty", self._namespace.prefix)
            return
        await self._backend.delete_many(keys)
        logger.debug(
            "SessionStore: cleared %d keys under %r", len(keys), self._namespace.prefix
        )

    async def count(self) -> int:
        """Return the number of keys in this store's namespace.

        Unprefixed stores report the backend's total key count.
        """
        if self._namespace.is_default:
            return await self._backend.key_count()
        return len(await self._backend.keys_matching(self._namespace.pattern()))

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release the backend's connections."""
        await self._backend.aclose()

    async def __aenter__(self) -> SessionStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _legacy_fallback(self, operation: str, exc: Exception) -> None:
        if self._config.strict:
            raise exc
        logger.warning("SessionStore: %s failed, returning None: %s", operation, exc)
        return None

    def __repr__(self) -> str:
        return (
            f"SessionStore(backend={self._backend!r}, prefix={self._config.prefix!r}, "
            f"fixed_ttl={self._config.fixed_ttl!r}, strict={self._config.strict!r})"
        )


__all__ = ["SessionStore"]
