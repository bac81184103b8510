#!/usr/bin/env python3
"""Example: Quickstart

Stores a session, loads it back with the cookie value, updates it and
destroys it, first in memory and then in Redis when ``REDIS_URL`` is set.

Usage:
    python examples/01_quickstart.py
    REDIS_URL=redis://127.0.0.1:6379/0 python examples/01_quickstart.py

Requirements:
    pip install async-session-store
"""
from __future__ import annotations

import asyncio
import os

import async_session_store
from async_session_store import AsyncInMemoryBackend, Session, SessionStore


async def demo_store(label: str, store: SessionStore) -> None:
    session = Session()
    session.insert("user_id", 42)
    session.expire_in(60)

    cookie_value = await store.store_session(session)
    print(f"  [{label}] new cookie issued: {cookie_value is not None}")

    loaded = await store.load_session(cookie_value or "")
    assert loaded is not None
    loaded.insert("visits", 1)
    print(f"  [{label}] re-store issues cookie: {await store.store_session(loaded) is not None}")
    print(f"  [{label}] sessions in namespace: {await store.count()}")

    await store.destroy_session(loaded)
    print(f"  [{label}] after destroy: {await store.load_session(cookie_value or '')}")


async def main() -> None:
    print(f"async-session-store version: {async_session_store.__version__}")

    print("\nIn-memory backend:")
    await demo_store("memory", SessionStore(AsyncInMemoryBackend()))

    url = os.environ.get("REDIS_URL")
    if url:
        print("\nRedis backend:")
        async with SessionStore.from_url(url).with_prefix("example/") as store:
            await demo_store("redis", store)


if __name__ == "__main__":
    asyncio.run(main())
