"""Session store subpackage.

Public surface
--------------
- SessionStore — load / store / destroy / clear / count
- StoreConfig  — immutable prefix / TTL / error-mode settings
- Namespace    — key prefixing
"""
from __future__ import annotations

from async_session_store.store.config import StoreConfig
from async_session_store.store.namespace import Namespace
from async_session_store.store.session_store import SessionStore

__all__ = ["Namespace", "SessionStore", "StoreConfig"]
