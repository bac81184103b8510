"""Session subpackage.

Public surface
--------------
- Session               — per-user session state model
- SessionCodec          — abstract encode/decode pair
- JsonCodec / YamlCodec — concrete codecs
- generate_cookie_value / id_from_cookie_value — cookie helpers
"""
from __future__ import annotations

from async_session_store.session.cookie import generate_cookie_value, id_from_cookie_value
from async_session_store.session.serializer import (
    JsonCodec,
    SessionCodec,
    YamlCodec,
    get_codec,
)
from async_session_store.session.state import Session

__all__ = [
    "JsonCodec",
    "Session",
    "SessionCodec",
    "YamlCodec",
    "generate_cookie_value",
    "get_codec",
    "id_from_cookie_value",
]
