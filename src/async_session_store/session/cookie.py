"""Cookie value minting and cookie-to-id derivation.

A cookie value is 64 random bytes, base64-encoded.  The session id is the
base64-encoded BLAKE2b-256 digest of those bytes, so the id stored in the
backend never reveals the cookie a client holds, and a client cannot pick
an id without knowing a matching cookie.

Functions
---------
- generate_cookie_value  — mint a fresh random cookie value
- id_from_cookie_value   — derive the stable session id from a cookie value
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import secrets

from async_session_store.errors import InvalidCookieError

COOKIE_BYTES: int = 64
_DIGEST_BYTES: int = 32


def generate_cookie_value() -> str:
    """Return a new base64-encoded cookie value of ``COOKIE_BYTES`` random bytes."""
    return base64.b64encode(secrets.token_bytes(COOKIE_BYTES)).decode("ascii")


def id_from_cookie_value(cookie_value: str) -> str:
    """Derive the session id for ``cookie_value``.

    Parameters
    ----------
    cookie_value:
        Value previously produced by ``generate_cookie_value``.

    Returns
    -------
    str
        Base64-encoded BLAKE2b-256 digest of the decoded cookie bytes.

    Raises
    ------
    InvalidCookieError
        If the value is not valid base64 or does not decode to exactly
        ``COOKIE_BYTES`` bytes.
    """
    try:
        raw = base64.b64decode(cookie_value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError) as exc:
        raise InvalidCookieError("not valid base64") from exc
    if len(raw) != COOKIE_BYTES:
        raise InvalidCookieError(
            f"expected {COOKIE_BYTES} bytes, got {len(raw)}"
        )
    digest = hashlib.blake2b(raw, digest_size=_DIGEST_BYTES).digest()
    return base64.b64encode(digest).decode("ascii")


__all__ = ["COOKIE_BYTES", "generate_cookie_value", "id_from_cookie_value"]
