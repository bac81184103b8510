"""Key namespacing for the session store.

Classes
-------
- Namespace  — applies an optional prefix to backend keys
"""
from __future__ import annotations

import re

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class Namespace:
    """Maps session ids to backend keys under an optional prefix.

    Parameters
    ----------
    prefix:
        String prepended to every key.  ``None`` or ``""`` leaves keys
        unchanged.
    """

    def __init__(self, prefix: str | None = None) -> None:
        self._prefix = prefix or None

    @property
    def prefix(self) -> str | None:
        return self._prefix

    @property
    def is_default(self) -> bool:
        """True when no prefix is configured."""
        return self._prefix is None

    def prefixed(self, key: str) -> str:
        """Return ``prefix + key``, or ``key`` unchanged when unprefixed."""
        if self._prefix is None:
            return key
        return f"{self._prefix}{key}"

    def pattern(self) -> str:
        """Return the glob matching every key in this namespace.

        Glob metacharacters in the prefix are escaped so they match
        literally.
        """
        if self._prefix is None:
            return "*"
        return _GLOB_SPECIAL.sub(r"\\\1", self._prefix) + "*"

    def __repr__(self) -> str:
        return f"Namespace(prefix={self._prefix!r})"


__all__ = ["Namespace"]
