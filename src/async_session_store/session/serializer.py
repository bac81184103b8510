"""Session codecs with schema versioning.

A codec turns a ``Session`` into the single string stored under its key
and back.  The schema version is embedded in every record so that a
reader can refuse documents it does not understand instead of guessing.

Records written by one codec are unreadable by another; a deployment
must keep the same codec for the lifetime of its stored sessions.

Classes
-------
- SessionCodec  — abstract encode/decode pair
- JsonCodec     — default JSON codec
- YamlCodec     — YAML codec (``pyyaml``)
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

import yaml
from pydantic import ValidationError

from async_session_store.errors import SchemaVersionError, SerializationError
from async_session_store.session.state import Session

SCHEMA_VERSION: str = "1.0"
_SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({SCHEMA_VERSION})

_SCALARS = (str, int, float, bool, type(None))


def _check_representable(
    value: object,
    session_id: str,
    path: str = "data",
    _parents: frozenset[int] = frozenset(),
) -> None:
    """Raise ``SerializationError`` unless ``value`` survives a round trip unchanged.

    Only dicts with string keys, lists and plain JSON scalars are accepted.
    Tuples, sets, bytes, datetimes, enums and other objects would come back
    as something else.
    """
    if type(value) in _SCALARS:
        return
    if isinstance(value, (list, dict)):
        if id(value) in _parents:
            raise SerializationError(
                f"Cannot encode session {session_id!r}: {path} contains itself"
            )
        parents = _parents | {id(value)}
        if isinstance(value, list):
            for index, item in enumerate(value):
                _check_representable(item, session_id, f"{path}[{index}]", parents)
            return
        for key, item in value.items():
            if type(key) is not str:
                raise SerializationError(
                    f"Cannot encode session {session_id!r}: key {key!r} in {path} is not a string"
                )
            _check_representable(item, session_id, f"{path}[{key!r}]", parents)
        return
    raise SerializationError(
        f"Cannot encode session {session_id!r}: {path} holds a "
        f"{type(value).__name__}, which is not JSON-representable"
    )


class SessionCodec(ABC):
    """Reversible text encoding of a ``Session`` record."""

    name: str = "abstract"

    @abstractmethod
    def encode(self, session: Session) -> str:
        """Return the storable string form of ``session``.

        Raises
        ------
        SerializationError
            If the session data is not representable in this encoding.
        """

    @abstractmethod
    def decode(self, raw: str) -> Session:
        """Rebuild a ``Session`` from a string produced by ``encode``.

        Raises
        ------
        SerializationError
            If ``raw`` is malformed or uses an unsupported schema version.
        """

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_document(session: Session) -> dict[str, Any]:
        _check_representable(session.data, session.id)
        document = session.model_dump(mode="json", include={"id", "expiry"})
        document["data"] = session.data
        document["schema_version"] = SCHEMA_VERSION
        return document

    @staticmethod
    def _from_document(document: object) -> Session:
        if not isinstance(document, dict):
            raise SerializationError(
                f"Session record must be a mapping, got {type(document).__name__}"
            )
        version = str(document.get("schema_version", ""))
        if version not in _SUPPORTED_SCHEMA_VERSIONS:
            raise SchemaVersionError(version, _SUPPORTED_SCHEMA_VERSIONS)
        if not document.get("id"):
            raise SerializationError("Session record has no id")
        fields = {k: v for k, v in document.items() if k != "schema_version"}
        try:
            return Session.model_validate(fields)
        except ValidationError as exc:
            raise SerializationError(f"Invalid session record: {exc}") from exc


class JsonCodec(SessionCodec):
    """Compact JSON encoding; the default codec."""

    name = "json"

    def encode(self, session: Session) -> str:
        document = self._to_document(session)
        try:
            return json.dumps(document, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"Cannot encode session {session.id!r}: {exc}"
            ) from exc

    def decode(self, raw: str) -> Session:
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"Malformed JSON session record: {exc}") from exc
        return self._from_document(document)


class YamlCodec(SessionCodec):
    """YAML encoding of the same document shape as ``JsonCodec``."""

    name = "yaml"

    def encode(self, session: Session) -> str:
        document = self._to_document(session)
        try:
            return yaml.safe_dump(
                document,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=True,
            )
        except (yaml.YAMLError, ValueError) as exc:
            raise SerializationError(
                f"Cannot encode session {session.id!r}: {exc}"
            ) from exc

    def decode(self, raw: str) -> Session:
        try:
            document = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise SerializationError(f"Malformed YAML session record: {exc}") from exc
        return self._from_document(document)


_CODECS: dict[str, type[SessionCodec]] = {"json": JsonCodec, "yaml": YamlCodec}


def get_codec(name: str) -> SessionCodec:
    """Return a codec instance by name (``"json"`` or ``"yaml"``)."""
    try:
        return _CODECS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown codec {name!r}. Available: {', '.join(sorted(_CODECS))}"
        ) from None


__all__ = ["JsonCodec", "SCHEMA_VERSION", "SessionCodec", "YamlCodec", "get_codec"]
