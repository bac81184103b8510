"""Unit tests for async_session_store.session.serializer."""
from __future__ import annotations

import enum
import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest
import yaml

from async_session_store.errors import SchemaVersionError, SerializationError
from async_session_store.session.serializer import (
    SCHEMA_VERSION,
    JsonCodec,
    SessionCodec,
    YamlCodec,
    get_codec,
)
from async_session_store.session.state import Session


class Color(str, enum.Enum):
    RED = "red"


@pytest.fixture(params=[JsonCodec, YamlCodec], ids=["json", "yaml"])
def codec(request: pytest.FixtureRequest) -> SessionCodec:
    return request.param()


def _session() -> Session:
    session = Session()
    session.insert("user", "alice")
    session.insert("cart", [1, 2, 3])
    session.insert("prefs", {"theme": "dark", "beta": True})
    return session


class TestCodecRoundTrip:
    def test_preserves_id_and_data(self, codec: SessionCodec) -> None:
        session = _session()
        restored = codec.decode(codec.encode(session))
        assert restored.id == session.id
        assert restored.data == session.data

    def test_preserves_expiry(self, codec: SessionCodec) -> None:
        session = _session()
        session.set_expiry(datetime(2030, 5, 1, 8, 30, tzinfo=timezone.utc))
        restored = codec.decode(codec.encode(session))
        assert restored.expiry == session.expiry

    def test_restored_session_has_no_cookie(self, codec: SessionCodec) -> None:
        restored = codec.decode(codec.encode(_session()))
        assert restored.into_cookie_value() is None

    def test_encode_does_not_consume_cookie(self, codec: SessionCodec) -> None:
        session = _session()
        codec.encode(session)
        assert session.has_cookie_value


class TestJsonCodec:
    def test_document_shape(self) -> None:
        session = _session()
        document = json.loads(JsonCodec().encode(session))
        assert document["schema_version"] == SCHEMA_VERSION
        assert document["id"] == session.id
        assert document["expiry"] is None
        assert document["data"]["user"] == "alice"

    def test_cookie_value_not_persisted(self) -> None:
        session = _session()
        raw = JsonCodec().encode(session)
        assert session.into_cookie_value() not in raw

    def test_malformed_json_raises(self) -> None:
        with pytest.raises(SerializationError, match="Malformed JSON"):
            JsonCodec().decode("{not json")

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(SerializationError, match="mapping"):
            JsonCodec().decode("[1, 2]")

    def test_unknown_schema_version_raises(self) -> None:
        raw = json.dumps({"schema_version": "9.9", "id": "x", "data": {}})
        with pytest.raises(SchemaVersionError) as excinfo:
            JsonCodec().decode(raw)
        assert excinfo.value.version == "9.9"

    def test_missing_schema_version_raises(self) -> None:
        with pytest.raises(SchemaVersionError):
            JsonCodec().decode(json.dumps({"id": "x", "data": {}}))

    def test_missing_id_raises(self) -> None:
        raw = json.dumps({"schema_version": SCHEMA_VERSION, "data": {}})
        with pytest.raises(SerializationError, match="no id"):
            JsonCodec().decode(raw)

    def test_invalid_field_types_raise(self) -> None:
        raw = json.dumps({"schema_version": SCHEMA_VERSION, "id": "x", "data": "oops"})
        with pytest.raises(SerializationError, match="Invalid session record"):
            JsonCodec().decode(raw)

    def test_unencodable_value_raises(self) -> None:
        session = Session()
        session.insert("thing", object())
        with pytest.raises(SerializationError, match="Cannot encode"):
            JsonCodec().encode(session)


class TestYamlCodec:
    def test_output_is_yaml(self) -> None:
        document = yaml.safe_load(YamlCodec().encode(_session()))
        assert document["schema_version"] == SCHEMA_VERSION

    def test_malformed_yaml_raises(self) -> None:
        with pytest.raises(SerializationError):
            YamlCodec().decode("key: [unclosed")

    def test_scalar_document_raises(self) -> None:
        with pytest.raises(SerializationError):
            YamlCodec().decode("just a string")


class TestLossyValuesRejected:
    @pytest.mark.parametrize(
        "value",
        [
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            {1, 2},
            (1, 2),
            b"raw",
            uuid.UUID(int=1),
            Color.RED,
            {"nested": [datetime(2024, 1, 1, tzinfo=timezone.utc)]},
        ],
        ids=["datetime", "set", "tuple", "bytes", "uuid", "enum", "nested"],
    )
    def test_value_that_would_change_type_raises(
        self, codec: SessionCodec, value: object
    ) -> None:
        session = Session()
        session.insert("thing", value)
        with pytest.raises(SerializationError, match="not JSON-representable"):
            codec.encode(session)

    def test_non_string_key_raises(self, codec: SessionCodec) -> None:
        session = Session()
        session.insert("counts", {1: "one"})
        with pytest.raises(SerializationError, match="not a string"):
            codec.encode(session)

    def test_self_referencing_value_raises(self, codec: SessionCodec) -> None:
        loop: list[object] = []
        loop.append(loop)
        session = Session()
        session.insert("loop", loop)
        with pytest.raises(SerializationError, match="contains itself"):
            codec.encode(session)

    def test_shared_subvalue_is_accepted(self, codec: SessionCodec) -> None:
        shared = {"a": 1}
        session = Session()
        session.insert("pair", [shared, shared])
        restored = codec.decode(codec.encode(session))
        assert restored.data == {"pair": [{"a": 1}, {"a": 1}]}

    def test_error_names_the_path(self) -> None:
        session = Session()
        session.insert("prefs", {"seen": {1, 2}})
        with pytest.raises(SerializationError, match=r"data\['prefs'\]\['seen'\]"):
            JsonCodec().encode(session)


class TestGetCodec:
    def test_known_names(self) -> None:
        assert isinstance(get_codec("json"), JsonCodec)
        assert isinstance(get_codec("yaml"), YamlCodec)

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown codec"):
            get_codec("msgpack")


def test_expiry_survives_round_trip_relative() -> None:
    session = Session()
    session.expire_in(timedelta(hours=1))
    restored = JsonCodec().decode(JsonCodec().encode(session))
    remaining = restored.expires_in()
    assert remaining is not None
    assert remaining > timedelta(minutes=59)
