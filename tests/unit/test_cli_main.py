"""Unit tests for async_session_store.cli.main.

Uses Click's test runner (CliRunner) with ``_make_store`` patched to return
an in-memory store, so no Redis server is required.
"""
from __future__ import annotations

import asyncio
import json

import pytest
from click.testing import CliRunner

from async_session_store.cli import main as cli_main
from async_session_store.cli.main import _make_store, cli
from async_session_store.errors import BackendError
from async_session_store.session.cookie import generate_cookie_value, id_from_cookie_value
from async_session_store.session.serializer import JsonCodec, SessionCodec, YamlCodec, get_codec
from async_session_store.session.state import Session
from async_session_store.storage.async_memory import AsyncInMemoryBackend
from async_session_store.storage.async_redis import AsyncRedisBackend
from async_session_store.store.session_store import SessionStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def backend() -> AsyncInMemoryBackend:
    return AsyncInMemoryBackend()


@pytest.fixture()
def made(
    monkeypatch: pytest.MonkeyPatch, backend: AsyncInMemoryBackend
) -> list[tuple[str, str | None, str]]:
    """Patch the store factory; records the (url, prefix, codec) it was called with."""
    calls: list[tuple[str, str | None, str]] = []

    def _fake_make_store(url: str, prefix: str | None, codec: str = "json") -> SessionStore:
        calls.append((url, prefix, codec))
        store = SessionStore(backend, codec=get_codec(codec))
        return store.with_prefix(prefix) if prefix else store

    monkeypatch.setattr(cli_main, "_make_store", _fake_make_store)
    return calls


def _seed(
    backend: AsyncInMemoryBackend,
    prefix: str | None = None,
    codec: SessionCodec | None = None,
    **data: object,
) -> str:
    store = SessionStore(backend, codec=codec)
    if prefix:
        store = store.with_prefix(prefix)
    session = Session()
    for key, value in data.items():
        session.insert(key, value)
    cookie = asyncio.run(store.store_session(session))
    assert cookie is not None
    return cookie


# ---------------------------------------------------------------------------
# _make_store factory
# ---------------------------------------------------------------------------


class TestMakeStore:
    def test_builds_redis_store(self) -> None:
        store = _make_store("redis://localhost:6379/0", None)
        assert isinstance(store.backend, AsyncRedisBackend)
        assert store.namespace.is_default

    def test_applies_prefix(self) -> None:
        store = _make_store("redis://localhost:6379/0", "app:")
        assert store.config.prefix == "app:"

    def test_defaults_to_json_codec(self) -> None:
        store = _make_store("redis://localhost:6379/0", None)
        assert isinstance(store.codec, JsonCodec)

    def test_selects_codec_by_name(self) -> None:
        store = _make_store("redis://localhost:6379/0", None, "yaml")
        assert isinstance(store.codec, YamlCodec)

    def test_bad_url_raises(self) -> None:
        with pytest.raises(BackendError):
            _make_store("nope://", None)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestVersion:
    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "async-session-store" in result.output


class TestCount:
    def test_count(self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list) -> None:
        _seed(backend)
        _seed(backend)
        result = runner.invoke(cli, ["count"])
        assert result.exit_code == 0
        assert result.output.strip() == "2"

    def test_count_with_prefix(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        _seed(backend, prefix="a:")
        _seed(backend, prefix="b:")
        result = runner.invoke(cli, ["--prefix", "a:", "count"])
        assert result.exit_code == 0
        assert result.output.strip() == "1"
        assert made == [("redis://127.0.0.1:6379/0", "a:", "json")]

    def test_url_and_prefix_from_env(self, runner: CliRunner, made: list) -> None:
        result = runner.invoke(
            cli,
            ["count"],
            env={"ASYNC_SESSION_STORE_URL": "redis://cache:6380/2", "ASYNC_SESSION_STORE_PREFIX": "env:"},
        )
        assert result.exit_code == 0
        assert made == [("redis://cache:6380/2", "env:", "json")]

    def test_codec_from_env(self, runner: CliRunner, made: list) -> None:
        result = runner.invoke(cli, ["count"], env={"ASYNC_SESSION_STORE_CODEC": "yaml"})
        assert result.exit_code == 0
        assert made[0][2] == "yaml"

    def test_unknown_codec_rejected(self, runner: CliRunner, made: list) -> None:
        result = runner.invoke(cli, ["--codec", "msgpack", "count"])
        assert result.exit_code == 2
        assert made == []


class TestShow:
    def test_show_table(self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list) -> None:
        cookie = _seed(backend, user="alice")
        result = runner.invoke(cli, ["show", cookie])
        assert result.exit_code == 0
        assert "user" in result.output
        assert "alice" in result.output
        assert "expires: never" in result.output

    def test_show_json(self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list) -> None:
        cookie = _seed(backend, user="alice")
        result = runner.invoke(cli, ["show", cookie, "--json-output"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"] == {"user": "alice"}

    def test_show_yaml_session(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        cookie = _seed(backend, codec=YamlCodec(), user="alice")
        result = runner.invoke(cli, ["--codec", "yaml", "show", cookie, "--json-output"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"] == {"user": "alice"}
        assert made[0][2] == "yaml"

    def test_show_yaml_session_with_json_codec_fails(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        cookie = _seed(backend, codec=YamlCodec(), user="alice")
        result = runner.invoke(cli, ["show", cookie])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_show_missing(self, runner: CliRunner, made: list) -> None:
        result = runner.invoke(cli, ["show", generate_cookie_value()])
        assert result.exit_code == 1
        assert "No session found" in result.output

    def test_show_corrupt_record_reports_error(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        cookie = generate_cookie_value()
        asyncio.run(backend.set(id_from_cookie_value(cookie), "{broken"))
        result = runner.invoke(cli, ["show", cookie])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestDestroy:
    def test_destroy(self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list) -> None:
        cookie = _seed(backend)
        result = runner.invoke(cli, ["destroy", cookie])
        assert result.exit_code == 0
        assert "destroyed" in result.output
        assert len(backend) == 0

    def test_destroy_missing(self, runner: CliRunner, made: list) -> None:
        result = runner.invoke(cli, ["destroy", generate_cookie_value()])
        assert result.exit_code == 1

    def test_destroy_corrupt_record(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        cookie = generate_cookie_value()
        asyncio.run(backend.set(id_from_cookie_value(cookie), "{broken"))
        result = runner.invoke(cli, ["destroy", cookie])
        assert result.exit_code == 0
        assert "destroyed" in result.output
        assert len(backend) == 0

    def test_destroy_uses_prefix(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        cookie = _seed(backend, prefix="a:")
        _seed(backend, prefix="b:")
        assert runner.invoke(cli, ["--prefix", "b:", "destroy", cookie]).exit_code == 1
        result = runner.invoke(cli, ["--prefix", "a:", "destroy", cookie])
        assert result.exit_code == 0
        assert len(backend) == 1

    def test_destroy_invalid_cookie(self, runner: CliRunner, made: list) -> None:
        result = runner.invoke(cli, ["destroy", "not-a-cookie"])
        assert result.exit_code == 1
        assert "invalid cookie value" in result.output
        assert made == []


class TestClear:
    def test_clear_requires_confirmation(
        self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list
    ) -> None:
        _seed(backend)
        result = runner.invoke(cli, ["clear"], input="n\n")
        assert result.exit_code != 0
        assert "ENTIRE backend database" in result.output
        assert len(backend) == 1
        assert made == []

    def test_clear_with_yes(self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list) -> None:
        _seed(backend)
        result = runner.invoke(cli, ["clear", "--yes"])
        assert result.exit_code == 0
        assert len(backend) == 0

    def test_clear_prefixed(self, runner: CliRunner, backend: AsyncInMemoryBackend, made: list) -> None:
        _seed(backend, prefix="a:")
        _seed(backend, prefix="b:")
        result = runner.invoke(cli, ["--prefix", "a:", "clear"], input="y\n")
        assert result.exit_code == 0
        assert "prefix 'a:'" in result.output
        assert len(backend) == 1
