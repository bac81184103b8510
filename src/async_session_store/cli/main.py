"""CLI entry point for async-session-store.

Invoked as::

    async-session-store [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m async_session_store.cli.main

Commands
--------
- version  — Show version information
- count    — Count the sessions in a store's namespace
- show     — Load and display the session behind a cookie value
- destroy  — Delete the stored record behind a cookie value (without decoding it)
- clear    — Remove every session in the namespace
"""
from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click
from rich.console import Console
from rich.table import Table

from async_session_store.errors import BackendError, InvalidCookieError, SerializationError
from async_session_store.session.cookie import id_from_cookie_value
from async_session_store.session.serializer import get_codec
from async_session_store.store.session_store import SessionStore

console = Console()

_T = TypeVar("_T")

DEFAULT_URL = "redis://127.0.0.1:6379/0"


# ---------------------------------------------------------------------------
# Store factory
# ---------------------------------------------------------------------------


def _make_store(url: str, prefix: str | None, codec: str = "json") -> SessionStore:
    """Build the Redis-backed store addressed by the CLI options."""
    store = SessionStore.from_url(url, codec=get_codec(codec))
    if prefix:
        store = store.with_prefix(prefix)
    return store


def _run(store: SessionStore, operation: Callable[[SessionStore], Awaitable[_T]]) -> _T:
    """Run ``operation`` against ``store`` and close the store afterwards."""

    async def _main() -> _T:
        async with store:
            return await operation(store)

    try:
        return asyncio.run(_main())
    except (BackendError, SerializationError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--url",
    default=DEFAULT_URL,
    show_default=True,
    envvar="ASYNC_SESSION_STORE_URL",
    help="Redis connection URL.",
)
@click.option(
    "--prefix",
    default=None,
    envvar="ASYNC_SESSION_STORE_PREFIX",
    help="Key prefix of the store's namespace.",
)
@click.option(
    "--codec",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
    envvar="ASYNC_SESSION_STORE_CODEC",
    help="Encoding the stored sessions were written with.",
)
@click.version_option(package_name="async-session-store")
@click.pass_context
def cli(ctx: click.Context, url: str, prefix: str | None, codec: str) -> None:
    """Inspect and maintain cookie-addressed session stores."""
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["prefix"] = prefix
    ctx.obj["codec"] = codec


def _store_from(ctx: click.Context) -> SessionStore:
    try:
        return _make_store(ctx.obj["url"], ctx.obj["prefix"], ctx.obj["codec"])
    except BackendError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from async_session_store import __version__

    console.print(f"[bold]async-session-store[/bold] v{__version__}")


@cli.command(name="count")
@click.pass_context
def count_command(ctx: click.Context) -> None:
    """Print the number of keys in the store's namespace."""
    store = _store_from(ctx)
    total = _run(store, lambda s: s.count())
    console.print(str(total))


@cli.command(name="show")
@click.argument("cookie_value")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of a table.")
@click.pass_context
def show_command(ctx: click.Context, cookie_value: str, json_output: bool) -> None:
    """Load and display the session addressed by COOKIE_VALUE."""
    store = _store_from(ctx)
    session = _run(store, lambda s: s.load_session(cookie_value))
    if session is None:
        console.print("[yellow]No session found.[/yellow]")
        sys.exit(1)

    if json_output:
        console.print_json(session.model_dump_json())
        return

    table = Table(title=f"Session {session.id[:12]}...", show_lines=True)
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")
    for key, value in sorted(session.data.items()):
        table.add_row(key, json.dumps(value))
    console.print(table)
    expiry = session.expiry.isoformat() if session.expiry else "never"
    console.print(f"[dim]expires: {expiry}[/dim]")


@cli.command(name="destroy")
@click.argument("cookie_value")
@click.pass_context
def destroy_command(ctx: click.Context, cookie_value: str) -> None:
    """Delete the session addressed by COOKIE_VALUE.

    The stored record is removed without being decoded, so corrupt or
    foreign-codec records can be destroyed too.
    """
    try:
        session_id = id_from_cookie_value(cookie_value)
    except InvalidCookieError as exc:
        console.print(f"[red]Error:[/red] invalid cookie value ({exc.reason})")
        sys.exit(1)
    store = _store_from(ctx)

    async def _destroy(s: SessionStore) -> bool:
        key = s.namespace.prefixed(session_id)
        if await s.backend.get(key) is None:
            return False
        await s.backend.delete(key)
        return True

    if not _run(store, _destroy):
        console.print("[yellow]No session found.[/yellow]")
        sys.exit(1)
    console.print("[green]Session destroyed.[/green]")


@cli.command(name="clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clear_command(ctx: click.Context, yes: bool) -> None:
    """Remove every session in the namespace.

    Without --prefix this flushes the whole Redis database.
    """
    prefix = ctx.obj["prefix"]
    if prefix:
        target = f"all keys under prefix {prefix!r}"
    else:
        target = "the ENTIRE backend database"
    if not yes:
        click.confirm(f"Remove {target}?", abort=True)
    store = _store_from(ctx)
    _run(store, lambda s: s.clear_store())
    console.print(f"[green]Cleared {target}.[/green]")


if __name__ == "__main__":
    cli()
