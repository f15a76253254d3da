"""CLI entry point for redis-session-manager.

Invoked as::

    redis-session-manager [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m redis_session_manager.cli.main

Commands
--------
- version      — Show detailed version information
- sessions     — Session administration command group

Sessions sub-commands
---------------------
- sessions list        — List stored sessions with TTL and creation time
- sessions show        — Show one session's metadata and attributes
- sessions invalidate  — Delete a session
"""
from __future__ import annotations

import json
import sys
from datetime import datetime, timezone

import click
from rich.console import Console
from rich.table import Table

from redis_session_manager.errors import StoreError
from redis_session_manager.session.manager import SessionManager
from redis_session_manager.session.record import metadata_key
from redis_session_manager.storage.base import StoreClient

console = Console()

# ---------------------------------------------------------------------------
# Store factory
# ---------------------------------------------------------------------------


def _make_store(storage: str, url: str, key_prefix: str) -> StoreClient:
    """Instantiate the requested store client.

    Parameters
    ----------
    storage:
        Client name: ``"redis"`` or ``"memory"``.
    url:
        Redis connection URL (used when ``storage="redis"``).
    key_prefix:
        Namespace prepended to session keys (used when ``storage="redis"``).

    Returns
    -------
    StoreClient
        A configured store client.
    """
    from redis_session_manager.storage.memory import InMemoryStoreClient
    from redis_session_manager.storage.redis import RedisStoreClient

    if storage == "memory":
        return InMemoryStoreClient()
    if storage == "redis":
        return RedisStoreClient(url, key_prefix=key_prefix)
    console.print(f"[red]Unknown storage: {storage!r}[/red]")
    sys.exit(1)


def _format_millis(value: int | None) -> str:
    if value is None:
        return "-"
    moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def _format_ttl(seconds: int | None) -> str:
    return "never" if seconds is None else f"{seconds}s"


def _creation_millis(store: StoreClient, session_id: str) -> int | None:
    raw = store.get(metadata_key(session_id))
    return int(raw) if raw is not None else None


def _session_ttl(store: StoreClient, session_id: str) -> int | None:
    """TTL of the attribute record, or of the creation record when there is none."""
    if store.exists(session_id):
        return store.ttl(session_id)
    return store.ttl(metadata_key(session_id))


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="redis-session-manager")
def cli() -> None:
    """Redis-backed HTTP session store administration"""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from redis_session_manager import __version__

    console.print(f"[bold]redis-session-manager[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# sessions command group
# ---------------------------------------------------------------------------


@cli.group(name="sessions")
@click.option(
    "--storage",
    default="redis",
    show_default=True,
    type=click.Choice(["redis", "memory"], case_sensitive=False),
    help="Store to use.",
)
@click.option(
    "--url",
    default="redis://localhost:6379/0",
    show_default=True,
    envvar="REDIS_SESSION_URL",
    help="Redis connection URL.",
)
@click.option(
    "--key-prefix",
    default="",
    envvar="REDIS_SESSION_KEY_PREFIX",
    help="Namespace prepended to session keys.",
)
@click.pass_context
def sessions_group(
    ctx: click.Context,
    storage: str,
    url: str,
    key_prefix: str,
) -> None:
    """Session administration commands."""
    ctx.ensure_object(dict)
    store = _make_store(storage.lower(), url, key_prefix)
    ctx.obj["manager"] = SessionManager(store)


# ---------------------------------------------------------------------------
# sessions list
# ---------------------------------------------------------------------------


@sessions_group.command(name="list")
@click.option("--limit", default=50, show_default=True, help="Maximum sessions to show.")
@click.pass_context
def sessions_list(ctx: click.Context, limit: int) -> None:
    """List all sessions in the store.

    This scans every key in the store; avoid running it against a busy
    production instance.
    """
    manager: SessionManager = ctx.obj["manager"]
    store = manager.store

    try:
        session_ids = sorted(manager.all_sessions())
    except StoreError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        sys.exit(1)

    if not session_ids:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    shown = session_ids[:limit]
    table = Table(title="Sessions", show_lines=False)
    table.add_column("Session ID", style="cyan")
    table.add_column("TTL", justify="right")
    table.add_column("Attributes", justify="right")
    table.add_column("Created")

    for session_id in shown:
        table.add_row(
            session_id,
            _format_ttl(_session_ttl(store, session_id)),
            str(len(store.hkeys(session_id))),
            _format_millis(_creation_millis(store, session_id)),
        )

    console.print(table)
    console.print(f"\n[dim]Showing {len(shown)} of {len(session_ids)} sessions.[/dim]")


# ---------------------------------------------------------------------------
# sessions show
# ---------------------------------------------------------------------------


@sessions_group.command(name="show")
@click.argument("session_id")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of formatted view.")
@click.pass_context
def sessions_show(ctx: click.Context, session_id: str, json_output: bool) -> None:
    """Show metadata and attributes of SESSION_ID.

    Everything is read straight from the store, so inspecting a session
    does not extend its lifetime.
    """
    manager: SessionManager = ctx.obj["manager"]
    store = manager.store

    if not (store.exists(session_id) or store.exists(metadata_key(session_id))):
        console.print(f"[red]Session not found:[/red] {session_id}")
        sys.exit(1)

    attributes = {name: store.hget(session_id, name) for name in sorted(store.hkeys(session_id))}
    created = _creation_millis(store, session_id)
    ttl = _session_ttl(store, session_id)

    if json_output:
        payload = {
            "session_id": session_id,
            "creation_time": created,
            "ttl": ttl,
            "attributes": attributes,
        }
        console.print_json(json.dumps(payload))
        return

    table = Table(title=f"Session {session_id[:8]}", show_lines=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("session_id", session_id)
    table.add_row("created", _format_millis(created))
    table.add_row("ttl", _format_ttl(ttl))
    for name, value in attributes.items():
        table.add_row(f"attr:{name}", value or "")
    console.print(table)


# ---------------------------------------------------------------------------
# sessions invalidate
# ---------------------------------------------------------------------------


@sessions_group.command(name="invalidate")
@click.argument("session_id")
@click.pass_context
def sessions_invalidate(ctx: click.Context, session_id: str) -> None:
    """Delete SESSION_ID and its creation record."""
    manager: SessionManager = ctx.obj["manager"]

    if not manager.invalidate_by_id(session_id):
        console.print(f"[red]Session not found:[/red] {session_id}")
        sys.exit(1)
    console.print(f"[green]Session invalidated:[/green] {session_id}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
