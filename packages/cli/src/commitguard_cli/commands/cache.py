"""cache commands: inspect and maintain cached verdicts."""

from __future__ import annotations

from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from commitguard_core.config import load_config
from commitguard_core.decision import parse_verdict
from commitguard_core.errors import ConfigurationError

console = Console()

_outcome_style = {
    "approved": "green",
    "rejected": "red",
}


def _open_store(ctx):
    from commitguard_cli.cli import build_cache
    from commitguard_store.noop import NoOpCacheStore

    config_path = ctx.obj.get("config_path", ".commitguard.yml") if ctx.obj else ".commitguard.yml"
    try:
        # No backend call happens here, so skip probing for a local backend.
        config = load_config(config_path, probe=lambda _endpoint: False)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    store = build_cache(config)
    if isinstance(store, NoOpCacheStore):
        raise click.UsageError("Caching is disabled. Set 'cache: file' or 'cache: sqlite' in .commitguard.yml.")
    return store


@click.group("cache")
def cache_cmd():
    """Inspect and maintain the verdict cache."""


@cache_cmd.command("list")
@click.option("--limit", default=20, show_default=True, help="Maximum number of entries to show.")
@click.pass_context
def list_cmd(ctx, limit: int):
    """Show cached verdicts, most recent first."""
    store = _open_store(ctx)
    try:
        entries = store.list_entries()
    finally:
        store.close()

    if not entries:
        console.print("[yellow]No cached verdicts.[/yellow]")
        return

    entries = list(reversed(entries))[:limit]

    table = Table(title="Cached Verdicts", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold", width=16)
    table.add_column("Backend", width=10)
    table.add_column("Model", max_width=28)
    table.add_column("Outcome", width=10)
    table.add_column("Cached At", width=19)
    table.add_column("Verdict", max_width=48)

    for e in entries:
        outcome = parse_verdict(e.verdict).outcome.value
        style = _outcome_style.get(outcome, "white")
        if e.is_expired():
            style = "dim"
            outcome = f"{outcome} (expired)"
        first_line = e.verdict.strip().split("\n", 1)[0]
        table.add_row(
            e.key,
            e.backend,
            escape(e.model),
            f"[{style}]{outcome}[/{style}]",
            datetime.fromtimestamp(e.created_at).strftime("%Y-%m-%d %H:%M:%S"),
            escape(first_line[:48]),
        )

    console.print(table)


@cache_cmd.command("clear")
@click.pass_context
def clear_cmd(ctx):
    """Delete every cached verdict."""
    store = _open_store(ctx)
    try:
        removed = store.clear()
    finally:
        store.close()
    console.print(f"[green]Removed {removed} cached verdict(s).[/green]")


@cache_cmd.command("prune")
@click.pass_context
def prune_cmd(ctx):
    """Delete cached verdicts older than the retention period."""
    store = _open_store(ctx)
    try:
        removed = store.prune()
    finally:
        store.close()
    console.print(f"[green]Pruned {removed} expired verdict(s).[/green]")
