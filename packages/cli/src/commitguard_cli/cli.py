"""CLI entry point for commitguard.

Commands:
  review      : review staged changes; exits 1 when the reviewer rejects (pre-commit hook)
  commit-msg  : tag the commit message with the last review outcome (commit-msg hook)
  cache       : list, prune or clear cached verdicts
"""

from __future__ import annotations

import importlib.metadata
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from commitguard_cli.commands.cache import cache_cmd
from commitguard_cli.commands.commit_msg import commit_msg_cmd
from commitguard_cli.commands.review import review_cmd

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=verbose)],
        force=True,
    )
    # Reduce noise from verbose libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_cache(config):
    """Instantiate the configured verdict cache from GuardConfig settings.

    Cache selection:
      cache: file   → FileCacheStore   (default, one JSON file per key in cache_dir)
      cache: sqlite → SQLiteCacheStore (cache_dir/cache.db)
      cache: none   → NoOpCacheStore   (also selected by --no-cache)

    This factory lives in cli.py so neither commitguard_core nor
    commitguard_store know about the config format.
    """
    from commitguard_store.noop import NoOpCacheStore

    if config.cache == "none":
        return NoOpCacheStore()

    if config.cache == "sqlite":
        import sqlite3

        from commitguard_store.sqlite import SQLiteCacheStore

        try:
            return SQLiteCacheStore(db_path=Path(config.cache_dir) / "cache.db")
        except (sqlite3.Error, OSError) as e:
            logger.warning("Could not open SQLite cache (%s); caching disabled for this run.", e)
            return NoOpCacheStore()

    if config.cache != "file":
        logger.warning("Unknown cache type %r; using the file cache.", config.cache)

    from commitguard_store.file import FileCacheStore

    return FileCacheStore(cache_dir=config.cache_dir)


@click.group()
@click.version_option(
    version=importlib.metadata.version("commitguard"),
    prog_name="commitguard",
)
@click.option(
    "--config",
    "config_path",
    default=".commitguard.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="COMMITGUARD_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI review gate for git commits."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(commit_msg_cmd)
main.add_command(cache_cmd)
