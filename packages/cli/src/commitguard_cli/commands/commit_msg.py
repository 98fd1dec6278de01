"""commit-msg command: tag the commit message with the last review outcome."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from commitguard_core.marker import annotate_message, consume_marker, default_marker_path

console = Console(stderr=True)
logger = logging.getLogger(__name__)


@click.command("commit-msg")
@click.argument("message_file", type=click.Path(dir_okay=False))
def commit_msg_cmd(message_file: str):
    """Append the review flag recorded by `commitguard review` to MESSAGE_FILE.

    Meant to run from the commit-msg hook with git's message file as its only
    argument. Never fails the commit.
    """
    outcome = consume_marker(default_marker_path())
    if outcome is None:
        logger.debug("No review outcome recorded; leaving %s untouched", message_file)
        return

    try:
        changed = annotate_message(message_file, outcome)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not annotate %s: %s", message_file, e)
        return

    if changed:
        console.print(f"[blue]Added \\[{outcome.commit_flag}] to commit message[/blue]")
