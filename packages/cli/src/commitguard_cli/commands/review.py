"""review command: gate a commit on an AI review of the staged changes."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape

from commitguard_core.config import load_config
from commitguard_core.decision import ReviewOutcome
from commitguard_core.errors import ConfigurationError
from commitguard_core.marker import default_marker_path, write_marker
from commitguard_core.reviewer import ReviewSummary, run_review

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _format_line(line: str) -> str:
    stripped = escape(line.strip())
    line = escape(line)
    if not stripped:
        return ""
    if stripped.startswith(("•", "-", "*")):
        return f"  [yellow]{stripped}[/yellow]"
    if "Fix:" in line or "Solution:" in line:
        return f"  [green]{line}[/green]"
    if "Issue:" in line or "Problem:" in line:
        return f"  [red]{line}[/red]"
    return f"  {line}"


def print_response(message: str) -> None:
    for line in message.split("\n"):
        console.print(_format_line(line), markup=True, highlight=False)


def report(summary: ReviewSummary) -> None:
    """Render the outcome for the operator."""
    if summary.outcome is ReviewOutcome.REJECTED:
        console.print("[bold red]Code review failed![/bold red]")
        if summary.message:
            print_response(summary.message)
        return

    if summary.outcome is ReviewOutcome.TIMED_OUT:
        console.print(f"[yellow]{escape(summary.error or '')}. Commit allowed.[/yellow]")
        return

    if summary.outcome is ReviewOutcome.ERRORED:
        console.print(f"[yellow]Review skipped: {escape(summary.error or '')}. Commit allowed.[/yellow]")
        return

    if summary.nothing_to_review:
        console.print(f"[green]{escape(summary.message or 'No relevant files to review')}[/green]")
        return

    console.print("[bold green]Code review passed![/bold green]")
    if summary.message:
        console.print("[blue]Suggestions:[/blue]")
        print_response(summary.message)


@click.command("review")
@click.option(
    "--backend",
    default=None,
    help="Reviewing backend (openai, claude, gemini, cohere, ollama). Overrides config and AI_PROVIDER.",
)
@click.option("--model", default=None, help="Model name. Overrides config and AI_MODEL.")
@click.option("--timeout", "timeout_ms", type=int, default=None, help="Review timeout in milliseconds.")
@click.option(
    "--rules",
    "rules_path",
    default=None,
    help="Path to a Markdown rules file. Overrides config file.",
)
@click.option("--no-cache", is_flag=True, help="Ignore cached verdicts and do not store this one.")
@click.pass_context
def review_cmd(
    ctx,
    backend: str | None,
    model: str | None,
    timeout_ms: int | None,
    rules_path: str | None,
    no_cache: bool,
):
    """Review staged changes and block the commit if the reviewer rejects them.

    Exits 1 only for a REJECT verdict. Timeouts, missing credentials and
    backend errors let the commit through; the outcome is recorded for the
    commit-msg step.

    \b
    Credentials (first match picks the backend unless one is configured):
      OPENAI_API_KEY, CLAUDE_API_KEY / ANTHROPIC_API_KEY,
      GEMINI_API_KEY / GOOGLE_API_KEY, COHERE_API_KEY, AI_API_KEY
    """
    config_path = ctx.obj.get("config_path", ".commitguard.yml") if ctx.obj else ".commitguard.yml"
    try:
        config = load_config(
            config_path,
            cli_overrides={
                "backend": backend,
                "model": model,
                "timeout_ms": timeout_ms,
                "rules": rules_path,
                "no_cache": no_cache or None,
            },
        )
    except ConfigurationError as e:
        summary = _errored(backend or "", model or "", str(e))
    except Exception as e:
        # Failures other than ConfigurationError still let the commit through.
        logger.debug("Unexpected configuration failure", exc_info=True)
        summary = _errored(backend or "", model or "", f"{type(e).__name__}: {e}")
    else:
        summary = _review_with_cache(config)

    report(summary)

    marker = default_marker_path()
    if summary.outcome.blocks_commit or summary.nothing_to_review:
        try:
            marker.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not clear stale review outcome %s: %s", marker, e)
    else:
        write_marker(marker, summary.outcome)

    ctx.exit(summary.outcome.exit_code)


def _errored(backend: str, model: str, error: str) -> ReviewSummary:
    return ReviewSummary(outcome=ReviewOutcome.ERRORED, backend=backend, model=model, error=error)


def _review_with_cache(config) -> ReviewSummary:
    from commitguard_cli.cli import build_cache

    cache = build_cache(config)
    try:
        return run_review(config, cache=cache)
    except Exception as e:
        # The commit workflow must stay available even if the pipeline itself breaks.
        logger.debug("Unexpected review failure", exc_info=True)
        return _errored(config.backend, config.model, f"{type(e).__name__}: {e}")
    finally:
        cache.close()
