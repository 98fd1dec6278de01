"""Core commit review orchestration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from commitguard_core.collector import StagedFile, collect_staged_changes
from commitguard_core.config import GuardConfig, load_rules
from commitguard_core.decision import ReviewOutcome, build_prompt, classify_error, parse_verdict
from commitguard_core.errors import CommitGuardError
from commitguard_core.ignore import IgnoreMatcher, load_ignore_patterns
from commitguard_core.providers.registry import get_backend
from commitguard_core.redact import redact
from commitguard_core.transport import request_review
from commitguard_core.utils.fingerprint import fingerprint

console = Console(stderr=True)
logger = logging.getLogger(__name__)


@dataclass
class ReviewSummary:
    """Result returned by run_review, with enough data for the CLI to report and record the outcome.

    Decoupled from commitguard_store so commitguard_core has no dependency on the store layer.
    """

    outcome: ReviewOutcome
    backend: str
    model: str
    message: str = ""
    reviewed_files: list[str] = field(default_factory=list)
    ignored_count: int = 0
    failed_files: list[str] = field(default_factory=list)
    cache_key: str | None = None
    cached: bool = False
    recognized: bool = True
    error: str | None = None

    @property
    def nothing_to_review(self) -> bool:
        """True when no staged file survived filtering, so no review took place."""
        return self.outcome is ReviewOutcome.APPROVED and self.cache_key is None


def build_matcher(config: GuardConfig) -> IgnoreMatcher:
    return IgnoreMatcher(extra_patterns=[*load_ignore_patterns(config.ignore_path), *config.exclude])


def build_changes(files: list[StagedFile]) -> str:
    """Concatenate redacted per-file diffs in collection order."""
    return "\n\n".join(f"--- {f.path} ---\n{redact(f.diff_text)}" for f in files)


def _dispatch(config: GuardConfig, changes: str, transport=None) -> str:
    backend = get_backend(config.backend, config.local_endpoint)
    prompt = build_prompt(changes, load_rules(config))
    console.print(
        f"[magenta]Sending to {backend.NAME.upper()} for review "
        f"(timeout: {config.timeout_ms / 1000:g}s)...[/magenta]"
    )
    return asyncio.run(
        request_review(backend, prompt, config.model, config.credential, config.timeout_ms, transport=transport)
    )


def run_review(
    config: GuardConfig,
    cache=None,
    cwd: str | Path | None = None,
    transport=None,
) -> ReviewSummary:
    """Run the full staged-change review and return a ReviewSummary.

    Never raises for expected failures: a timeout becomes TIMED_OUT, every
    other CommitGuardError becomes ERRORED, and only a verdict the backend
    itself starts with REJECT yields REJECTED. ``cache`` is any object with
    ``get(key)`` and ``put(key, verdict, backend, model)``; None disables caching.
    """
    summary = ReviewSummary(outcome=ReviewOutcome.APPROVED, backend=config.backend, model=config.model)

    console.print("[blue]Checking staged files...[/blue]")
    result = collect_staged_changes(build_matcher(config), config.max_file_size, cwd)
    summary.reviewed_files = result.reviewed_paths
    summary.ignored_count = result.ignored_count
    summary.failed_files = list(result.failed)
    for skipped in result.ignored:
        logger.debug("Skipped %s (%s)", skipped.path, "binary" if skipped.is_binary else "excluded")

    if result.ignored_count:
        console.print(f"[blue]Ignored {result.ignored_count} binary/sensitive/excluded file(s)[/blue]")
    if not result.files:
        # Nothing left to send: approve without contacting any backend.
        summary.message = "No relevant files to review"
        return summary

    console.print(f"[blue]Reviewing {len(result.files)} file(s) using {config.backend.upper()}...[/blue]")
    changes = build_changes(result.files)
    key = fingerprint(changes, config.backend, config.model)
    summary.cache_key = key

    entry = cache.get(key) if cache is not None else None
    if entry is not None:
        console.print("[blue]Using cached result[/blue]")
        response = entry.verdict
        summary.cached = True
    else:
        try:
            response = _dispatch(config, changes, transport)
        except CommitGuardError as e:
            summary.outcome = classify_error(e)
            summary.error = str(e)
            logger.warning("Review failed (%s): %s", type(e).__name__, e)
            return summary
        if cache is not None:
            cache.put(key, response, config.backend, config.model)

    verdict = parse_verdict(response)
    summary.outcome = verdict.outcome
    summary.message = verdict.message
    summary.recognized = verdict.recognized
    return summary
