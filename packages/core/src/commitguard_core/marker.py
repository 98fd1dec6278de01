"""Hand-off between the pre-commit review and the commit-msg step.

The review writes the outcome to a marker file; the commit-msg step reads
it, tags the commit message, and deletes the marker so a later commit never
inherits a stale result.
"""

from __future__ import annotations

import logging
from pathlib import Path

from commitguard_core.decision import ReviewOutcome
from commitguard_core.errors import CollectionError
from commitguard_core.git import git_dir

logger = logging.getLogger(__name__)

MARKER_NAME = "commitguard-result"


def default_marker_path(cwd: str | Path | None = None) -> Path:
    """The marker lives inside .git so it never shows up as an untracked file."""
    try:
        return git_dir(cwd) / MARKER_NAME
    except CollectionError:
        return Path(cwd or ".") / f".{MARKER_NAME}"


def write_marker(path: str | Path, outcome: ReviewOutcome) -> None:
    try:
        Path(path).write_text(outcome.value, encoding="utf-8")
    except OSError as e:
        logger.warning("Could not record review outcome in %s: %s", path, e)


def consume_marker(path: str | Path) -> ReviewOutcome | None:
    """Return the recorded outcome and delete the marker."""
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Could not read review outcome from %s: %s", p, e)
        raw = None

    try:
        p.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not clear review outcome marker %s: %s", p, e)

    if raw is None:
        return None
    try:
        return ReviewOutcome(raw)
    except ValueError:
        logger.warning("Ignoring unrecognised review outcome %r in %s", raw, p)
        return None


def annotate_message(message_file: str | Path, outcome: ReviewOutcome) -> bool:
    """Append the outcome's flag to the subject line of a commit message file.

    Returns True if the file was changed. Comment lines (starting with '#')
    are never treated as the subject, and a flag already present is not
    added twice.
    """
    flag = outcome.commit_flag
    if flag is None:
        return False

    path = Path(message_file)
    lines = path.read_text(encoding="utf-8").split("\n")
    tag = f"[{flag}]"
    if any(tag in line for line in lines):
        return False

    for i, line in enumerate(lines):
        if line.strip() and not line.startswith("#"):
            lines[i] = f"{line.rstrip()} {tag}"
            break
    else:
        return False

    path.write_text("\n".join(lines), encoding="utf-8")
    return True
