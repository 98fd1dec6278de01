"""Thin wrappers over the git queries the collector needs.

All staged-diff calls pass --no-renames so a path in --name-only output is
the same string that appears in --numstat and in the patch headers.
Every failure is raised as CollectionError; callers decide how to degrade.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from commitguard_core.errors import CollectionError

logger = logging.getLogger(__name__)

_GIT_TIMEOUT = 30
_DIFF_HEADER = "diff --git "
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+\Z")


def _run_git(args: list[str], cwd: str | Path | None = None) -> str:
    logger.debug("Running git %s", " ".join(args[:3]))
    try:
        result = subprocess.run(
            ["git", "-c", "core.quotepath=off", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=_GIT_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        raise CollectionError(f"git {args[0]} failed: {e}") from e
    if result.returncode != 0:
        raise CollectionError(f"git {' '.join(args[:2])} exited {result.returncode}: {result.stderr.strip()}")
    return result.stdout


def list_staged_paths(cwd: str | Path | None = None) -> list[str]:
    """Return staged paths in the order git reports them."""
    output = _run_git(["diff", "--cached", "--name-only", "--no-renames", "-z"], cwd)
    return [p for p in output.split("\0") if p]


def staged_numstat(paths: list[str], cwd: str | Path | None = None) -> dict[str, tuple[int | None, int | None]]:
    """Map each path to (added, removed) line counts; (None, None) means binary."""
    if not paths:
        return {}
    output = _run_git(["diff", "--cached", "--numstat", "--no-renames", "-z", "--", *paths], cwd)
    stats: dict[str, tuple[int | None, int | None]] = {}
    for record in output.split("\0"):
        parts = record.split("\t", 2)
        if len(parts) != 3:
            continue
        added, removed, path = parts
        stats[path] = (
            int(added) if added.isdigit() else None,
            int(removed) if removed.isdigit() else None,
        )
    return stats


def staged_diff(paths: list[str], cwd: str | Path | None = None) -> str:
    """One unified diff covering every path in ``paths``."""
    if not paths:
        return ""
    return _run_git(["diff", "--cached", "--no-renames", "--no-color", "--no-ext-diff", "--", *paths], cwd)


def staged_file_diff(path: str, cwd: str | Path | None = None) -> str:
    return _run_git(["diff", "--cached", "--no-renames", "--no-color", "--no-ext-diff", "--", path], cwd)


def _header_path(header: str) -> str | None:
    """Extract P from 'diff --git a/P b/P'.

    Without renames both sides name the same path, so the split point is
    the middle of the string; this keeps paths containing spaces intact.
    Quoted headers (paths with control characters) return None.
    """
    rest = header[len(_DIFF_HEADER) :]
    if rest.startswith('"') or not rest.startswith("a/"):
        return None
    length = (len(rest) - len("a/ b/")) // 2
    path = rest[2 : 2 + length]
    if rest[2 + length :] != f" b/{path}":
        return None
    return path


def split_diff(diff_text: str) -> dict[str, str]:
    """Split a multi-file unified diff into per-path segments.

    Each segment keeps its own 'diff --git' header line, exactly as the
    single-file diff for that path would print it.
    """
    segments: dict[str, str] = {}
    current_path: str | None = None
    current_lines: list[str] = []

    def _flush():
        if current_path is not None:
            segments[current_path] = "".join(current_lines)

    for match in _LINE_RE.finditer(diff_text):
        line = match.group(0)
        if line.startswith(_DIFF_HEADER):
            _flush()
            current_path = _header_path(line.rstrip("\n"))
            current_lines = [line]
        elif current_path is not None:
            current_lines.append(line)
    _flush()
    return segments


def git_dir(cwd: str | Path | None = None) -> Path:
    output = _run_git(["rev-parse", "--git-dir"], cwd).strip()
    path = Path(output)
    if not path.is_absolute() and cwd is not None:
        path = Path(cwd) / path
    return path
