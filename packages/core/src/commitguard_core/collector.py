"""Staged change collection: which files get reviewed, and with what diff text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from commitguard_core.errors import CollectionError
from commitguard_core.git import list_staged_paths, split_diff, staged_diff, staged_file_diff, staged_numstat
from commitguard_core.ignore import IgnoreMatcher
from commitguard_core.utils.code import is_binary_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedFile:
    path: str
    diff_text: str
    size_bytes: int
    is_binary: bool = False
    is_excluded: bool = False
    oversized: bool = False


@dataclass
class CollectionResult:
    files: list[StagedFile] = field(default_factory=list)
    ignored: list[StagedFile] = field(default_factory=list)
    ignored_count: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def reviewed_paths(self) -> list[str]:
        return [f.path for f in self.files]


def too_large_note(size_bytes: int) -> str:
    return f"[file too large, size={size_bytes / 1024:.1f}KB]"


def _binary_by_numstat(paths: list[str], cwd) -> set[str]:
    try:
        stats = staged_numstat(paths, cwd)
    except CollectionError as e:
        # Without numstat we cannot spot unrecognised binaries; treat everything as text.
        logger.warning("Could not check for binary files: %s", e)
        return set()
    return {path for path, (added, removed) in stats.items() if added is None and removed is None}


def _fetch_diffs(paths: list[str], cwd) -> tuple[dict[str, str], list[str]]:
    try:
        segments = split_diff(staged_diff(paths, cwd))
    except CollectionError as e:
        logger.warning("Batched diff failed, retrieving files one by one: %s", e)
        segments = {}

    diffs: dict[str, str] = {}
    failed: list[str] = []
    for path in paths:
        if path in segments:
            diffs[path] = segments[path]
            continue
        try:
            diffs[path] = staged_file_diff(path, cwd)
        except CollectionError as e:
            logger.warning("Could not get diff for %s: %s", path, e)
            failed.append(path)
    return diffs, failed


def collect_staged_changes(
    matcher: IgnoreMatcher,
    max_file_size: int,
    cwd: str | Path | None = None,
) -> CollectionResult:
    """Enumerate staged files, filter them, and load each survivor's diff.

    Filtering order: known binary extension → ignore rules → git numstat
    binary detection. A diff over ``max_file_size`` bytes is replaced by a
    size note; the file still counts as reviewed. A failed staged-path
    listing degrades to an empty result.
    """
    try:
        staged = list_staged_paths(cwd)
    except CollectionError as e:
        logger.warning("Could not get staged files: %s", e)
        return CollectionResult()

    ignored: list[StagedFile] = []
    candidates: list[str] = []
    for path in staged:
        if is_binary_path(path):
            ignored.append(StagedFile(path=path, diff_text="", size_bytes=0, is_binary=True))
        elif matcher.should_exclude(path):
            ignored.append(StagedFile(path=path, diff_text="", size_bytes=0, is_excluded=True))
        else:
            candidates.append(path)

    binaries = _binary_by_numstat(candidates, cwd)
    ignored.extend(StagedFile(path=p, diff_text="", size_bytes=0, is_binary=True) for p in candidates if p in binaries)
    candidates = [p for p in candidates if p not in binaries]

    if ignored:
        logger.info("Ignored %d binary/sensitive/excluded file(s)", len(ignored))

    diffs, failed = _fetch_diffs(candidates, cwd)

    files = []
    for path in candidates:
        if path not in diffs:
            continue
        diff = diffs[path]
        size = len(diff.encode("utf-8"))
        if size > max_file_size:
            logger.warning("%s is too large (%.1fKB), skipping detailed review", path, size / 1024)
            files.append(StagedFile(path=path, diff_text=too_large_note(size), size_bytes=size, oversized=True))
        else:
            files.append(StagedFile(path=path, diff_text=diff, size_bytes=size))

    return CollectionResult(files=files, ignored=ignored, ignored_count=len(ignored), failed=failed)
