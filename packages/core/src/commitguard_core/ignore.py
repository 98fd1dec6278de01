"""Path exclusion rules.

A staged path is excluded when either:
  - it contains a sensitive keyword (always on, cannot be configured away), or
  - it matches one of the ignore patterns (built-in defaults + project extras).

Pattern forms:
  - literal: substring of the full path or of the basename ("vendor/", ".DS_Store")
  - glob: "*" matches any run of characters, anchored at both ends, tested
    against the full path and against the basename ("*.min.js", "dist/*")
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

SENSITIVE_KEYWORDS = ("password", "secret", "token", "key", "private", "credential")

_SECRET_FILE_PATTERNS = [
    "*.env*",
    "*.key",
    "*.pem",
    "*.p12",
    "*.pfx",
    "*.keystore",
    "*.jks",
    "*password*",
    "*secret*",
    "*token*",
    "*api-key*",
    "*private*",
    "*credential*",
]

_GENERATED_PATTERNS = [
    # Logs and temporary files
    "*.log",
    "*.tmp",
    "*.temp",
    "*.cache",
    "*.pid",
    # Lockfiles and bundles
    "package-lock.json",
    "yarn.lock",
    "composer.lock",
    "Gemfile.lock",
    "Pipfile.lock",
    "poetry.lock",
    "*.min.js",
    "*.min.css",
    "*.bundle.*",
    "*-lock.*",
    "*.lock",
]

_DIRECTORY_PATTERNS = [
    # Build outputs
    "dist/*",
    "build/*",
    "out/*",
    "target/*",
    "bin/*",
    "obj/*",
    # Dependencies
    "node_modules/*",
    "vendor/*",
    ".venv/*",
    "venv/*",
    "__pycache__/*",
    # Version control
    ".git/*",
    ".svn/*",
    ".hg/*",
    # Editors
    ".vscode/*",
    ".idea/*",
    "*.swp",
    "*.swo",
    "*~",
    # OS files
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
]

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = tuple(_SECRET_FILE_PATTERNS + _GENERATED_PATTERNS + _DIRECTORY_PATTERNS)


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    regex: re.Pattern | None = None

    def matches(self, path: str, basename: str) -> bool:
        if self.regex is not None:
            return bool(self.regex.match(path) or self.regex.match(basename))
        return self.pattern in path or self.pattern in basename


def compile_rule(pattern: str) -> IgnoreRule:
    if "*" not in pattern:
        return IgnoreRule(pattern)
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return IgnoreRule(pattern, re.compile(rf"^{body}$", re.DOTALL))


def contains_sensitive_keyword(path: str) -> bool:
    lowered = path.lower()
    return any(keyword in lowered for keyword in SENSITIVE_KEYWORDS)


class IgnoreMatcher:
    """Compiled rule set. Built once per run; read-only afterwards."""

    def __init__(self, extra_patterns: Iterable[str] = (), include_defaults: bool = True):
        patterns = list(DEFAULT_IGNORE_PATTERNS) if include_defaults else []
        patterns.extend(p for p in extra_patterns if p)
        self.rules: tuple[IgnoreRule, ...] = tuple(compile_rule(p) for p in patterns)

    def should_exclude(self, path: str) -> bool:
        basename = path.rsplit("/", 1)[-1]
        # The keyword check runs before and independently of the pattern list.
        if contains_sensitive_keyword(path):
            return True
        return any(rule.matches(path, basename) for rule in self.rules)


def load_ignore_patterns(path: str | Path) -> list[str]:
    """Read project ignore patterns from a newline-delimited file.

    Blank lines and lines starting with '#' are skipped. A missing file means
    no extra patterns; an unreadable one is logged and treated the same way.
    """
    p = Path(path)
    if not p.exists():
        return []
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", p, e)
        return []
    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns
