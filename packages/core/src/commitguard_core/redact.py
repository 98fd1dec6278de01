"""Scrub secret-shaped substrings from diff text before it leaves the machine.

Substitutions run in a fixed order and each secret class has its own
placeholder. Placeholders contain brackets and underscores, which none of the
patterns accept as secret material, so redact(redact(x)) == redact(x).
Anything a pattern does not match is returned byte for byte.
"""

from __future__ import annotations

import re

from commitguard_core.ignore import SENSITIVE_KEYWORDS

API_KEY_PLACEHOLDER = "[API_KEY_HIDDEN]"
SECRET_PLACEHOLDER = "[SECRET_HIDDEN]"
PASSWORD_PLACEHOLDER = "[PASSWORD_HIDDEN]"
TOKEN_PLACEHOLDER = "[TOKEN_HIDDEN]"

_PLACEHOLDER_RE = re.compile(r"\[[A-Z_]+_HIDDEN\]")

# Quoted OpenAI/Anthropic-style keys: "sk-...", 'sk-ant-...'
_QUOTED_SK_RE = re.compile(r"""(['"`])sk-[A-Za-z0-9_\-]{16,}(?=['"`])""")

# Prefixed tokens that are recognisable without quotes or context.
_PREFIXED_TOKEN_RE = re.compile(
    r"""
    \b(?:
        gh[pousr]_[A-Za-z0-9]{36,}        # GitHub
      | AKIA[0-9A-Z]{16}                  # AWS access key id
      | xox[abprs]-[A-Za-z0-9\-]{10,}     # Slack
    )\b
    """,
    re.VERBOSE,
)

_LONG_QUOTED_RE = re.compile(r"""(['"`])([A-Za-z0-9]{32,})(?=['"`])""")

_ASSIGNMENT_RE = re.compile(
    r"""
    (?P<name>[\w.\-]*?(?P<kind>password|token|secret|key)[\w\-]*)
    (?P<sep>['"`]?\s*[:=]\s*)
    (?P<q>['"`])
    (?!\[[A-Z_]+_HIDDEN\](?P=q))
    (?P<value>[^'"`\n]+)
    (?P=q)
    """,
    re.IGNORECASE | re.VERBOSE,
)

_KIND_PLACEHOLDER = {
    "password": PASSWORD_PLACEHOLDER,
    "token": TOKEN_PLACEHOLDER,
    "secret": SECRET_PLACEHOLDER,
    "key": SECRET_PLACEHOLDER,
}


def _keyword_adjacent(match: re.Match) -> bool:
    text = match.string
    line_start = text.rfind("\n", 0, match.start()) + 1
    context = _PLACEHOLDER_RE.sub("", text[line_start : match.start()]).lower()
    token = match.group(2).lower()
    return any(keyword in context or keyword in token for keyword in SENSITIVE_KEYWORDS)


def _hide_long_string(match: re.Match) -> str:
    if _keyword_adjacent(match):
        return f"{match.group(1)}{SECRET_PLACEHOLDER}"
    return match.group(0)


def _hide_assignment(match: re.Match) -> str:
    placeholder = _KIND_PLACEHOLDER[match.group("kind").lower()]
    q = match.group("q")
    return f"{match.group('name')}{match.group('sep')}{q}{placeholder}{q}"


def redact(text: str) -> str:
    text = _QUOTED_SK_RE.sub(rf"\1{API_KEY_PLACEHOLDER}", text)
    text = _PREFIXED_TOKEN_RE.sub(API_KEY_PLACEHOLDER, text)
    text = _LONG_QUOTED_RE.sub(_hide_long_string, text)
    return _ASSIGNMENT_RE.sub(_hide_assignment, text)
