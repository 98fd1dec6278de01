"""Prompt construction, verdict parsing and outcome classification."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from commitguard_core.errors import ReviewTimeoutError

logger = logging.getLogger(__name__)


class ReviewOutcome(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"

    @property
    def blocks_commit(self) -> bool:
        return self is ReviewOutcome.REJECTED

    @property
    def exit_code(self) -> int:
        return 1 if self.blocks_commit else 0

    @property
    def commit_flag(self) -> str | None:
        """Tag appended to the commit message; None for a blocked commit."""
        return _COMMIT_FLAGS.get(self)


_COMMIT_FLAGS = {
    ReviewOutcome.APPROVED: "AI-REVIEW-PASSED",
    ReviewOutcome.TIMED_OUT: "AI-REVIEW-FAILED-TIMEOUT",
    ReviewOutcome.ERRORED: "AI-REVIEW-SKIPPED-ERROR",
}

_VERDICT_TOKEN_RE = re.compile(r"^(reject|approve)(?:ed)?[ \t]*:?", re.IGNORECASE)


@dataclass(frozen=True)
class Verdict:
    outcome: ReviewOutcome
    message: str
    recognized: bool = True

    @property
    def approved(self) -> bool:
        return self.outcome is ReviewOutcome.APPROVED


def build_prompt(changes: str, rules: str) -> str:
    """Compose the review request sent to every backend.

    ``rules`` is embedded verbatim; ``changes`` is the redacted, concatenated
    per-file diff text in git order.
    """
    return f"""You are an expert code reviewer. Please review the following code changes against the established rules and best practices.

## Review Guidelines:
{rules}

## Code Changes to Review:
{changes}

## Instructions:
- Review ALL changes regardless of programming language, markup, configuration or documentation format
- Look for code quality issues, potential bugs, security concerns, and adherence to best practices
- Consider the context and purpose of the changes
- Be constructive and specific in your feedback

## Response Format:
If there are issues that should prevent the commit:
- Start response with "REJECT"
- List specific problems with file names and locations when possible
- Provide a clear, actionable fix for each issue
- Prioritize critical issues (security, bugs) over style issues

If the code meets standards:
- Start response with "APPROVE"
- Optionally suggest minor improvements
- Keep suggestions brief and constructive

Focus on functionality, security, and maintainability over minor style preferences."""  # noqa: E501


def parse_verdict(response_text: str) -> Verdict:
    """Turn the backend's free-text answer into a Verdict.

    Rejected iff the trimmed response starts with "reject" (any case).
    Everything else is Approved, including answers with no verdict token at
    all; those are flagged ``recognized=False`` and logged.
    """
    text = response_text.strip()
    match = _VERDICT_TOKEN_RE.match(text)
    message = text[match.end() :].strip() if match else text

    if text.lower().startswith("reject"):
        return Verdict(ReviewOutcome.REJECTED, message)
    if match:
        return Verdict(ReviewOutcome.APPROVED, message)

    logger.warning("Response has no APPROVE/REJECT token; treating it as approved: %r", text[:80])
    return Verdict(ReviewOutcome.APPROVED, message, recognized=False)


def classify_error(error: BaseException) -> ReviewOutcome:
    if isinstance(error, ReviewTimeoutError):
        return ReviewOutcome.TIMED_OUT
    return ReviewOutcome.ERRORED
