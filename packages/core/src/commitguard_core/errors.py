"""Exception hierarchy for the review pipeline.

Every failure the pipeline knows how to degrade from derives from
CommitGuardError, so run_review can catch one base class and turn it into a
non-blocking outcome. Only a Rejected verdict blocks a commit; none of these
ever do.
"""

from __future__ import annotations


class CommitGuardError(Exception):
    """Base class for all expected pipeline failures."""


class ConfigurationError(CommitGuardError):
    """Unknown backend name, or no credential for a backend that needs one."""


class CollectionError(CommitGuardError):
    """A git query failed."""


class NetworkError(CommitGuardError):
    """The request never produced an HTTP response."""


class ProviderError(CommitGuardError):
    """The backend answered with a non-2xx status or a JSON error envelope."""

    def __init__(self, message: str, status: int | None = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status is not None and self.status >= 500


class ReviewTimeoutError(CommitGuardError, TimeoutError):
    """The backend call did not finish before the deadline."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"AI review timed out after {timeout_ms / 1000:g} seconds")
        self.timeout_ms = timeout_ms


class ParseError(CommitGuardError):
    """The response did not contain text at the expected path."""
