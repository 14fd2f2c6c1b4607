"""Custom exceptions for the GitHub issue bridge."""

from __future__ import annotations


class GitHubServiceError(Exception):
    """The issue tracker call failed or returned something we can't use."""

    def __init__(self, message: str, status_line: str | None = None) -> None:
        super().__init__(message)
        self.status_line = status_line


class PermissionDeniedError(GitHubServiceError):
    """The tracker rejected the credentials (401 or 403)."""


class TransportError(Exception):
    """Network or URL level failure raised by the HTTP transport."""


class SynchronizationError(Exception):
    """Posting local task changes to the tracker failed."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
