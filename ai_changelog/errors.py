"""
Custom exception types used across ai-changelog.

Defining explicit error classes makes it easier for the CLI to turn
user-facing failures into a one-line message and a non-zero exit code
while still letting unexpected bugs surface with a traceback.
"""

from __future__ import annotations

from typing import Optional


class ChangelogError(Exception):
    """Base class for all ai-changelog specific errors."""


class ConfigurationError(ChangelogError):
    """Raised when required configuration (e.g. an API key) is missing."""


class GitError(ChangelogError):
    """Raised when git operations fail."""


class NoBaseBranchError(ChangelogError):
    """Raised when no base reference can be resolved for the range."""


class AIClientError(ChangelogError):
    """
    Raised when the language-model endpoint cannot produce a response.

    status and body are populated for non-success HTTP responses.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseParseError(ChangelogError):
    """Raised when the model response cannot be parsed into entries."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(f"{message}\nResponse: {raw_text}")
        self.raw_text = raw_text


class BreakingChangesBlocked(ChangelogError):
    """Raised when breaking changes are found and blocking is enabled."""
