"""Typed exception hierarchy for md-publish"""

from typing import Optional


class PublishError(Exception):
    """Base exception for all md-publish errors."""


class ConfigError(PublishError, ValueError):
    """Raised when the configuration file is missing, malformed, or incomplete."""


class ValidationError(PublishError, ValueError):
    """Raised for structurally invalid local input such as a source path escaping the root."""


class NotFoundError(PublishError):
    """Raised when a source directory or named target does not exist."""


class RemoteApiError(PublishError):
    """Raised when a remote store call fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RateLimitedError(RemoteApiError):
    """Raised when the remote store signals a rate limit (HTTP 429)."""

    def __init__(self, retry_after: Optional[float] = None):
        super().__init__("Rate limited by remote store", status=429)
        self.retry_after = retry_after
