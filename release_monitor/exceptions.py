"""Exceptions for GitHub Release Monitor.

Custom exception hierarchy for a monitoring run. Every failure a component
can report is a ReleaseMonitorError subclass so the run orchestrator can
tell them apart from programming errors.
"""

from typing import List, Optional


class ReleaseMonitorError(Exception):
    """Base exception for all release monitor errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class ConfigInvalidError(ReleaseMonitorError):
    """Configuration is missing required fields or has malformed values."""

    def __init__(self, errors: List[str], original_error: Optional[Exception] = None):
        self.errors = list(errors)
        message = "Configuration errors: " + "; ".join(self.errors)
        super().__init__(message, original_error)


class SourceUnavailableError(ReleaseMonitorError):
    """The release source could not be reached (timeout, DNS, TLS)."""

    def __init__(self, url: str, original_error: Optional[Exception] = None):
        self.url = url
        message = f"Unable to reach {url}"
        super().__init__(message, original_error)


class SourceRejectedError(ReleaseMonitorError):
    """The release source answered with a non-success status."""

    def __init__(self, url: str, status_code: int, detail: str = ""):
        self.url = url
        self.status_code = status_code
        self.detail = detail
        message = f"Request to {url} rejected with HTTP {status_code}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SourceAuthError(SourceRejectedError):
    """Credential missing, invalid, or lacking access to the repository."""


class SourceRateLimitError(SourceRejectedError):
    """API rate limit exceeded."""


class SourceNotFoundError(SourceRejectedError):
    """Repository or release does not exist (or is hidden from the credential)."""


class SourceMalformedError(ReleaseMonitorError):
    """Response payload could not be parsed into releases or assets."""

    def __init__(self, url: str, reason: str, original_error: Optional[Exception] = None):
        self.url = url
        self.reason = reason
        message = f"Malformed response from {url}: {reason}"
        super().__init__(message, original_error)


class DownloadFailedError(ReleaseMonitorError):
    """A matching asset could not be transferred to disk."""

    def __init__(
        self,
        asset_name: Optional[str],
        tag: str,
        original_error: Optional[Exception] = None
    ):
        self.asset_name = asset_name
        self.tag = tag
        if asset_name is None:
            message = f"Failed to create download directory for release {tag}"
        else:
            message = f"Failed to download '{asset_name}' for release {tag}"
        super().__init__(message, original_error)


class StoreError(ReleaseMonitorError):
    """State file could not be read or written."""

    def __init__(self, path: str, operation: str, original_error: Optional[Exception] = None):
        self.path = path
        self.operation = operation
        message = f"Failed to {operation} state file '{path}'"
        super().__init__(message, original_error)


class PruneFailedError(ReleaseMonitorError):
    """An old version directory could not be removed. Never fatal."""

    def __init__(
        self,
        path: str,
        original_error: Optional[Exception] = None,
        action: str = "remove old release directory"
    ):
        self.path = path
        self.action = action
        message = f"Failed to {action} '{path}'"
        super().__init__(message, original_error)
