"""Error taxonomy for slackcli."""

from typing import Optional


class SlackCliError(Exception):
    """Base error. ``hint`` is an optional remediation shown to the user."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class ValidationError(SlackCliError):
    """Bad local input, detected before any remote call."""


class NotFoundError(SlackCliError):
    """Target is absent from the working set."""


class SlackApiError(SlackCliError):
    """A remote call failed (Slack error code, HTTP status or transport)."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        error: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, hint=hint)
        self.method = method
        self.error = error


class AuthError(SlackApiError):
    """Credentials are missing, invalid or expired."""


class RateLimitError(SlackApiError):
    """HTTP 429 from Slack."""

    def __init__(self, message: str, method: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message, method=method, error="ratelimited")
        self.retry_after = retry_after
