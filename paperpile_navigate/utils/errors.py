"""Custom exceptions for paperpile-navigate."""
from typing import Optional


class NavigateError(Exception):
    """Base exception for all paperpile-navigate errors."""

    pass


class APIError(NavigateError):
    """External API request failed."""

    pass


class RateLimitError(APIError):
    """External API rate limit exceeded (HTTP 429)."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class ValidationError(NavigateError):
    """Input rejected before reaching the store."""

    pass


class NotFoundError(NavigateError):
    """Requested record does not exist."""

    pass

