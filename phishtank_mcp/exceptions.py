"""Exception hierarchy for PhishTank tool calls."""

from typing import Any

RATE_LIMIT_STATUS_CODE = 509


class PhishTankError(Exception):
    """Base exception for all PhishTank MCP errors.

    Attributes:
        message: Error message
        context: Additional context about the error
        original_error: Original exception if this wraps another error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        """Human readable message for tool results."""
        return self.message


class InvalidArgumentError(PhishTankError):
    """Raised when tool arguments fail validation.

    Always raised before any cache or network access.
    """


class UnknownToolError(PhishTankError):
    """Raised when a tool name is not registered."""


class UpstreamError(PhishTankError):
    """Raised when PhishTank returns a non-success status or is unreachable.

    Common context fields:
        - url: URL that failed
        - status_code: HTTP status code (None for transport failures)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, context=context, original_error=original_error)
        self.status_code = status_code
        self.body = body

    def describe(self) -> str:
        return f"PhishTank API error ({self.status_code}): {self.body or self.message}"


class UpstreamRateLimitedError(UpstreamError):
    """Raised when PhishTank signals that the request limit was exceeded."""

    def describe(self) -> str:
        return (
            "Rate limit exceeded. Please try again later. "
            "Consider using an API key for higher limits."
        )
