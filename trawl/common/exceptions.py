"""Exception types for scraping errors.

This module defines the exception hierarchy used across trawl:

- Assumption violations (``ScraperAssumptionException`` and subclasses) mean
  the page does not look the way the caller expected. Retrying will not help.
- Session errors (``SessionError`` and subclasses) come from the fetcher
  lifecycle or from transport failures.
- Transient errors (``TransientException`` and subclasses) might resolve if
  the same operation is retried after a short wait.
- ``RetryExhausted`` is raised once a retry budget runs out.
"""

from typing import Any


class ScraperAssumptionException(Exception):
    """Base class for scraper assumption violations.

    Scrapers make assumptions about page structure. When these assumptions
    are violated, they should raise clear, contextual exceptions that help
    diagnose the issue.
    """

    def __init__(
        self,
        message: str,
        request_url: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the assumption violation.
            request_url: The URL of the page that triggered this error.
            context: Optional dict of additional context (selector, counts, etc).
        """
        self.message = message
        self.request_url = request_url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        if self.request_url:
            parts.append(f"URL: {self.request_url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class NodeNotFound(ScraperAssumptionException):
    """Raised when a text or attribute read is attempted on a missing node."""

    def __init__(self, operation: str, request_url: str = "") -> None:
        self.operation = operation
        super().__init__(
            f"Cannot read {operation} of a node that was not found",
            request_url,
            {"operation": operation},
        )


class TableNotFound(ScraperAssumptionException):
    """Raised when a selector does not locate a usable table.

    Attributes:
        selector: The CSS selector that was used.
    """

    def __init__(
        self, selector: str, request_url: str = "", reason: str = ""
    ) -> None:
        self.selector = selector
        self.reason = reason or "no table matched the selector"
        super().__init__(
            f"Table not found: {self.reason}",
            request_url,
            {"selector": selector},
        )


class MalformedMarkup(ScraperAssumptionException):
    """Raised when the HTML parser cannot produce any tree at all.

    lxml is lenient and repairs almost any input, so this is rare. It is
    raised for empty documents and for input lxml rejects outright.
    """

    def __init__(self, reason: str, request_url: str = "") -> None:
        self.reason = reason
        super().__init__(f"Malformed markup: {reason}", request_url)


class ElementNotFound(ScraperAssumptionException):
    """Raised when an interactive element is missing from the live page.

    Attributes:
        selector: The CSS selector that matched nothing.
        action: The browser action that needed the element (click, type, ...).
    """

    def __init__(
        self, selector: str, action: str, request_url: str = ""
    ) -> None:
        self.selector = selector
        self.action = action
        super().__init__(
            f"No element to {action}: nothing matched '{selector}'",
            request_url,
            {"selector": selector, "action": action},
        )


class InvalidSelector(ValueError):
    """Raised when a CSS selector is empty or cannot be translated."""


# =============================================================================
# Session errors
# =============================================================================


class SessionError(Exception):
    """Base class for fetcher and session lifecycle errors."""


class SessionNotOpen(SessionError):
    """Raised when a fetcher is used before open() or after close()."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self.message = f"Cannot {operation}: session is not open"
        super().__init__(self.message)


class NavigationError(SessionError):
    """Raised when a page cannot be loaded because of a transport failure.

    Attributes:
        url: The URL that failed to load.
        reason: Description of the underlying failure.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        self.message = f"Navigation to {url} failed: {reason}"
        super().__init__(self.message)


# =============================================================================
# Transient exceptions
# =============================================================================


class TransientException(Exception):
    """Base class for transient errors that might resolve on retry.

    Transient exceptions represent temporary failures like server errors
    (5xx), timeouts, or a page that is still rendering. Unlike assumption
    exceptions, which indicate the scraper needs updating, transient
    exceptions suggest that retrying the operation may succeed.

    RetryPolicy is responsible for retry logic.
    """

    pass


class HTMLResponseAssumptionException(TransientException):
    """Raised when an HTTP response has an unexpected status code.

    Attributes:
        status_code: The actual HTTP status code received.
        expected_codes: List of status codes that were expected.
        url: The URL that returned the unexpected status.
        message: Human-readable error message.
    """

    def __init__(
        self,
        status_code: int,
        expected_codes: list[int],
        url: str,
    ) -> None:
        """Initialize the exception.

        Args:
            status_code: The actual status code received.
            expected_codes: List of expected status codes.
            url: The URL of the request.
        """
        self.status_code = status_code
        self.expected_codes = expected_codes
        self.url = url

        expected_str = ", ".join(str(code) for code in expected_codes)
        self.message = (
            f"HTTP {status_code} from {url} (expected one of: {expected_str})"
        )
        super().__init__(self.message)


class RequestTimeoutException(TransientException):
    """Raised when a request or a wait times out.

    Attributes:
        url: The URL that timed out.
        timeout_seconds: The timeout duration in seconds.
        message: Human-readable error message.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.message = f"Request to {url} timed out after {timeout_seconds}s"
        super().__init__(self.message)


# =============================================================================
# Retry
# =============================================================================


class RetryExhausted(Exception):
    """Raised when a retried operation kept failing until the time budget ran out.

    Attributes:
        last_reason: The last transient failure observed.
        attempts: Number of times the operation was invoked.
        elapsed: Seconds spent before giving up.
    """

    def __init__(
        self, last_reason: BaseException, attempts: int, elapsed: float
    ) -> None:
        self.last_reason = last_reason
        self.attempts = attempts
        self.elapsed = elapsed
        self.message = (
            f"Gave up after {attempts} attempts in {elapsed:.2f}s; "
            f"last failure: {last_reason!r}"
        )
        super().__init__(self.message)
