"""uiscout-specific exception hierarchy."""

from __future__ import annotations


class UIScoutError(Exception):
    """Base exception for all uiscout-specific errors."""


class BrowserStartupError(UIScoutError):
    """Raised when the browser or its context cannot be launched.

    Nothing from a run is recoverable once this is raised; the CLI maps it
    to a non-zero exit.
    """


class NavigationError(UIScoutError):
    """Raised when navigation fails for a non-retryable reason.

    Attributes:
        url: The URL that could not be reached.
        reason: Short human-readable cause (``name not resolved`` etc.).
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed: {reason}")


class PageUnavailableError(UIScoutError):
    """Raised when the live page cannot be queried (closed, crashed, or mid-navigation)."""
