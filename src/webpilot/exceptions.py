"""webpilot exception hierarchy.

Waits that time out surface Playwright's own ``TimeoutError`` unchanged;
the classes below cover the failures webpilot detects itself.
"""

from __future__ import annotations


class WebPilotError(Exception):
    """Base exception for all webpilot-specific errors."""


class ElementNotFoundError(WebPilotError):
    """Raised when an element required as a precondition is missing.

    Attributes:
        selector: The selector that resolved to nothing.
    """

    def __init__(self, selector: str, detail: str = "") -> None:
        self.selector = selector
        message = f"Element not found for selector: {selector}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class OptionNotFoundError(WebPilotError):
    """Raised by a strict custom select when no option text matches.

    Attributes:
        value: The option text that was requested.
        selector: The option selector that was scanned.
    """

    def __init__(self, value: str, selector: str) -> None:
        self.value = value
        self.selector = selector
        super().__init__(f"No option with text {value!r} under selector: {selector}")


class NavigationError(WebPilotError):
    """Raised when navigation fails for a reason a retry will not fix.

    Attributes:
        url: The URL that was being loaded.
        reason: Short description of the network failure.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed: {reason}")


class SessionStateError(WebPilotError):
    """Raised when an operation is invalid for the session's lifecycle state."""


class SessionNotOpenError(SessionStateError):
    """Raised when a page operation is attempted before ``open()``."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: session is not open. Call open() first.")


class SessionClosedError(SessionStateError):
    """Raised when any operation is attempted after ``close()``."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation}: session is closed.")
