"""Page navigation with a post-load settle delay.

Navigation waits for ``networkidle`` by default. Whatever the outcome, the
session then pauses for its post-navigation settle delay so late in-page
scripts can finish before the next action. Failures are not retried:
timeouts propagate as Playwright ``TimeoutError`` and network errors that a
retry cannot fix are raised as ``NavigationError``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal

from playwright.async_api import Error as PlaywrightError

from webpilot.browser.timing import TimeScaler
from webpilot.exceptions import NavigationError

if TYPE_CHECKING:
    from playwright.async_api import Page, Response

logger = logging.getLogger(__name__)

# Playwright error substrings that indicate non-retryable navigation failures.
_NON_RETRYABLE_ERRORS: tuple[str, ...] = (
    "ERR_NAME_NOT_RESOLVED",
    "ERR_CONNECTION_REFUSED",
    "ERR_CONNECTION_RESET",
    "ERR_CONNECTION_CLOSED",
    "ERR_SSL_PROTOCOL_ERROR",
    "ERR_CERT_AUTHORITY_INVALID",
    "ERR_CERT_COMMON_NAME_INVALID",
    "ERR_ADDRESS_UNREACHABLE",
)

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]

_NAVIGATION_TIMEOUT_MS = 30_000


def classify_navigation_error(exc: PlaywrightError) -> str | None:
    """Return a short reason if *exc* is a non-retryable network failure, else ``None``."""
    error_msg = str(exc)
    for pattern in _NON_RETRYABLE_ERRORS:
        if pattern in error_msg:
            return pattern.replace("ERR_", "").replace("_", " ").lower()
    return None


async def goto(
    page: Page,
    url: str,
    *,
    timing: TimeScaler | None = None,
    timeout_ms: float = _NAVIGATION_TIMEOUT_MS,
    **options: Any,
) -> Response | None:
    """Navigate *page* to *url*, then settle.

    Args:
        page: Playwright page instance.
        url: Target URL.
        timing: Session scaler; scales *timeout_ms* and provides the settle delay.
        timeout_ms: Nominal navigation timeout.
        **options: Extra ``page.goto`` keyword arguments. They win over the
            defaults (``wait_until="networkidle"`` and the scaled timeout).

    Returns:
        The main-frame ``Response``, or ``None``.

    Raises:
        NavigationError: On DNS, connection or certificate failures.
        playwright.async_api.TimeoutError: If the wait condition is not met in time.
    """
    timing = timing or TimeScaler()
    goto_options: dict[str, Any] = {
        "wait_until": "networkidle",
        "timeout": timing.scale(timeout_ms),
        **options,
    }
    logger.debug("goto %s (wait_until=%s, timeout=%sms)", url, goto_options["wait_until"], goto_options["timeout"])
    try:
        return await page.goto(url, **goto_options)
    except PlaywrightError as exc:
        reason = classify_navigation_error(exc)
        if reason:
            logger.warning("Navigation to %s failed (non-retryable): %s", url, reason)
            raise NavigationError(url, reason) from exc
        raise
    finally:
        await timing.sleep(timing.post_navigation_ms)
