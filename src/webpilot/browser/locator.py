"""Element lookup and text/value extraction.

Two failure modes:

- ``locate`` is a *soft* lookup. Absence is a normal outcome, so a wait
  that times out yields ``None`` instead of raising.
- ``read_value`` is a *hard* read. Callers expect the element to exist,
  so Playwright's ``TimeoutError`` propagates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.async_api import TimeoutError as PlaywrightTimeout

from webpilot.browser.timing import TimeScaler

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

logger = logging.getLogger(__name__)

_LOCATE_TIMEOUT_MS = 2000
_READ_TIMEOUT_MS = 2000

# Picks the element at ``index`` (falling back to the first match) and
# returns its live value for text controls, its text content otherwise.
_READ_VALUE_JS = """
(elements, index) => {
    const el = index !== null && index !== undefined && elements[index] ? elements[index] : elements[0];
    if (!el) return '';
    if (el instanceof HTMLInputElement || el instanceof HTMLTextAreaElement) {
        return el.value;
    }
    return el.textContent;
}
"""


def normalize_text(raw: str | None) -> str:
    """Collapse whitespace runs to a single space and trim; ``None`` becomes ``""``."""
    if not raw:
        return ""
    return " ".join(raw.split())


async def element_text(element: ElementHandle) -> str:
    """Return the trimmed text content of *element* (``""`` when it has none)."""
    content = await element.text_content()
    return (content or "").strip()


async def locate(
    page: Page,
    selector: str,
    *,
    index: int | None = None,
    text: str | None = None,
    timeout_ms: float = _LOCATE_TIMEOUT_MS,
    timing: TimeScaler | None = None,
) -> ElementHandle | None:
    """Resolve *selector* to at most one element handle.

    Args:
        page: Playwright page to search.
        selector: CSS (or Playwright) selector.
        index: Ordinal among the current matches. Out of range yields ``None``.
        text: Exact trimmed text the element must carry. Substrings do not match.
        timeout_ms: Nominal wait for the first match to appear.
        timing: Session scaler applied to *timeout_ms*.

    Returns:
        The matching ``ElementHandle``, or ``None`` when nothing qualifies.
    """
    timing = timing or TimeScaler()
    try:
        await page.wait_for_selector(selector, state="attached", timeout=timing.scale(timeout_ms))
    except PlaywrightTimeout:
        logger.debug("locate: no match for %s within %sms", selector, timing.scale(timeout_ms))
        return None

    elements = await page.query_selector_all(selector)

    if index is not None:
        if 0 <= index < len(elements):
            return elements[index]
        logger.debug("locate: index %d out of range for %s (%d matches)", index, selector, len(elements))
        return None

    if text is not None:
        for element in elements:
            if await element_text(element) == text:
                return element
        logger.debug("locate: no match for %s with text %r", selector, text)
        return None

    return elements[0] if elements else None


async def read_value(
    page: Page,
    selector: str,
    *,
    index: int | None = None,
    timeout_ms: float = _READ_TIMEOUT_MS,
    timing: TimeScaler | None = None,
) -> str:
    """Read the value (inputs, textareas) or text content (anything else) of an element.

    Raises:
        playwright.async_api.TimeoutError: If *selector* never matches.
    """
    timing = timing or TimeScaler()
    await page.wait_for_selector(selector, state="attached", timeout=timing.scale(timeout_ms))
    raw = await page.eval_on_selector_all(selector, _READ_VALUE_JS, index)
    return normalize_text(raw)
