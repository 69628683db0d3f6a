"""Interaction primitives: type, click, native select, waits and scripts.

Each primitive waits for its target with a scaled timeout before acting.
A wait that is never satisfied raises Playwright's ``TimeoutError``;
nothing here retries.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from webpilot.browser.timing import TimeScaler

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

_TYPE_TIMEOUT_MS = 2000
_CLICK_TIMEOUT_MS = 4000
_CLICK_ENABLED_TIMEOUT_MS = 20_000
_SELECT_TIMEOUT_MS = 2000
_WAIT_ELEMENT_TIMEOUT_MS = 5000
_WAIT_TEXT_TIMEOUT_MS = 500_000

# True once any match of ``sel`` has text content containing ``txt``.
_TEXT_PRESENT_JS = """
([sel, txt]) => Array.from(document.querySelectorAll(sel)).some(
    (el) => el.textContent && el.textContent.includes(txt)
)
"""


def enabled_selector(selector: str) -> str:
    """Return a selector that only matches *selector* elements without ``disabled``."""
    return f"{selector}:not([disabled])"


async def type_into(
    page: Page,
    selector: str,
    text: str,
    *,
    timeout_ms: float = _TYPE_TIMEOUT_MS,
    timing: TimeScaler | None = None,
) -> None:
    """Wait for *selector* and send keystrokes reproducing *text* into it."""
    timing = timing or TimeScaler()
    await page.wait_for_selector(selector, state="attached", timeout=timing.scale(timeout_ms))
    await page.type(selector, text)
    logger.debug("Typed %d chars into %s", len(text), selector)


async def click(
    page: Page,
    selector: str,
    require_enabled: bool = False,
    *,
    timeout_ms: float = _CLICK_TIMEOUT_MS,
    enabled_timeout_ms: float = _CLICK_ENABLED_TIMEOUT_MS,
    timing: TimeScaler | None = None,
) -> None:
    """Wait for *selector*, settle briefly, then click it.

    Args:
        page: Playwright page.
        selector: Element to click.
        require_enabled: Also wait until the element has no ``disabled``
            attribute, using the longer *enabled_timeout_ms*.
        timeout_ms: Nominal wait when *require_enabled* is false.
        enabled_timeout_ms: Nominal wait when *require_enabled* is true.
        timing: Session scaler.
    """
    timing = timing or TimeScaler()
    if require_enabled:
        wait_selector = enabled_selector(selector)
        timeout = timing.scale(enabled_timeout_ms)
    else:
        wait_selector = selector
        timeout = timing.scale(timeout_ms)

    await page.wait_for_selector(wait_selector, state="attached", timeout=timeout)
    await timing.sleep(timing.pre_click_ms)
    await page.click(selector, timeout=timeout)
    logger.debug("Clicked %s", selector)


async def select_option(
    page: Page,
    selector: str,
    value: str,
    *,
    timeout_ms: float = _SELECT_TIMEOUT_MS,
    timing: TimeScaler | None = None,
) -> list[str]:
    """Wait for a native ``<select>`` and choose the option whose value is *value*.

    Returns:
        The option values Playwright reports as selected.
    """
    timing = timing or TimeScaler()
    await page.wait_for_selector(selector, state="attached", timeout=timing.scale(timeout_ms))
    selected = await page.select_option(selector, value)
    logger.debug("Selected %r in %s", value, selector)
    return selected


async def wait_for_element(
    page: Page,
    selector: str,
    text: str | None = None,
    *,
    timeout_ms: float | None = None,
    timing: TimeScaler | None = None,
) -> None:
    """Block until *selector* exists, or until one of its matches contains *text*.

    Without *text* this is a plain wait for the selector. With *text* the
    document is polled until any match's text content includes *text*
    (substring match, unlike ``locate``).

    Raises:
        playwright.async_api.TimeoutError: If the condition is never met.
    """
    timing = timing or TimeScaler()
    if not text:
        nominal = _WAIT_ELEMENT_TIMEOUT_MS if timeout_ms is None else timeout_ms
        await page.wait_for_selector(selector, state="attached", timeout=timing.scale(nominal))
        return

    nominal = _WAIT_TEXT_TIMEOUT_MS if timeout_ms is None else timeout_ms
    logger.debug("Waiting up to %sms for %r in %s", timing.scale(nominal), text, selector)
    await page.wait_for_function(_TEXT_PRESENT_JS, arg=[selector, text], timeout=timing.scale(nominal))


async def run_script(page: Page, script: str, *args: Any) -> Any:
    """Evaluate *script* (an expression or function source) in the page.

    At most one argument is forwarded, matching ``page.evaluate``.
    """
    if len(args) > 1:
        raise TypeError("run_script() forwards at most one argument to the page")
    if args:
        return await page.evaluate(script, args[0])
    return await page.evaluate(script)
