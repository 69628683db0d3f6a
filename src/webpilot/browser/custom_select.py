"""Driver for non-native dropdown widgets.

Component libraries render selects as a trigger element plus an option
panel that only exists after the trigger is clicked. ``custom_select``
opens the panel, scans the options rendered under the trigger and clicks
the first one whose text matches exactly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from webpilot.browser.locator import element_text
from webpilot.browser.timing import TimeScaler
from webpilot.exceptions import ElementNotFoundError, OptionNotFoundError

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

logger = logging.getLogger(__name__)

_CUSTOM_SELECT_TIMEOUT_MS = 2000


async def _resolve_trigger(page: Page, selector: str, index: int | None) -> ElementHandle | None:
    if index is None:
        return await page.query_selector(selector)
    triggers = await page.query_selector_all(selector)
    if 0 <= index < len(triggers):
        return triggers[index]
    return None


async def custom_select(
    page: Page,
    trigger_selector: str,
    option_selector: str,
    value: str,
    *,
    index: int | None = None,
    strict: bool = False,
    timeout_ms: float = _CUSTOM_SELECT_TIMEOUT_MS,
    timing: TimeScaler | None = None,
) -> bool:
    """Open a custom dropdown and click the option whose trimmed text equals *value*.

    Args:
        page: Playwright page.
        trigger_selector: Element that opens the dropdown.
        option_selector: Option elements, searched under the trigger.
        value: Exact option text to pick.
        index: Which trigger to use when several match; first otherwise.
        strict: Raise ``OptionNotFoundError`` instead of returning ``False``
            when no option matches.
        timeout_ms: Nominal wait for both the trigger and the options.
        timing: Session scaler.

    Returns:
        ``True`` if an option was clicked, ``False`` if none matched.

    Raises:
        ElementNotFoundError: If the trigger cannot be resolved.
        OptionNotFoundError: If *strict* and no option matches.
        playwright.async_api.TimeoutError: If the trigger or options never appear.
    """
    timing = timing or TimeScaler()
    timeout = timing.scale(timeout_ms)

    await page.wait_for_selector(trigger_selector, state="attached", timeout=timeout)
    trigger = await _resolve_trigger(page, trigger_selector, index)
    if trigger is None:
        detail = f"index {index}" if index is not None else ""
        raise ElementNotFoundError(trigger_selector, detail)

    await trigger.click()
    await timing.sleep(timing.post_trigger_ms)

    await page.wait_for_selector(option_selector, state="attached", timeout=timeout)
    options = await trigger.query_selector_all(option_selector)

    for option in options:
        if await element_text(option) == value:
            await option.click()
            logger.debug("Custom select %s: picked %r", trigger_selector, value)
            return True

    if strict:
        raise OptionNotFoundError(value, option_selector)
    logger.warning(
        "Custom select %s: no option %r among %d under %s",
        trigger_selector,
        value,
        len(options),
        option_selector,
    )
    return False
