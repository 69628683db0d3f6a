"""Browser target enumeration and stray blank-tab cleanup.

Extensions and OS-level prompts sometimes make Chrome spawn empty tabs
that no page reference in the session knows about. They show up as
``page`` targets that have neither a URL nor a title yet.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from playwright.async_api import Browser

logger = logging.getLogger(__name__)


def is_blank_tab(target: dict[str, Any]) -> bool:
    """True for a page target with an empty URL and an empty title."""
    return target.get("type") == "page" and target.get("url") == "" and target.get("title") == ""


def find_blank_tabs(targets: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Filter ``Target.getTargets`` entries down to never-navigated tabs."""
    return [t for t in targets if is_blank_tab(t)]


async def close_blank_tabs(browser: Browser) -> list[str]:
    """Close every blank page target of *browser*.

    Returns:
        The ``targetId`` of each closed tab.
    """
    client = await browser.new_browser_cdp_session()
    closed: list[str] = []
    try:
        await client.send("Target.setDiscoverTargets", {"discover": True})
        result = await client.send("Target.getTargets")
        for tab in find_blank_tabs(result.get("targetInfos", [])):
            await client.send("Target.closeTarget", {"targetId": tab["targetId"]})
            closed.append(tab["targetId"])
    finally:
        await client.detach()

    if closed:
        logger.info("Closed %d blank tab(s)", len(closed))
    return closed
