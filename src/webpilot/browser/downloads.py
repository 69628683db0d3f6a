"""Download behavior through the Chrome DevTools Protocol.

Playwright normally keeps downloads in a temporary directory it owns.
``configure_downloads`` tells the browser, over a CDP session attached to
the page, to write every download straight into a caller-chosen directory
instead, without prompting.

Chrome profile preferences (``download.prompt_for_download``,
``plugins.always_open_pdf_externally``) are not set: Playwright's
``chromium.launch`` has no way to pass them. In headed mode a PDF link
therefore opens in the built-in viewer instead of landing in the download
directory; headless Chromium downloads PDFs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


async def configure_downloads(page: Page, path: str | Path) -> str:
    """Allow downloads from *page* into *path*.

    The directory is created if it does not exist.

    Args:
        page: Playwright page whose browser context receives the CDP session.
        path: Destination directory for downloaded files.

    Returns:
        The absolute download directory as a string.
    """
    download_dir = Path(path).expanduser().resolve()
    download_dir.mkdir(parents=True, exist_ok=True)

    client = await page.context.new_cdp_session(page)
    try:
        await client.send(
            "Page.setDownloadBehavior",
            {"behavior": "allow", "downloadPath": str(download_dir)},
        )
    finally:
        await client.detach()
    logger.info("Downloads enabled into %s", download_dir)
    return str(download_dir)
